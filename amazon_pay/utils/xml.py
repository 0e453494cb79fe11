import xml.etree.ElementTree as ET
from typing import Optional, Union

from amazon_pay.utils.strings import to_bytes


def strip_namespaces(element: ET.Element) -> ET.Element:
    """Removes the ``{namespace}`` prefix ElementTree puts on tags of namespaced documents, in place."""
    for node in element.iter():
        if isinstance(node.tag, str) and node.tag.startswith("{"):
            node.tag = node.tag.split("}", 1)[1]
    return element


def parse_xml(data: Union[str, bytes]) -> ET.Element:
    """
    Parses an XML document and returns its root element with namespaces stripped, so that MWS responses (which
    declare a default namespace) can be queried with plain tag names.
    Raises ``xml.etree.ElementTree.ParseError`` for malformed documents.
    """
    return strip_namespaces(ET.fromstring(to_bytes(data)))


def find_last_child_text(root: ET.Element, xpath: str, child_tag: str) -> Optional[str]:
    """
    Finds all elements matching ``xpath`` and returns the text of the ``child_tag`` child of the last one.
    The path is evaluated from the document, i.e. it starts with the root tag
    (``GetOrderReferenceDetailsResponse/GetOrderReferenceDetailsResult/...``).

    :return: the text, or None if no element matches or the last match has no such child
    """
    if xpath.startswith("//"):
        xpath = "." + xpath
    else:
        xpath = xpath.lstrip("/")

    document = ET.Element("document")
    document.append(root)

    matches = document.findall(xpath)
    if not matches:
        return None
    child = matches[-1].find(child_tag)
    return child.text if child is not None else None
