import xml.etree.ElementTree as ET
from typing import Mapping, Optional

import requests

from amazon_pay.utils.xml import find_last_child_text, parse_xml


class Response:
    """
    The result of an MWS call. Any HTTP status is wrapped, use ``success`` to tell a successful call from one that
    MWS rejected. The body is only parsed as XML when ``to_xml`` or ``get_element`` are used.
    """

    def __init__(self, response: requests.Response):
        self._response = response
        self._xml: Optional[ET.Element] = None

    @property
    def body(self) -> str:
        return self._response.text

    @property
    def code(self) -> str:
        return str(self._response.status_code)

    @property
    def success(self) -> bool:
        return self.code == "200"

    @property
    def headers(self) -> Mapping[str, str]:
        return self._response.headers

    def to_xml(self) -> ET.Element:
        """
        Returns the root element of the parsed body, namespaces removed from all tags.
        Raises ``xml.etree.ElementTree.ParseError`` if the body is not well-formed XML.
        """
        if self._xml is None:
            self._xml = parse_xml(self._response.content)
        return self._xml

    def get_element(self, xpath: str, xml_element: str) -> Optional[str]:
        """
        Returns the text of the ``xml_element`` child of the last element matching ``xpath``, e.g.
        ``get_element("GetOrderReferenceDetailsResponse/GetOrderReferenceDetailsResult/OrderReferenceDetails/"
        "OrderReferenceStatus", "State")``. Returns None if nothing matches.
        """
        return find_last_child_text(self.to_xml(), xpath, xml_element)

    def __repr__(self):
        return f"<Response [{self.code}]>"
