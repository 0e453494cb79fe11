from amazon_pay.utils.xml import find_last_child_text, parse_xml


def test_parse_xml_strips_namespaces():
    root = parse_xml('<a xmlns="urn:test"><b><c>1</c></b></a>')
    assert [element.tag for element in root.iter()] == ["a", "b", "c"]


def test_find_last_child_text():
    root = parse_xml("<a><b><c>1</c></b><b><c>2</c></b></a>")
    assert find_last_child_text(root, "a/b", "c") == "2"
    assert find_last_child_text(root, "//b", "c") == "2"
    assert find_last_child_text(root, "a/x", "c") is None
