import pytest

from amazon_pay.utils.sanitize import sanitize_request_data, sanitize_response_data


class TestSanitizeRequestData:
    def test_removes_sensitive_value(self):
        assert (
            sanitize_request_data("Action=Authorize&SellerNote=secret stuff&SellerId=A1")
            == "Action=Authorize&SellerNote=*REMOVED*&SellerId=A1"
        )

    def test_keeps_separator(self):
        assert sanitize_request_data("&SellerNote=secret stuff&") == "&SellerNote=*REMOVED*&"

    @pytest.mark.parametrize(
        "data,expected",
        [
            ("SellerNote=secret", "SellerNote=*REMOVED*"),
            ("?SellerNote=secret", "?SellerNote=*REMOVED*"),
            (
                "OrderReferenceAttributes.SellerNote=secret&Action=X",
                "OrderReferenceAttributes.SellerNote=*REMOVED*&Action=X",
            ),
            ("SellerCaptureNote=a&SellerRefundNote=b", "SellerCaptureNote=*REMOVED*&SellerRefundNote=*REMOVED*"),
        ],
    )
    def test_field_positions(self, data, expected):
        assert sanitize_request_data(data) == expected

    def test_does_not_touch_other_fields(self):
        data = "Action=Authorize&AmazonOrderReferenceId=S01-123&MySellerNote=visible"
        assert sanitize_request_data(data) == data

    def test_idempotent(self):
        data = "Action=Refund&SellerRefundNote=refund%20reason&SellerId=A1"
        once = sanitize_request_data(data)
        assert sanitize_request_data(once) == once

    def test_empty(self):
        assert sanitize_request_data(None) == ""
        assert sanitize_request_data(b"SellerNote=x") == "SellerNote=*REMOVED*"


class TestSanitizeResponseData:
    def test_removes_element_content(self):
        assert sanitize_response_data("<SellerNote>secret</SellerNote>") == "<SellerNote>*REMOVED*</SellerNote>"

    def test_multiline_content(self):
        xml = (
            "<OrderReferenceDetails><Buyer>\n  <Name>Jane</Name>\n  <Email>jane@example.com</Email>\n</Buyer>"
            "<State>Open</State></OrderReferenceDetails>"
        )
        assert sanitize_response_data(xml) == (
            "<OrderReferenceDetails><Buyer>*REMOVED*</Buyer><State>Open</State></OrderReferenceDetails>"
        )

    def test_each_occurrence_is_replaced_separately(self):
        xml = "<SellerNote>a</SellerNote><Amount>10</Amount><SellerNote>b</SellerNote>"
        assert sanitize_response_data(xml) == (
            "<SellerNote>*REMOVED*</SellerNote><Amount>10</Amount><SellerNote>*REMOVED*</SellerNote>"
        )

    def test_idempotent(self):
        xml = b"<PhysicalDestination><City>Seattle</City></PhysicalDestination>"
        once = sanitize_response_data(xml)
        assert sanitize_response_data(once) == once

    def test_empty(self):
        assert sanitize_response_data(b"") == ""
