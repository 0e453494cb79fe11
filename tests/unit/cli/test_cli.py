import json
from unittest import mock

import pytest
from click.testing import CliRunner

from amazon_pay import __version__, config
from amazon_pay.cli.amazon_pay import amazon_pay as cli
from amazon_pay.cli.amazon_pay import parse_headers
from amazon_pay.client import Client
from amazon_pay.exceptions import IpnWasNotAuthenticError
from amazon_pay.ipn.handler import IpnHandler
from amazon_pay.response import Response

SERVICE_STATUS_XML = b"""<GetServiceStatusResponse xmlns="http://mws.amazonaws.com/schema/OffAmazonPayments/2013-01-01">
  <GetServiceStatusResult><Status>GREEN</Status></GetServiceStatusResult>
</GetServiceStatusResponse>"""

NOTIFICATION = {
    "Type": "Notification",
    "MessageId": "cf5543af-dd65-5f74-8ccf-0a410ef6d9a1",
    "Message": json.dumps({"NotificationType": "PaymentAuthorize", "SellerId": "A1B2C3"}),
    "SigningCertURL": "https://sns.us-east-1.amazonaws.com/SimpleNotificationService-abc.pem",
}


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def credentials(monkeypatch):
    monkeypatch.setattr(config, "MERCHANT_ID", "MERCHANT")
    monkeypatch.setattr(config, "ACCESS_KEY", "ACCESS_KEY")
    monkeypatch.setattr(config, "SECRET_KEY", "SECRET_KEY")
    monkeypatch.setattr(config, "PROXY_ADDR", None)
    monkeypatch.setattr(config, "AMAZON_PAY_LOG", False)
    monkeypatch.setattr(config, "LOG_FILE", None)
    monkeypatch.setattr(config, "PRIVATE_KEY", None)
    monkeypatch.setattr(config, "DEBUG", False)


@pytest.fixture
def body_file(tmp_path):
    path = tmp_path / "notification.json"
    path.write_text(json.dumps(NOTIFICATION))
    return str(path)


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_help(runner):
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "service-status" in result.output
    assert "verify-ipn" in result.output


def test_sign(runner):
    result = runner.invoke(cli, ["sign", "--secret-key", "SECRET_KEY", "test signature code"])
    assert result.exit_code == 0
    assert result.output.strip() == "VWty3pyWd3Ol4pw3L7nFQ%2FxI6SXXsV5T2aRdoNPVMg0%3D"


def test_sign_reads_secret_key_from_environment(runner, monkeypatch):
    monkeypatch.setenv("AMAZON_PAY_SECRET_KEY", "SECRET_KEY")
    result = runner.invoke(cli, ["sign", "test signature code"])
    assert result.output.strip() == "VWty3pyWd3Ol4pw3L7nFQ%2FxI6SXXsV5T2aRdoNPVMg0%3D"


class TestServiceStatus:
    def test_status(self, runner, credentials, make_response):
        with mock.patch.object(Client, "get_service_status") as get_service_status:
            get_service_status.return_value = Response(make_response(200, SERVICE_STATUS_XML))
            result = runner.invoke(cli, ["service-status"])

        assert result.exit_code == 0
        assert "code=200" in result.output
        assert "status=GREEN" in result.output

    def test_error_response(self, runner, credentials, make_response):
        with mock.patch.object(Client, "get_service_status") as get_service_status:
            get_service_status.return_value = Response(make_response(401, b"<ErrorResponse/>"))
            result = runner.invoke(cli, ["service-status"])

        assert result.exit_code == 1
        assert "code=401" in result.output

    def test_invalid_region(self, runner, credentials):
        result = runner.invoke(cli, ["service-status", "--region", "xx"])
        assert result.exit_code == 1
        assert "Invalid Region Code" in result.output


class TestVerifyIpn:
    def test_authentic(self, runner, body_file):
        with mock.patch.object(IpnHandler, "authentic", return_value=True):
            result = runner.invoke(
                cli, ["verify-ipn", "--body", body_file, "--header", "x-amz-sns-message-type=Notification"]
            )

        assert result.exit_code == 0
        assert "notification is authentic" in result.output
        assert "PaymentAuthorize" in result.output

    def test_not_authentic(self, runner, body_file):
        with mock.patch.object(
            IpnHandler, "authentic", side_effect=IpnWasNotAuthenticError("Error - something failed")
        ):
            result = runner.invoke(cli, ["verify-ipn", "--body", body_file])

        assert result.exit_code == 1
        assert "Error - something failed" in result.output

    def test_body_is_not_json(self, runner, tmp_path):
        path = tmp_path / "notification.txt"
        path.write_text("Type=Notification")

        result = runner.invoke(
            cli, ["verify-ipn", "--body", str(path), "--header", "x-amz-sns-message-type=Notification"]
        )

        assert result.exit_code == 1
        assert "notification body is not valid JSON" in result.output
        assert not isinstance(result.exception, ValueError)

    def test_missing_header_is_rejected_without_network(self, runner, body_file):
        with mock.patch("amazon_pay.ipn.certificate.http_request") as http_request:
            result = runner.invoke(cli, ["verify-ipn", "--body", body_file])

        assert result.exit_code == 1
        assert "x-amz-sns-message-type" in result.output
        http_request.assert_not_called()


def test_parse_headers():
    assert parse_headers(["a=1", "b = x=y"]) == {"a": "1", "b": "x=y"}
