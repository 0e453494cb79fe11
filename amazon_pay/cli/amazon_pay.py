import json
import logging
import os
import sys
from typing import Dict, Iterable, Optional

import click
import requests
from rich.markup import escape

from amazon_pay import __version__, config
from amazon_pay.exceptions import AmazonPayError, IpnWasNotAuthenticError

from .console import console

SERVICE_STATUS_XPATH = "GetServiceStatusResponse/GetServiceStatusResult"

NOTIFICATION_FIELDS = (
    ("Type", "type"),
    ("MessageId", "message_id"),
    ("TopicArn", "topic_arn"),
    ("Timestamp", "timestamp"),
    ("NotificationType", "notification_type"),
    ("SellerId", "seller_id"),
    ("ReleaseEnvironment", "environment"),
    ("Version", "version"),
)


def _setup_cli_debug():
    from amazon_pay.logging.setup import setup_logging_for_cli

    config.DEBUG = True
    os.environ["DEBUG"] = "1"

    setup_logging_for_cli(logging.DEBUG)


@click.group(name="amazon-pay", help="Command line tools for the Amazon Pay MWS API")
@click.version_option(version=__version__, message="%(version)s")
@click.option("--debug", is_flag=True, help="Enable CLI debugging mode")
@click.option("--profile", type=str, help="Set the configuration profile")
def amazon_pay(debug, profile):
    if profile:
        os.environ["CONFIG_PROFILE"] = profile
    if debug:
        _setup_cli_debug()


@amazon_pay.command(name="service-status", help="Query the status of the MWS API")
@click.option("--sandbox/--live", default=None, help="Query the sandbox or the live environment")
@click.option("--region", type=str, help="Region code (jp, uk, de, eu, us, na)")
def cmd_service_status(sandbox: Optional[bool], region: Optional[str]):
    from amazon_pay.client import Client

    overrides = {}
    if sandbox is not None:
        overrides["sandbox"] = sandbox
    if region:
        overrides["region"] = region

    try:
        client = Client.from_env(**overrides)
        with console.status("Querying MWS service status"):
            response = client.get_service_status()
    except AmazonPayError as e:
        print_error(str(e))
        sys.exit(1)

    status = response.get_element(SERVICE_STATUS_XPATH, "Status") if response.success else None
    console.print(f"code={response.code}")
    console.print(f"status={status or 'unknown'}")
    if not response.success:
        sys.exit(1)


@amazon_pay.command(name="verify-ipn", help="Authenticate an IPN notification and print its content")
@click.option(
    "--body",
    "body_file",
    required=True,
    type=click.File("rb"),
    help="File holding the body of the notification request ('-' for stdin)",
)
@click.option("--header", "headers", multiple=True, help="Request header, as name=value (repeatable)")
def cmd_verify_ipn(body_file, headers: Iterable[str]):
    from amazon_pay.ipn.handler import IpnHandler

    try:
        handler = IpnHandler(parse_headers(headers), body_file.read())
        handler.authentic()
    except json.JSONDecodeError as e:
        print_error(f"notification body is not valid JSON: {e}")
        sys.exit(1)
    except IpnWasNotAuthenticError as e:
        print_error(str(e))
        sys.exit(1)
    except requests.RequestException as e:
        print_error(f"could not download the signing certificate: {e}")
        sys.exit(1)

    print_notification(handler)


@amazon_pay.command(name="sign", help="Print the signature of a signable string, for debugging requests")
@click.option(
    "--secret-key",
    envvar="AMAZON_PAY_SECRET_KEY",
    required=True,
    help="MWS secret key (default: $AMAZON_PAY_SECRET_KEY)",
)
@click.argument("body")
def cmd_sign(secret_key: str, body: str):
    from amazon_pay.signing import sign

    # the signable string spans several lines, which are passed escaped on the command line
    body = body.replace("\\n", "\n")
    click.echo(sign(body, secret_key))


def parse_headers(headers: Iterable[str]) -> Dict[str, str]:
    result = {}
    for header in headers:
        name, separator, value = header.partition("=")
        if not separator:
            raise click.BadParameter(f"expected name=value, got {header!r}", param_hint="--header")
        result[name.strip()] = value.strip()
    return result


def print_notification(handler):
    from rich.table import Table

    table = Table()
    table.add_column("Field")
    table.add_column("Value")

    for name, attribute in NOTIFICATION_FIELDS:
        table.add_row(name, str(getattr(handler, attribute) or ""))

    console.print("[green]:heavy_check_mark:[/green] notification is authentic")
    console.print(table)


def print_error(error: str):
    symbol = "[bold][red]:heavy_multiplication_x: ERROR[/red][/bold]"
    console.print(f"{symbol}: {escape(error)}", highlight=False)
