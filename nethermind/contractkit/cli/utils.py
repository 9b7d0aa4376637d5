import functools
import json
import logging
import os
from logging import Logger
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler

from nethermind.contractkit.exceptions import (
    AbiLookupError,
    ArityMismatch,
    DecodeError,
    EncodeError,
    ExecutionError,
    InvalidType,
    MissingAddress,
    TransportError,
)

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("contractkit").getChild("cli")

CONTRACT_ERRORS = (
    AbiLookupError,
    ArityMismatch,
    DecodeError,
    EncodeError,
    ExecutionError,
    InvalidType,
    MissingAddress,
    TransportError,
)


def cli_logger_config(instrument_logger: Logger) -> Console:
    rich_console = Console()
    instrument_logger.handlers.clear()

    instrument_logger.addHandler(RichHandler(show_path=False, console=rich_console))
    instrument_logger.setLevel(logging.INFO)
    return rich_console


def group_options(*options):
    """Decorator to group multiple click options together"""

    def wrapper(function):
        for option in reversed(options):
            function = option(function)
        return function

    return wrapper


def report_contract_errors(function):
    """Decorator reporting contract errors as CLI errors, so they are printed without a traceback"""

    @functools.wraps(function)
    def wrapper(*args, **kwargs):
        try:
            return function(*args, **kwargs)
        except CONTRACT_ERRORS as e:
            logger.debug(f"{type(e).__name__} raised by {function.__name__}", exc_info=True)
            raise click.ClickException(f"{type(e).__name__}: {e}") from e

    return wrapper


def parse_cli_argument(value: str) -> Any:
    """
    Parses a command line argument.  JSON arrays are decoded into lists, and all other values are passed through as
    strings.  Integers, booleans, addresses & bytes are parsed from strings by the type codec
    """
    if not value.startswith("["):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def load_abi_json(abi_file) -> list[dict[str, Any]]:
    """Loads an ABI from a file.  Accepts a bare ABI list, or a compiler artifact with an ``abi`` key"""
    try:
        abi_json = json.loads(abi_file.read())
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{abi_file.name} is not valid JSON: {e}", param_hint="ABI_JSON") from e
    if isinstance(abi_json, dict):
        abi_json = abi_json.get("abi", [])
    return abi_json


def render_value(value: Any) -> str:
    """Renders a decoded value as JSON for console output"""
    return json.dumps(value, default=lambda o: o.__dict__ if hasattr(o, "__dict__") else str(o))


# -------------------------------------------------------
#    CLI Secrets, Connections, and Configurations
# -------------------------------------------------------
json_rpc_option = click.option(
    "--json-rpc",
    "-rpc",
    "json_rpc",
    default=os.environ.get("JSON_RPC"),
    help="RPC url of the ledger node.  If not provided, will use the JSON_RPC environment variable",
)
account_option = click.option(
    "--account",
    "account",
    default=os.environ.get("CONTRACTKIT_ACCOUNT"),
    help="Caller account.  If not provided, will use the CONTRACTKIT_ACCOUNT environment variable, or the zero address",
)
gas_limit_option = click.option(
    "--gas-limit",
    "gas_limit",
    type=int,
    default=None,
    help="Gas limit attached to the call",
)
fee_option = click.option(
    "--fee",
    "fee",
    type=int,
    default=None,
    help="Fee attached to the call",
)
object_return_option = click.option(
    "--object/--list",
    "object_return",
    default=False,
    show_default=True,
    help="Return multiple outputs as a mapping of output names to values",
)
