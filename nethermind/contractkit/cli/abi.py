import logging
import shutil

import click
from rich.table import Table

from nethermind.contractkit.cli.utils import (
    cli_logger_config,
    group_options,
    load_abi_json,
    object_return_option,
    parse_cli_argument,
    render_value,
    report_contract_errors,
)

# isort: skip_file
# pylint: disable=import-outside-toplevel

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("contractkit").getChild("cli")


def _offline_contract(abi_json, object_return: bool = False):
    """Contract binding without a transport.  Used by commands that only encode & decode"""
    from nethermind.contractkit.contract import Contract

    return Contract(abi_json, transport=None, object_return=object_return)  # type: ignore[arg-type]


@click.command("signatures")
@click.argument("abi_json", type=click.File("r"))
@report_contract_errors
def signatures(abi_json):
    """Lists function selectors and event topics of an ABI"""
    from nethermind.contractkit.utils import pprint_list

    console = cli_logger_config(root_logger)
    contract = _offline_contract(load_abi_json(abi_json))

    table = Table(title="ABI Signatures")
    table.add_column("Type")
    table.add_column("Signature")
    table.add_column("Selector / Topic")

    for kind, signature, selector in contract.signatures():
        table.add_row(kind, signature, selector)

    console.print(table)

    if contract.constructor.entry is not None:
        constructor_types = [str(t) for t in contract.constructor.entry.input_types]
        term_width = shutil.get_terminal_size().columns
        console.print("Constructor Arguments:")
        for line in pprint_list(constructor_types, term_width - 4):
            console.print("    " + line)


@click.command("encode")
@click.argument("abi_json", type=click.File("r"))
@click.argument("function_name")
@click.argument("args", nargs=-1)
@report_contract_errors
def encode(abi_json, function_name: str, args: tuple[str, ...]):
    """
    Encodes call data for FUNCTION_NAME with ARGS.  Array arguments are passed as JSON, ie '[1,2,3]'
    """
    contract = _offline_contract(load_abi_json(abi_json))
    click.echo(contract.encode(function_name, *[parse_cli_argument(arg) for arg in args]))


@click.command("decode-output")
@group_options(object_return_option)
@click.argument("abi_json", type=click.File("r"))
@click.argument("function_name")
@click.argument("data")
@report_contract_errors
def decode_output(object_return: bool, abi_json, function_name: str, data: str):
    """Decodes DATA returned by FUNCTION_NAME"""
    from nethermind.contractkit.types.calls import RawResult
    from nethermind.contractkit.utils import from_wire_hex

    try:
        return_data = from_wire_hex(data)
    except ValueError as e:
        raise click.BadParameter(f"{data!r} is not valid hex", param_hint="DATA") from e

    contract = _offline_contract(load_abi_json(abi_json), object_return)
    function = contract.function(function_name)

    click.echo(render_value(function.process_result(RawResult(return_data=return_data))))


@click.command("decode-event")
@click.argument("abi_json", type=click.File("r"))
@click.argument("event_name")
@click.option("--topic", "topics", multiple=True, help="Log topic.  Repeat for each topic, in order")
@click.option("--data", "data", default="", help="Log data as hex")
@click.option("--address", "address", default="0000000000000000000000000000000000000000", help="Log address")
@report_contract_errors
def decode_event(abi_json, event_name: str, topics: tuple[str, ...], data: str, address: str):
    """Decodes a log emitted by EVENT_NAME"""
    from nethermind.contractkit.types.calls import LogRecord

    contract = _offline_contract(load_abi_json(abi_json))
    decoded = contract.event(event_name).decode(LogRecord(address=address, topics=list(topics), data=data))

    click.echo(render_value(decoded))
