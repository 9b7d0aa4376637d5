import asyncio
import logging

import click

from nethermind.contractkit.cli.utils import (
    account_option,
    cli_logger_config,
    fee_option,
    gas_limit_option,
    group_options,
    json_rpc_option,
    load_abi_json,
    object_return_option,
    parse_cli_argument,
    render_value,
    report_contract_errors,
)

# isort: skip_file
# pylint: disable=too-many-arguments,import-outside-toplevel

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("contractkit").getChild("cli")


@click.command("call")
@group_options(json_rpc_option, account_option, gas_limit_option, fee_option, object_return_option)
@click.option(
    "--mode",
    "mode",
    type=click.Choice(["auto", "simulate", "execute"]),
    default="auto",
    show_default=True,
    help="Simulate the call without modifying state, or execute it as a transaction.  "
    "auto simulates view & pure functions, and executes all other functions",
)
@click.argument("abi_json", type=click.File("r"))
@click.argument("address")
@click.argument("function_name")
@click.argument("args", nargs=-1)
@report_contract_errors
def call(
    json_rpc: str | None,
    account: str | None,
    gas_limit: int | None,
    fee: int | None,
    object_return: bool,
    mode: str,
    abi_json,
    address: str,
    function_name: str,
    args: tuple[str, ...],
):
    """Calls FUNCTION_NAME on the contract at ADDRESS"""
    from nethermind.contractkit.contract import Contract
    from nethermind.contractkit.transport import JsonRpcTransport
    from nethermind.contractkit.types.calls import ClientConfig

    console = cli_logger_config(root_logger)

    if json_rpc is None:
        raise click.UsageError("--json-rpc must be provided, or the JSON_RPC environment variable set")

    config_overrides = {key: value for key, value in (("gas_limit", gas_limit), ("fee", fee)) if value is not None}

    contract = Contract(
        load_abi_json(abi_json),
        transport=JsonRpcTransport(json_rpc),
        address=address,
        config=ClientConfig(**config_overrides),
        object_return=object_return,
        account=account,
    )

    function = contract.function(function_name)
    simulate = None if mode == "auto" else mode == "simulate"
    result = asyncio.run(function.call(*[parse_cli_argument(arg) for arg in args], simulate=simulate))

    console.print(f"[green]{function.name} returned:")
    click.echo(render_value(result))
