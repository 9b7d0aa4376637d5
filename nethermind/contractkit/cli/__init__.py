import click

from nethermind.contractkit.cli.abi import decode_event, decode_output, encode, signatures
from nethermind.contractkit.cli.call import call


@click.group()
def contractkit_cli():
    """Command Line Interface for Nethermind ContractKit"""


# Adding Commands
contractkit_cli.add_command(signatures, name="signatures")
contractkit_cli.add_command(encode, name="encode")
contractkit_cli.add_command(decode_output, name="decode-output")
contractkit_cli.add_command(decode_event, name="decode-event")
contractkit_cli.add_command(call, name="call")
