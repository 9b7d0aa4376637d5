from eth_utils import add_0x_prefix, is_hex_address, remove_0x_prefix

from nethermind.contractkit.exceptions import EncodeError


def strip_hex_prefix(value: str) -> str:
    """Removes a leading 0x from a hex string if present"""
    return remove_0x_prefix(value)  # type: ignore[arg-type]


def to_wire_hex(value: bytes | bytearray | str) -> str:
    """
    Normalizes bytes or a hex string into the wire representation used by the ledger: uppercase hex with no 0x
    prefix.

    >>> to_wire_hex(b"\\x00\\xab")
    '00AB'
    >>> to_wire_hex("0x00ab")
    '00AB'
    """
    if isinstance(value, (bytes, bytearray)):
        return value.hex().upper()
    return strip_hex_prefix(value).upper()


def from_wire_hex(value: bytes | bytearray | str) -> bytes:
    """
    Converts a wire hex string (with or without prefix, any case) into bytes.  Bytes are returned unchanged.

    :raises ValueError: value is not valid hex
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return bytes.fromhex(strip_hex_prefix(value))


def to_wire_address(value: bytes | bytearray | str) -> str:
    """
    Validates an address given as 20 bytes or 40 hex characters (any case, with or without 0x), and returns it as
    uppercase wire hex

    >>> to_wire_address("0x88977a37d05a4fe86d09e88c88a49c2fcf7d6d8f")
    '88977A37D05A4FE86D09E88C88A49C2FCF7D6D8F'

    :raises EncodeError: value is not a 20 byte address
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 20:
            raise EncodeError(f"Address must be 20 bytes, received {len(value)} bytes")
        return to_wire_hex(value)
    if not isinstance(value, str) or not is_hex_address("0x" + strip_hex_prefix(value).lower()):
        raise EncodeError(f"Invalid address: {value!r}")
    return to_wire_hex(value)


def to_prefixed_hex(value: bytes | bytearray | str) -> str:
    """
    Converts a wire hex string into the 0x prefixed form used by Ethereum tooling

    >>> to_prefixed_hex("000000000000000000000000000000000000000000000000000000000000002A")
    '0x000000000000000000000000000000000000000000000000000000000000002A'
    """
    return add_0x_prefix(to_wire_hex(value))  # type: ignore[arg-type]


def hex_to_ascii(value: str) -> str:
    """Decodes a hex string into ascii text, dropping null padding"""
    return from_wire_hex(value).decode("ascii").rstrip("\x00")


def ascii_to_hex(value: str) -> str:
    """Encodes ascii text into an uppercase hex string"""
    return value.encode("ascii").hex().upper()


def pad_left(value: str, length: int, char: str = "0") -> str:
    """Pads string on the left to length.  Strings longer than length are returned unchanged"""
    return value.rjust(length, char)


def pad_right(value: str, length: int, char: str = "0") -> str:
    """Pads string on the right to length.  Strings longer than length are returned unchanged"""
    return value.ljust(length, char)


def pprint_list(write_array: list[str], term_width: int) -> list[str]:
    """
    Prints an array of strings to the console, wrapping lines with a max width of term_width

    :param write_array:
    :param term_width:
    :return:
    """
    current_line, output = "", []
    for write_val in write_array:
        if len(current_line) + len(write_val) + 1 > term_width:
            output.append(current_line)
            current_line = ""
        current_line += f"'{write_val}', "
    output.append(current_line)
    return output
