import logging
from typing import Any, Callable, Sequence

from eth_abi import decode as eth_abi_decode
from eth_abi import encode as eth_abi_encode
from eth_abi.exceptions import DecodingError, EncodingError

from nethermind.contractkit.exceptions import ArityMismatch, DecodeError, EncodeError
from nethermind.contractkit.types.abi import TypeDescriptor, TypeKind
from nethermind.contractkit.utils import from_wire_hex, to_wire_address, to_wire_hex

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("contractkit").getChild("codec")

BYTES32 = TypeDescriptor(kind=TypeKind.fixed_bytes, size=32)


def rec_apply(value: Any, func: Callable[[Any], Any]) -> Any:
    """
    Applies func to every scalar leaf of a (possibly nested) list or tuple.  The nesting structure is preserved,
    and tuples are returned as lists.

    >>> rec_apply([[1, 2], [3]], lambda x: x * 2)
    [[2, 4], [6]]
    """
    if isinstance(value, (list, tuple)):
        return [rec_apply(item, func) for item in value]
    return func(value)


def _address_to_wire(value: Any) -> bytes:
    return from_wire_hex(to_wire_address(value))


def _bytes_to_wire(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return from_wire_hex(value)
        except ValueError as e:
            raise EncodeError(f"Bytes values must be hex strings, received {value!r}") from e
    raise EncodeError(f"Cannot encode {value!r} of type {type(value)} as bytes")


def _int_to_wire(value: Any) -> int:
    if isinstance(value, bool):
        raise EncodeError(f"Cannot encode boolean {value} as an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 16) if value.lower().startswith("0x") else int(value)
        except ValueError as e:
            raise EncodeError(f"Cannot parse integer from {value!r}") from e
    raise EncodeError(f"Cannot encode {value!r} of type {type(value)} as an integer")


def _bool_to_wire(value: Any) -> bool:
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    return value


def _wire_converter(descriptor: TypeDescriptor) -> Callable[[Any], Any]:
    """Returns the conversion applied to each scalar argument before handing it to the wire coder"""
    match descriptor.leaf().kind:
        case TypeKind.address:
            return _address_to_wire
        case TypeKind.fixed_bytes | TypeKind.bytes:
            return _bytes_to_wire
        case TypeKind.uint | TypeKind.int:
            return _int_to_wire
        case TypeKind.bool:
            return _bool_to_wire
        case _:
            return lambda value: value


def _native_converter(descriptor: TypeDescriptor) -> Callable[[Any], Any]:
    """Returns the conversion applied to each scalar value returned by the wire coder"""
    match descriptor.leaf().kind:
        case TypeKind.address | TypeKind.fixed_bytes | TypeKind.bytes:
            return to_wire_hex
        case TypeKind.uint | TypeKind.int:
            return int
        case _:
            return lambda value: value


def encode_values(types: Sequence[TypeDescriptor], values: Sequence[Any]) -> bytes:
    """
    Encodes values into their ABI wire representation

    :param types: Declared types for each value
    :param values: Native values.  Arrays may be nested lists of any depth
    :return: concatenated encoding of all values
    :raises ArityMismatch: number of values does not match number of types
    :raises EncodeError: a value cannot be encoded as its declared type
    """
    if len(types) != len(values):
        raise ArityMismatch(f"Expected {len(types)} values for types {[str(t) for t in types]}, received {len(values)}")

    wire_values = [rec_apply(value, _wire_converter(typ)) for typ, value in zip(types, values)]
    canonical_types = [typ.canonical for typ in types]

    try:
        return eth_abi_encode(canonical_types, wire_values)
    except EncodingError as e:
        logger.debug(f"Error encoding {wire_values} as types {canonical_types}: {e}")
        raise EncodeError(f"Cannot encode values as {canonical_types}: {e}") from e


def encode_value(typ: TypeDescriptor, value: Any) -> bytes:
    """Encodes a single value"""
    return encode_values([typ], [value])


def decode_values(types: Sequence[TypeDescriptor], data: bytes | bytearray | str) -> list[Any]:
    """
    Decodes ABI wire data into native values.  Integers are returned as full precision python ints, addresses and
    byte values are returned as uppercase hex strings without a 0x prefix, and arrays are returned as lists.

    :param types: Declared types of the encoded values
    :param data: Encoded data as bytes or a hex string
    :raises DecodeError: data does not match the declared types (short data, dirty padding, non utf-8 strings)
    """
    try:
        data_bytes = from_wire_hex(data)
    except ValueError as e:
        raise DecodeError(f"Data is not valid hex: {data!r}") from e

    canonical_types = [typ.canonical for typ in types]
    try:
        decoded = eth_abi_decode(canonical_types, data_bytes)
    except (DecodingError, OverflowError, UnicodeDecodeError) as e:
        logger.debug(f"{e.__class__.__name__} while decoding {data_bytes.hex()} for types {canonical_types}")
        raise DecodeError(f"Cannot decode {len(data_bytes)} bytes as {canonical_types}: {e}") from e

    return [rec_apply(value, _native_converter(typ)) for typ, value in zip(types, decoded, strict=True)]
