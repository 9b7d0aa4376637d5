from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Sequence

from eth_abi.exceptions import ABITypeError, ParseError
from eth_abi.grammar import BasicType, normalize, parse

from nethermind.contractkit.exceptions import InvalidType

# pylint: disable=invalid-name


class TypeKind(Enum):
    """Supported Wire Types"""

    address = "address"
    uint = "uint"
    int = "int"
    bool = "bool"
    fixed_bytes = "fixed_bytes"
    bytes = "bytes"
    string = "string"
    array = "array"


@dataclass(frozen=True)
class TypeDescriptor:
    """
    Parsed ABI type.  Type strings are parsed once into descriptors, and the descriptor drives the width and layout
    of the wire encoding as well as the post-processing applied to decoded values.
    """

    kind: TypeKind

    size: int | None = None
    """ Bit width for uint & int types, byte width for fixed bytes types """

    element: "TypeDescriptor | None" = None
    """ Element type for arrays """

    length: int | None = None
    """ Fixed length for arrays.  None for dynamically sized arrays """

    @classmethod
    def from_string(cls, type_str: str) -> "TypeDescriptor":
        """
        Parses an ABI type string into a TypeDescriptor.  Type strings are normalized and parsed with the eth-abi
        type grammar, so aliases are expanded and malformed strings are rejected before any value is encoded.

        >>> TypeDescriptor.from_string("uint256[2][]").canonical
        'uint256[2][]'
        >>> TypeDescriptor.from_string("uint").canonical
        'uint256'

        :param type_str: type string from ABI JSON
        :raises InvalidType: type string is unknown or malformed
        """
        if not isinstance(type_str, str):
            raise InvalidType(f"Type must be a string, but got {type_str!r} of type {type(type_str)}")

        try:
            abi_type = parse(normalize(type_str))
            abi_type.validate()
        except (ParseError, ABITypeError) as e:
            raise InvalidType(f"Invalid ABI type {type_str!r}: {e}") from e

        if not isinstance(abi_type, BasicType):
            raise InvalidType(f"Tuple types are not supported: {type_str}")

        return cls._from_basic_type(abi_type, type_str)

    @classmethod
    def _from_basic_type(cls, abi_type: BasicType, type_str: str) -> "TypeDescriptor":
        if abi_type.arrlist:
            dimension = abi_type.arrlist[-1]
            return cls(
                kind=TypeKind.array,
                element=cls._from_basic_type(abi_type.item_type, type_str),
                length=dimension[0] if dimension else None,
            )

        match abi_type.base, abi_type.sub:
            case ("address" | "bool" | "string", None):
                return cls(kind=TypeKind(abi_type.base))
            case ("bytes", None):
                return cls(kind=TypeKind.bytes)
            case ("bytes", int(size)):
                return cls(kind=TypeKind.fixed_bytes, size=size)
            case ("uint", int(bits)):
                return cls(kind=TypeKind.uint, size=bits)
            case ("int", int(bits)):
                return cls(kind=TypeKind.int, size=bits)

        raise InvalidType(f"Unsupported ABI type: {type_str!r}")

    @property
    def canonical(self) -> str:
        """Canonical type string used in signatures and by the wire coder"""
        match self.kind:
            case TypeKind.uint | TypeKind.int:
                return f"{self.kind.value}{self.size}"
            case TypeKind.fixed_bytes:
                return f"bytes{self.size}"
            case TypeKind.array:
                assert self.element is not None
                return f"{self.element.canonical}[{'' if self.length is None else self.length}]"
            case _:
                return self.kind.value

    @property
    def is_dynamic(self) -> bool:
        """True if the encoded size of the type depends on its value"""
        if self.kind in (TypeKind.bytes, TypeKind.string):
            return True
        if self.kind == TypeKind.array:
            assert self.element is not None
            return self.length is None or self.element.is_dynamic
        return False

    @property
    def is_hashed_in_topics(self) -> bool:
        """Indexed event parameters of these types are stored in topics as a keccak hash of the value"""
        return self.kind in (TypeKind.bytes, TypeKind.string, TypeKind.array)

    def leaf(self) -> "TypeDescriptor":
        """Returns the scalar type at the bottom of any array nesting"""
        descriptor = self
        while descriptor.kind == TypeKind.array:
            assert descriptor.element is not None
            descriptor = descriptor.element
        return descriptor

    def __str__(self) -> str:
        return self.canonical


class Mutability(Enum):
    """State Mutability of a Function"""

    pure = "pure"
    view = "view"
    nonpayable = "nonpayable"
    payable = "payable"

    @classmethod
    def from_json(cls, abi_entry: dict[str, Any]) -> "Mutability":
        """
        Reads mutability from an ABI entry.  Supports the ``stateMutability`` key, and the legacy ``constant`` and
        ``payable`` keys emitted by older compilers
        """
        if "stateMutability" in abi_entry:
            return cls(abi_entry["stateMutability"])
        if abi_entry.get("constant", False):
            return cls.view
        if abi_entry.get("payable", False):
            return cls.payable
        return cls.nonpayable

    @property
    def read_only(self) -> bool:
        """True if a function does not modify ledger state"""
        return self in (Mutability.pure, Mutability.view)


@dataclass(frozen=True)
class AbiParameter:
    """Function input, function output, or event input"""

    name: str
    type: TypeDescriptor
    indexed: bool = False

    @classmethod
    def from_json(cls, param: dict[str, Any]) -> "AbiParameter":
        return cls(
            name=param.get("name") or "",
            type=TypeDescriptor.from_string(param.get("type", "")),
            indexed=bool(param.get("indexed", False)),
        )


@dataclass(frozen=True)
class AbiEntry:
    """
    Describes a single function, constructor or event of a contract.  Entries are immutable once parsed from the
    contract's ABI JSON and are shared by every invocation made through a contract binding.
    """

    entry_type: Literal["function", "constructor", "event"]
    name: str
    inputs: tuple[AbiParameter, ...]
    outputs: tuple[AbiParameter, ...] = ()
    mutability: Mutability = Mutability.nonpayable
    anonymous: bool = False

    def __post_init__(self):
        # Event args and object-shaped results are keyed by parameter name, or position if unnamed
        keyed_params = self.inputs if self.entry_type == "event" else self.outputs
        keys = parameter_keys(keyed_params)
        duplicate_keys = sorted({key for key in keys if keys.count(key) > 1})
        if duplicate_keys:
            raise InvalidType(
                f"{self.entry_type.capitalize()} {self.name} has overlapping parameter names: {duplicate_keys}"
            )

    @classmethod
    def from_json(cls, abi_entry: dict[str, Any]) -> "AbiEntry":
        """
        Parses and validates an ABI JSON entry.

        :param abi_entry: function, constructor or event entry from a contract ABI
        :raises InvalidType:
            an input or output has an unsupported type, or two event inputs or function outputs share a name
        """
        entry_type = abi_entry.get("type", "function")
        if entry_type not in ("function", "constructor", "event"):
            raise InvalidType(f"Unsupported ABI entry type: {entry_type}")

        return cls(
            entry_type=entry_type,
            name=abi_entry.get("name", ""),
            inputs=tuple(AbiParameter.from_json(param) for param in abi_entry.get("inputs", [])),
            outputs=tuple(AbiParameter.from_json(param) for param in abi_entry.get("outputs", [])),
            mutability=Mutability.from_json(abi_entry),
            anonymous=bool(abi_entry.get("anonymous", False)),
        )

    @property
    def is_constructor(self) -> bool:
        return self.entry_type == "constructor"

    @property
    def is_read_only(self) -> bool:
        return self.mutability.read_only

    @property
    def input_types(self) -> list[TypeDescriptor]:
        return [param.type for param in self.inputs]

    @property
    def output_types(self) -> list[TypeDescriptor]:
        return [param.type for param in self.outputs]


def parameter_keys(params: Sequence[AbiParameter]) -> list[str]:
    """Keys of decoded values for each parameter.  Unnamed parameters are keyed by their position"""
    return [param.name or str(index) for index, param in enumerate(params)]


def parse_abi(contract_abi: Sequence[dict[str, Any]]) -> list[AbiEntry]:
    """
    Parses every function, constructor and event entry in a contract ABI.  Fallback, receive and error entries
    are skipped.

    :param contract_abi: ABI JSON as a list of dicts
    :raises InvalidType: if any parsed entry contains an unsupported type
    """
    return [
        AbiEntry.from_json(abi_entry)
        for abi_entry in contract_abi
        if abi_entry.get("type", "function") in ("function", "constructor", "event")
    ]
