from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict

ZERO_ADDRESS = "0000000000000000000000000000000000000000"

DEFAULT_GAS = 1111111111
DEFAULT_FEE = 1111111111

REVERT_EXCEPTION_CODE = 16
""" Exception code returned by the ledger when contract execution was reverted """


class ClientConfig(BaseModel):
    """Immutable configuration passed to the call encoder"""

    model_config = ConfigDict(frozen=True)

    gas_limit: int = DEFAULT_GAS
    """ Gas limit attached to every call & transaction.  Gas is not estimated """

    fee: int = DEFAULT_FEE
    """ Fee attached to every call & transaction """

    amount: int = 1
    """ Amount sent from the input account with each payload """

    default_account: str = ZERO_ADDRESS
    """ Caller account used when the contract binding is not given an account """


@dataclass(frozen=True)
class CallPayload:
    """Wire format request handed to the transport"""

    input_account: bytes
    amount: int
    target_address: bytes | None
    gas_limit: int
    fee: int
    data: bytes

    @property
    def is_creation(self) -> bool:
        return self.target_address is None


@dataclass(frozen=True)
class ExecutionException:
    """Exception reported by the ledger for a call or transaction"""

    code: int
    message: str = ""


@dataclass(frozen=True)
class RawResult:
    """Result returned by the transport for a call or transaction"""

    return_data: bytes = b""
    contract_address: bytes | None = None
    exception: ExecutionException | None = None

    @property
    def reverted(self) -> bool:
        return self.exception is not None and self.exception.code == REVERT_EXCEPTION_CODE


@dataclass
class DecodedResult:
    """Object shaped function result"""

    values: dict[str, Any]
    """ Mapping from output name to value.  Unnamed outputs are keyed by their position """

    raw: list[Any]
    """ Positional list of decoded outputs """

    def __getitem__(self, key: str) -> Any:
        return self.values[key]


@dataclass(frozen=True)
class LogRecord:
    """Raw log entry delivered by a transport subscription"""

    address: bytes | str
    topics: list[bytes | str]
    data: bytes | str = b""


@dataclass
class DecodedEvent:
    """Event Decoding Result"""

    name: str
    event: str
    address: str
    args: dict[str, Any] = field(default_factory=dict)
