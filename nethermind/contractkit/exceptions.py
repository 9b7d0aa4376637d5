class InvalidType(Exception):
    """

    Raised when an ABI type descriptor is unknown or malformed.  Type strings are validated once, when a contract
    binding is constructed, so an ABI containing an unsupported type is rejected before any call is made.

    The following are rejected:

        * Integer widths that are not a multiple of 8 between 8 and 256 (``uint7``, ``int512``)
        * Fixed byte widths outside of 1 through 32 (``bytes0``, ``bytes33``)
        * Tuples and fixed point numbers
        * Unbalanced array brackets, zero length arrays (``uint256[0]``) and widths with leading zeros (``uint08``)
        * Event inputs or function outputs that decode to the same key

    """


class ArityMismatch(Exception):
    """Raised when the number of argument values does not match the number of declared types"""


class MissingAddress(Exception):
    """Raised when a non-constructor function is called without a target contract address"""


class EncodeError(Exception):
    """

    Raised when an argument value cannot be encoded for its declared type, ie an out of range integer, an address
    that is not 20 bytes, or a non-hex string passed for a ``bytes`` parameter.

    """


class DecodeError(Exception):
    """

    Raised when return data, log data or log topics are inconsistent with the declared ABI types.  Decode errors
    after a successful dispatch are surfaced as the failure of the call or subscription, and are never retried.

    """


class ExecutionError(Exception):
    """
    Raised when the ledger reports an exception while executing a call or transaction.

    The numeric exception code returned by the node is stored on ``code``
    """

    code: int

    def __init__(self, message: str, code: int):
        super().__init__(message)
        self.code = code


class ExecutionReverted(ExecutionError):
    """
    Raised when contract execution was reverted.  The message of the exception is the revert reason string
    decoded from the returned data.
    """

    reason: str

    def __init__(self, reason: str, code: int = 16):
        super().__init__(reason, code)
        self.reason = reason


class AbiLookupError(Exception):
    """Raised when a function or event name is not present in a contract ABI, or is ambiguous between overloads"""


class SubscriptionClosed(Exception):
    """Raised when an event subscription is used after it was closed.  Subscriptions are not restartable"""


class TransportError(Exception):
    """

    Raised by transports when the remote node returns an error, fails to return well formed data, or when the
    connection fails.  Transport errors are passed through the call pipeline unchanged.

    """


class SubscriptionEnded(TransportError):
    """
    Delivered to a log handler when the node ends a subscription stream.  No further logs are delivered after it,
    and subscriptions receiving it stop iteration.
    """
