import logging
from collections import deque
from typing import TYPE_CHECKING, Any, Callable

from nethermind.contractkit.exceptions import DecodeError, MissingAddress
from nethermind.contractkit.subscription import EventSubscription
from nethermind.contractkit.types.abi import AbiEntry, TypeDescriptor, parameter_keys
from nethermind.contractkit.types.calls import DecodedEvent, LogRecord
from nethermind.contractkit.utils import to_wire_address, to_wire_hex

from .signatures import display_name, event_topic, full_name, type_suffix
from .type_codec import BYTES32, decode_values

if TYPE_CHECKING:
    from nethermind.contractkit.contract import Contract

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("contractkit").getChild("codec")

TOPIC_HEX_LENGTH = 64


def _topic_decoding_type(typ: TypeDescriptor) -> TypeDescriptor:
    # Indexed strings, bytes and arrays are stored in topics as the keccak hash of the value
    return BYTES32 if typ.is_hashed_in_topics else typ


def decode_log(entry: AbiEntry, log: LogRecord) -> DecodedEvent:
    """
    Decodes a raw log into a DecodedEvent.  Indexed parameters are decoded from the topics, and non-indexed
    parameters are decoded from the data blob.  The decoded arguments are returned in ABI declaration order.

    :param entry: Event entry
    :param log: raw log record
    :raises DecodeError: topics or data do not match the declared inputs
    """
    data = to_wire_hex(log.data or b"")
    topics = [to_wire_hex(topic) for topic in log.topics]

    indexed_inputs = [param for param in entry.inputs if param.indexed]
    data_inputs = [param for param in entry.inputs if not param.indexed]

    arg_topics = topics if entry.anonymous else topics[1:]
    if len(arg_topics) != len(indexed_inputs):
        raise DecodeError(
            f"Event {full_name(entry)} declares {len(indexed_inputs)} indexed parameters, but log has "
            f"{len(arg_topics)} argument topics"
        )
    if any(len(topic) != TOPIC_HEX_LENGTH for topic in arg_topics):
        raise DecodeError(f"Log topics must be 32 bytes: {arg_topics}")

    indexed_values = deque(decode_values([_topic_decoding_type(p.type) for p in indexed_inputs], "".join(arg_topics)))
    data_values = deque(decode_values([p.type for p in data_inputs], data))

    args: dict[str, Any] = {}
    for key, param in zip(parameter_keys(entry.inputs), entry.inputs):
        args[key] = indexed_values.popleft() if param.indexed else data_values.popleft()

    return DecodedEvent(
        name=display_name(full_name(entry)),
        event=full_name(entry),
        address=to_wire_hex(log.address),
        args=args,
    )


EventCallback = Callable[[Exception | None, DecodedEvent | None], Any]


class ContractEvent:
    """Event of a contract binding.  Decodes logs, and subscribes to the event on the ledger"""

    entry: AbiEntry
    contract: "Contract"

    name: str
    display_name: str
    type_name: str
    signature: str
    """ 32 byte signature topic as uppercase hex """

    def __init__(self, entry: AbiEntry, contract: "Contract"):
        self.entry = entry
        self.contract = contract
        self.name = full_name(entry)
        self.display_name = display_name(self.name)
        self.type_name = type_suffix(self.name)
        self.signature = event_topic(entry)

    def __repr__(self) -> str:
        return f"ContractEvent({self.name})"

    def decode(self, log: LogRecord) -> DecodedEvent:
        return decode_log(self.entry, log)

    def subscribe(self, callback: EventCallback | None = None, address: str | None = None) -> EventSubscription:
        """
        Creates a subscription to this event.  The subscription is acquired when it is started, either with
        ``await subscription.start()`` or ``async with subscription``, and must be released with ``close()``.

        :param callback:
            Receives ``(error, event)`` for each log.  If no callback is provided, decoded events are delivered by
            iterating the subscription with ``async for``
        :param address: Contract address.  Defaults to the address of the contract binding
        :raises MissingAddress: no address supplied and the binding is not deployed
        :raises EncodeError: address is not a 20 byte address
        """
        address = address or self.contract.address
        if address is None:
            raise MissingAddress(f"Address not provided to subscribe to {self.name}")

        return EventSubscription(self, self.contract.transport, to_wire_address(address), callback)
