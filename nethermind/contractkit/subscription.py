import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

from nethermind.contractkit.exceptions import DecodeError, SubscriptionClosed, SubscriptionEnded
from nethermind.contractkit.transport.base import LedgerTransport, SubscriptionHandle
from nethermind.contractkit.types.calls import DecodedEvent, LogRecord

if TYPE_CHECKING:
    from nethermind.contractkit.codec.event_codec import ContractEvent

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("contractkit").getChild("subscription")

# pylint: disable=invalid-name


class SubscriptionState(Enum):
    """Lifecycle of an EventSubscription.  Subscriptions move forward only, and are not restartable"""

    pending = "pending"
    open = "open"
    closed = "closed"


_CLOSED = object()


class EventSubscription:
    """
    Scoped subscription to a contract event.

    The transport subscription is acquired by ``start()`` and released by ``close()``.  Used as an async context
    manager, the subscription is released when the block exits::

        async with contract.event("Transfer").subscribe() as subscription:
            async for event in subscription:
                ...

    Each raw log is decoded and delivered once, in the order received from the transport.  If a callback was
    supplied, it receives ``(error, event)``.  Otherwise events are delivered through async iteration, and decode
    errors are raised from the iteration step without closing the subscription.

    If the transport ends the stream, iteration stops and the subscription is closed.  A callback instead receives
    ``SubscriptionEnded`` as the error, and the subscription must still be closed by the caller.
    """

    event: "ContractEvent"
    address: str
    state: SubscriptionState

    def __init__(
        self,
        event: "ContractEvent",
        transport: LedgerTransport,
        address: str,
        callback: Callable[[Exception | None, DecodedEvent | None], Any] | None = None,
    ):
        self.event = event
        self.address = address
        self.state = SubscriptionState.pending

        self._transport = transport
        self._callback = callback
        self._handle: SubscriptionHandle | None = None
        self._queue: asyncio.Queue = asyncio.Queue()

    def __repr__(self) -> str:
        return f"EventSubscription({self.event.name} @ {self.address}, {self.state.value})"

    async def start(self) -> "EventSubscription":
        """
        Acquires the transport subscription.  Starting an open subscription is a no-op

        :raises SubscriptionClosed: subscription was already closed
        """
        if self.state == SubscriptionState.closed:
            raise SubscriptionClosed(f"Subscription to {self.event.name} was closed and cannot be restarted")
        if self.state == SubscriptionState.open:
            return self

        logger.debug(f"Subscribing to {self.event.name} ({self.event.signature}) at {self.address}")
        self._handle = await self._transport.subscribe_events(self.address, self.event.signature, self._on_log)
        self.state = SubscriptionState.open
        return self

    async def close(self):
        """Releases the transport subscription and ends iteration.  Closing twice is a no-op"""
        if self.state == SubscriptionState.closed:
            return

        self.state = SubscriptionState.closed
        handle, self._handle = self._handle, None
        if handle is not None:
            logger.debug(f"Closing subscription to {self.event.name} at {self.address}")
            await handle.close()

        self._queue.put_nowait(_CLOSED)

    def _on_log(self, error: Exception | None, log: LogRecord | None):
        if self.state != SubscriptionState.open:
            return

        if isinstance(error, SubscriptionEnded):
            logger.debug(f"Subscription to {self.event.name} at {self.address} ended by the transport")
            if self._callback is not None:
                self._callback(error, None)
            else:
                self._queue.put_nowait(_CLOSED)
            return

        decoded = None
        if error is None:
            assert log is not None
            try:
                decoded = self.event.decode(log)
            except DecodeError as e:
                logger.debug(f"Error decoding log for {self.event.name}: {e}")
                error = e

        if self._callback is not None:
            self._callback(error, decoded)
        else:
            self._queue.put_nowait((error, decoded))

    async def __aenter__(self) -> "EventSubscription":
        return await self.start()

    async def __aexit__(self, exc_type, exc_value, traceback):
        await self.close()

    def __aiter__(self) -> "EventSubscription":
        return self

    async def __anext__(self) -> DecodedEvent:
        if self._callback is not None:
            raise TypeError("Subscriptions with a callback deliver events to the callback and cannot be iterated")

        if self.state == SubscriptionState.pending:
            await self.start()
        elif self.state == SubscriptionState.closed and self._queue.empty():
            raise StopAsyncIteration

        item = await self._queue.get()
        if item is _CLOSED:
            await self.close()
            raise StopAsyncIteration

        error, decoded = item
        if error is not None:
            raise error
        return decoded
