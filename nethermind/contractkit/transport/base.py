from typing import Callable, Protocol

from nethermind.contractkit.types.calls import CallPayload, LogRecord, RawResult

LogHandler = Callable[[Exception | None, LogRecord | None], None]
""" Receives ``(error, log)`` for each raw log entry.  Exactly one of the two is None """


class SubscriptionHandle(Protocol):
    """Handle to a live log subscription on the transport"""

    async def close(self) -> None:
        """Releases the subscription.  No logs are delivered to the handler after close returns"""
        raise NotImplementedError()


class LedgerTransport(Protocol):
    """Abstract Protocol for Ledger Transports"""

    async def simulate_call(self, payload: CallPayload) -> RawResult:
        """Evaluates a call without modifying ledger state"""
        raise NotImplementedError()

    async def submit_transaction(self, payload: CallPayload) -> RawResult:
        """Submits a state changing transaction.  Used for contract creation & non-simulated calls"""
        raise NotImplementedError()

    async def subscribe_events(self, address: str, signature: str, handler: LogHandler) -> SubscriptionHandle:
        """
        Subscribes to logs emitted by address with the signature topic

        :param address: contract address as uppercase hex
        :param signature: 32 byte event signature topic as uppercase hex
        :param handler: called for each matching log, or with an error
        """
        raise NotImplementedError()
