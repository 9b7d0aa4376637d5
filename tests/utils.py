import copy
from typing import Any, Callable

from eth_abi import decode as eth_abi_decode
from eth_abi import encode as eth_abi_encode
from eth_utils import keccak
from eth_utils.abi import event_signature_to_log_topic, function_signature_to_4byte_selector

from nethermind.contractkit.codec.signatures import type_suffix
from nethermind.contractkit.exceptions import SubscriptionEnded
from nethermind.contractkit.transport.base import LogHandler
from nethermind.contractkit.types.calls import CallPayload, ExecutionException, LogRecord, RawResult

ERROR_STRING_SELECTOR = bytes.fromhex("08c379a0")


class FakeRevert(Exception):
    """Raised by fake contract methods to revert execution"""


def abi_method(signature: str, outputs: list[str] | None = None):
    """Marks a FakeContract method as the implementation of a function signature"""

    def wrapper(function):
        function.abi_signature = signature
        function.abi_outputs = outputs or []
        return function

    return wrapper


class FakeContract:
    """Python implementation of a contract, executed by the FakeLedger"""

    constructor_inputs: list[str] = []

    def __init__(self, ledger: "FakeLedger", address: bytes, *constructor_args: Any):
        self.ledger = ledger
        self.address = address
        self.state: dict[str, Any] = {}
        self.emit_enabled = True
        self.setup(*constructor_args)

    def setup(self, *constructor_args: Any):
        pass

    @classmethod
    def dispatch_table(cls) -> dict[bytes, Callable]:
        return {
            function_signature_to_4byte_selector(method.abi_signature): method
            for method in vars(cls).values()
            if hasattr(method, "abi_signature")
        }

    def emit(self, event_signature: str, indexed: list[tuple[str, Any]], data: list[tuple[str, Any]]):
        if not self.emit_enabled:
            return
        topics = [event_signature_to_log_topic(event_signature)] + [
            eth_abi_encode([typ], [value]) for typ, value in indexed
        ]
        log_data = eth_abi_encode([typ for typ, _ in data], [value for _, value in data])
        self.ledger.emit(LogRecord(address=self.address, topics=topics, data=log_data))

    def execute(self, data: bytes, persist: bool) -> RawResult:
        method = self.dispatch_table().get(data[:4])
        if method is None:
            return RawResult(exception=ExecutionException(code=1, message="Unknown function selector"))

        input_types = [typ for typ in type_suffix(method.abi_signature).split(",") if typ]
        args = eth_abi_decode(input_types, data[4:])

        snapshot = copy.deepcopy(self.state)
        self.emit_enabled = persist
        try:
            result = method(self, *args)
        except FakeRevert as e:
            self.state = snapshot
            return RawResult(
                return_data=ERROR_STRING_SELECTOR + eth_abi_encode(["string"], [str(e)]),
                exception=ExecutionException(code=16, message="execution reverted"),
            )
        finally:
            self.emit_enabled = True

        if not persist:
            self.state = snapshot

        if not method.abi_outputs:
            return RawResult()
        if len(method.abi_outputs) == 1:
            result = (result,)
        return RawResult(return_data=eth_abi_encode(method.abi_outputs, list(result)))


class FakeSubscriptionHandle:
    def __init__(self, ledger: "FakeLedger", address: str, signature: str, handler: LogHandler):
        self.ledger = ledger
        self.address = address
        self.signature = signature
        self.handler = handler
        self.closed = False

    async def close(self) -> None:
        self.closed = True
        self.ledger.subscriptions.remove(self)


class FakeLedger:
    """In-memory LedgerTransport executing FakeContract implementations"""

    def __init__(self):
        self.implementations: dict[bytes, type[FakeContract]] = {}
        self.contracts: dict[bytes, FakeContract] = {}
        self.requests: list[tuple[str, CallPayload]] = []
        self.subscriptions: list[FakeSubscriptionHandle] = []

    def register(self, bytecode: str, implementation: type[FakeContract]):
        self.implementations[bytes.fromhex(bytecode)] = implementation

    def _create(self, payload: CallPayload) -> RawResult:
        for bytecode, implementation in self.implementations.items():
            if payload.data.startswith(bytecode):
                constructor_args = eth_abi_decode(implementation.constructor_inputs, payload.data[len(bytecode) :])
                address = keccak(payload.data + len(self.contracts).to_bytes(4, "big"))[-20:]
                self.contracts[address] = implementation(self, address, *constructor_args)
                return RawResult(contract_address=address)
        return RawResult(exception=ExecutionException(code=2, message="Invalid bytecode"))

    def _execute(self, payload: CallPayload, persist: bool) -> RawResult:
        if payload.target_address is None:
            return self._create(payload)
        contract = self.contracts.get(payload.target_address)
        if contract is None:
            return RawResult(exception=ExecutionException(code=3, message="No contract at address"))
        return contract.execute(payload.data, persist)

    async def simulate_call(self, payload: CallPayload) -> RawResult:
        self.requests.append(("call", payload))
        return self._execute(payload, persist=False)

    async def submit_transaction(self, payload: CallPayload) -> RawResult:
        self.requests.append(("transact", payload))
        return self._execute(payload, persist=True)

    async def subscribe_events(self, address: str, signature: str, handler: LogHandler) -> FakeSubscriptionHandle:
        handle = FakeSubscriptionHandle(self, address.upper(), signature.upper(), handler)
        self.subscriptions.append(handle)
        return handle

    def emit(self, log: LogRecord):
        address = log.address.hex().upper() if isinstance(log.address, bytes) else log.address.upper()
        signature = log.topics[0].hex().upper() if isinstance(log.topics[0], bytes) else log.topics[0].upper()
        for handle in list(self.subscriptions):
            if handle.address == address and handle.signature == signature:
                handle.handler(None, log)

    def emit_error(self, error: Exception):
        for handle in list(self.subscriptions):
            handle.handler(error, None)

    def end_stream(self):
        for handle in list(self.subscriptions):
            handle.handler(SubscriptionEnded("Stream ended"), None)


# -------------------------------------------------------
#    Test Contracts
# -------------------------------------------------------
ADDRESS_STORAGE_BYTECODE = "6080604052348015600f57600080fd5b50"
NUMBER_STORAGE_BYTECODE = "608060405234801561001057600080fd5b5060"

ADDRESS_STORAGE_ABI = [
    {
        "type": "function",
        "name": "set",
        "inputs": [{"name": "x", "type": "address"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "get",
        "inputs": [],
        "outputs": [{"name": "retVal", "type": "address"}],
        "stateMutability": "view",
    },
]

NUMBER_STORAGE_ABI = [
    {
        "type": "constructor",
        "inputs": [{"name": "initial", "type": "uint256"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "set",
        "inputs": [{"name": "x", "type": "uint256"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "get",
        "inputs": [],
        "outputs": [{"name": "retVal", "type": "uint256"}],
        "constant": True,
    },
    {
        "type": "function",
        "name": "getCombination",
        "inputs": [],
        "outputs": [{"name": "_number", "type": "uint256"}, {"name": "_address", "type": "address"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "getPair",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}, {"name": "", "type": "bool"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "fail",
        "inputs": [{"name": "reason", "type": "string"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "event",
        "name": "Updated",
        "anonymous": False,
        "inputs": [
            {"name": "setter", "type": "address", "indexed": True},
            {"name": "value", "type": "uint256", "indexed": False},
            {"name": "previous", "type": "uint256", "indexed": True},
        ],
    },
]


class AddressStorage(FakeContract):
    @abi_method("set(address)")
    def set(self, value):
        self.state["stored"] = value

    @abi_method("get()", ["address"])
    def get(self):
        return self.state.get("stored", "0x" + "00" * 20)


class NumberStorage(FakeContract):
    constructor_inputs = ["uint256"]

    def setup(self, initial):
        self.state["number"] = initial

    @abi_method("set(uint256)")
    def set(self, value):
        previous = self.state["number"]
        self.state["number"] = value
        self.emit(
            "Updated(address,uint256,uint256)",
            indexed=[("address", "0x" + "11" * 20), ("uint256", previous)],
            data=[("uint256", value)],
        )

    @abi_method("get()", ["uint256"])
    def get(self):
        return self.state["number"]

    @abi_method("getCombination()", ["uint256", "address"])
    def get_combination(self):
        return self.state["number"], self.address

    @abi_method("getPair()", ["uint256", "bool"])
    def get_pair(self):
        return self.state["number"], True

    @abi_method("fail(string)")
    def fail(self, reason):
        raise FakeRevert(reason)
