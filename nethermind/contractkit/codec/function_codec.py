import asyncio
import logging
from typing import TYPE_CHECKING, Any, Callable, Coroutine, Sequence

from nethermind.contractkit.exceptions import (
    ArityMismatch,
    DecodeError,
    ExecutionError,
    ExecutionReverted,
    MissingAddress,
)
from nethermind.contractkit.types.abi import AbiEntry, TypeDescriptor, TypeKind, parameter_keys
from nethermind.contractkit.types.calls import CallPayload, ClientConfig, DecodedResult, RawResult
from nethermind.contractkit.utils import from_wire_hex, to_wire_address, to_wire_hex

from .signatures import display_name, full_name, selector, type_suffix
from .type_codec import decode_values, encode_values

if TYPE_CHECKING:
    from nethermind.contractkit.contract import Contract

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("contractkit").getChild("codec")

STRING = TypeDescriptor(kind=TypeKind.string)

CallCallback = Callable[[Exception | None, Any], Any]


def encode_call_data(entry: AbiEntry | None, args: Sequence[Any], bytecode: bytes | str | None = None) -> bytes:
    """
    Encodes the data field of a call payload.

    For ordinary functions the data is the 4 byte selector followed by the encoded arguments.  For contract
    creation, data is the contract bytecode followed by the encoded constructor arguments, or the bytecode alone
    if the contract does not declare a constructor.

    :param entry: Function or constructor entry.  None for a contract without a declared constructor
    :param args: argument values
    :param bytecode: contract bytecode, required for constructors
    """
    if entry is None or entry.is_constructor:
        code = from_wire_hex(bytecode or b"")
        if entry is None:
            if args:
                raise ArityMismatch(f"Contract does not declare a constructor, but received {len(args)} arguments")
            return code
        return code + encode_values(entry.input_types, args)

    return from_wire_hex(selector(entry)) + encode_values(entry.input_types, args)


def build_payload(
    entry: AbiEntry | None,
    args: Sequence[Any],
    config: ClientConfig,
    account: str | None = None,
    address: str | None = None,
    bytecode: bytes | str | None = None,
) -> CallPayload:
    """
    Builds the payload handed to the transport.  Gas, fee and amount are read from the client config.

    :param entry: Function or constructor entry.  None for a contract without a declared constructor
    :param args: argument values
    :param config: client configuration
    :param account: caller account.  Defaults to ``config.default_account``
    :param address: target contract address.  None for contract creation
    :param bytecode: contract bytecode for contract creation
    :raises MissingAddress: no target address for a non-constructor call
    :raises EncodeError: account or target address is not a 20 byte address
    """
    target_address: bytes | None = None
    if entry is not None and not entry.is_constructor:
        if not address:
            raise MissingAddress(f"Address not provided to call {full_name(entry)}")
        target_address = from_wire_hex(to_wire_address(address))

    return CallPayload(
        input_account=from_wire_hex(to_wire_address(account or config.default_account)),
        amount=config.amount,
        target_address=target_address,
        gas_limit=config.gas_limit,
        fee=config.fee,
        data=encode_call_data(entry, args, bytecode),
    )


def decode_revert_reason(return_data: bytes) -> str:
    """
    Decodes the revert reason from returned data.  The first 4 bytes hold the selector of the error, and the
    remaining bytes hold a single encoded string.  An empty revert payload has an empty reason
    """
    if len(return_data) <= 4:
        return ""
    return decode_values([STRING], return_data[4:])[0]


def unpack_output(entry: AbiEntry, return_data: bytes, object_return: bool = False) -> Any:
    """
    Decodes function return data.

    * Functions without outputs return None
    * Functions with a single output return the bare value
    * Otherwise returns a list of values, or a DecodedResult if ``object_return`` is True

    :param entry: Function entry
    :param return_data: returned bytes
    :param object_return: return a DecodedResult mapping output names to values
    """
    if not entry.outputs:
        return None

    raw = decode_values(entry.output_types, return_data)

    if len(raw) == 1:
        return raw[0]

    if not object_return:
        return raw

    return DecodedResult(
        values=dict(zip(parameter_keys(entry.outputs), raw)),
        raw=list(raw),
    )


class ContractFunction:
    """
    Callable function of a contract binding.  Every invocation is validated, encoded, dispatched to the transport,
    and decoded, in that order.  Constructors are represented by a ContractFunction with ``is_constructor`` set,
    and the entry is None if the contract does not declare a constructor.
    """

    entry: AbiEntry | None
    contract: "Contract"
    is_constructor: bool

    name: str | None
    display_name: str | None
    type_name: str | None

    def __init__(self, entry: AbiEntry | None, contract: "Contract"):
        self.entry = entry
        self.contract = contract
        self.is_constructor = entry is None or entry.is_constructor

        if self.is_constructor:
            self.name, self.display_name, self.type_name = None, None, None
        else:
            assert entry is not None
            self.name = full_name(entry)
            self.display_name = display_name(self.name)
            self.type_name = type_suffix(self.name)

    def __repr__(self) -> str:
        return f"ContractFunction({self.name or 'constructor'})"

    def __call__(self, *args: Any, **kwargs: Any):
        return self.call(*args, **kwargs)

    @property
    def input_count(self) -> int:
        return len(self.entry.inputs) if self.entry else 0

    def call(
        self,
        *args: Any,
        simulate: bool | None = None,
        address: str | None = None,
        callback: CallCallback | None = None,
    ) -> Coroutine[Any, Any, Any] | asyncio.Task:
        """
        Invokes the function.

        Without a callback, returns an awaitable resolving to the decoded result.  With a callback, schedules the
        call on the running event loop and returns the task.  The callback receives ``(error, result)``, exactly
        one of which is None.

        :param args: function arguments
        :param simulate:
            If True, the call is evaluated without modifying state.  If False, it is submitted as a transaction.
            Defaults to True for view & pure functions.  Constructors are always submitted as transactions.
        :param address: target address.  Defaults to the address of the contract binding
        :param callback: optional completion callback
        :raises RuntimeError: a callback is given outside of a running event loop
        """
        if simulate is None:
            simulate = self.entry.is_read_only if self.entry else False

        if callback is None:
            return self._execute(list(args), simulate, address)

        loop = asyncio.get_running_loop()
        task = loop.create_task(self._execute(list(args), simulate, address))

        def _complete(completed: asyncio.Task):
            if completed.cancelled():
                callback(asyncio.CancelledError(), None)
            elif completed.exception() is not None:
                callback(completed.exception(), None)
            else:
                callback(None, completed.result())

        task.add_done_callback(_complete)
        return task

    def validate(self, args: Sequence[Any], address: str | None):
        """
        :raises MissingAddress: a non-constructor call has no target address
        :raises ArityMismatch: number of arguments does not match the declared inputs
        """
        if address is None and not self.is_constructor:
            raise MissingAddress(f"Address not provided to call {self.name}")
        if len(args) != self.input_count:
            raise ArityMismatch(
                f"Function {self.name or 'constructor'} expects {self.input_count} arguments, received {len(args)}"
            )

    def encode(self, args: Sequence[Any], address: str | None) -> CallPayload:
        return build_payload(
            entry=self.entry,
            args=args,
            config=self.contract.config,
            account=self.contract.account,
            address=address,
            bytecode=self.contract.bytecode,
        )

    def process_result(self, result: RawResult) -> Any:
        """
        Decodes a raw result into the value the call resolves to

        :raises ExecutionReverted: ledger reverted execution
        :raises ExecutionError: ledger reported any other execution exception
        :raises DecodeError: return data does not match the declared outputs
        """
        if result.exception is not None:
            if result.reverted:
                reason = decode_revert_reason(result.return_data)
                logger.debug(f"Execution of {self.name or 'constructor'} reverted: {reason}")
                raise ExecutionReverted(reason, result.exception.code)
            raise ExecutionError(
                result.exception.message or f"Execution failed with exception code {result.exception.code}",
                result.exception.code,
            )

        if self.is_constructor:
            if not result.contract_address:
                raise DecodeError("Contract creation did not return a contract address")
            return to_wire_hex(result.contract_address)

        assert self.entry is not None
        return unpack_output(self.entry, result.return_data, self.contract.object_return)

    async def _execute(self, args: list[Any], simulate: bool, address: str | None) -> Any:
        address = address or self.contract.address
        self.validate(args, address)

        payload = self.encode(args, address)
        logger.debug(
            f"Dispatching {self.name or 'constructor'} to {address or 'new contract'} as "
            f"{'simulated call' if simulate and not self.is_constructor else 'transaction'}: {payload.data.hex()}"
        )

        transport = self.contract.transport
        if simulate and not self.is_constructor:
            result = await transport.simulate_call(payload)
        else:
            result = await transport.submit_transaction(payload)

        return self.process_result(result)
