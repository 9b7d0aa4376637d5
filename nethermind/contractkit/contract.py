import logging
from typing import Any, Sequence

from eth_typing import ABI

from nethermind.contractkit.codec.event_codec import ContractEvent
from nethermind.contractkit.codec.function_codec import ContractFunction, encode_call_data
from nethermind.contractkit.codec.signatures import event_topic, full_name, selector
from nethermind.contractkit.exceptions import AbiLookupError
from nethermind.contractkit.transport.base import LedgerTransport
from nethermind.contractkit.types.abi import AbiEntry, parse_abi
from nethermind.contractkit.types.calls import ClientConfig
from nethermind.contractkit.utils import to_wire_address, to_wire_hex

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("contractkit").getChild("contract")


class Contract:
    """

    Binding between a contract ABI and a ledger transport.  Every entry of the ABI is parsed and validated when the
    binding is constructed, and the parsed entries are shared by every call made through the binding.

    >>> contract = Contract(abi, transport, bytecode=bytecode)
    >>> deployed = await contract.deploy()
    >>> await deployed.set("88977A37D05A4FE86D09E88C88A49C2FCF7D6D8F")
    >>> await deployed.get()
    '88977A37D05A4FE86D09E88C88A49C2FCF7D6D8F'

    """

    abi: ABI
    """ ABI JSON the binding was created from """

    transport: LedgerTransport
    config: ClientConfig

    address: str | None
    """ Contract address as uppercase hex.  None until the contract is deployed """

    bytecode: str | None
    """ Contract bytecode as hex.  Required for deployment """

    account: str | None
    """ Caller account.  If None, the default account from the config is used """

    object_return: bool
    """ If True, functions with multiple outputs return a DecodedResult instead of a list """

    functions: dict[str, ContractFunction]
    """ Mapping from full function signature to function """

    events: dict[str, ContractEvent]
    """ Mapping from full event signature to event """

    constructor: ContractFunction

    def __init__(
        self,
        abi: ABI,
        transport: LedgerTransport,
        address: str | None = None,
        bytecode: str | bytes | None = None,
        config: ClientConfig | None = None,
        object_return: bool = False,
        account: str | None = None,
    ):
        self.abi = abi
        self.transport = transport
        self.config = config or ClientConfig()
        self.address = to_wire_address(address) if address else None
        self.bytecode = to_wire_hex(bytecode) if bytecode else None
        self.account = to_wire_address(account) if account else None
        self.object_return = object_return

        entries = parse_abi(abi)  # type: ignore[arg-type]

        self.functions, self.events = {}, {}
        constructor_entry: AbiEntry | None = None
        for entry in entries:
            match entry.entry_type:
                case "function":
                    self.functions[full_name(entry)] = ContractFunction(entry, self)
                case "event":
                    self.events[full_name(entry)] = ContractEvent(entry, self)
                case "constructor":
                    constructor_entry = entry

        self.constructor = ContractFunction(constructor_entry, self)

        logger.debug(
            f"Loaded contract binding with {len(self.functions)} functions and {len(self.events)} events"
            + (f" at {self.address}" if self.address else "")
        )

    def __getattr__(self, name: str) -> ContractFunction:
        if name.startswith("_") or name in ("functions", "events"):
            raise AttributeError(name)
        try:
            return self.function(name)
        except AbiLookupError as e:
            raise AttributeError(str(e)) from e

    def __repr__(self) -> str:
        return f"Contract({self.address or 'undeployed'})"

    @staticmethod
    def _lookup(items: dict[str, Any], name: str, kind: str) -> Any:
        if name in items:
            return items[name]

        matches = [item for signature, item in items.items() if signature[: signature.find("(")] == name]
        if not matches:
            raise AbiLookupError(f"{kind} {name} not found in ABI")
        if len(matches) > 1:
            raise AbiLookupError(
                f"{kind} {name} is overloaded.  Select one of {[item.name for item in matches]} by full signature"
            )
        return matches[0]

    def function(self, name: str) -> ContractFunction:
        """
        Returns a function by full signature, ie ``set(uint256)``, or by name if the name is not overloaded

        :raises AbiLookupError: function not found, or name is overloaded
        """
        return self._lookup(self.functions, name, "Function")

    def event(self, name: str) -> ContractEvent:
        """
        Returns an event by full signature, or by name if the name is not overloaded

        :raises AbiLookupError: event not found, or name is overloaded
        """
        return self._lookup(self.events, name, "Event")

    def at(self, address: str) -> "Contract":
        """Returns a new binding for the same ABI at address"""
        return Contract(
            abi=self.abi,
            transport=self.transport,
            address=address,
            bytecode=self.bytecode,
            config=self.config,
            object_return=self.object_return,
            account=self.account,
        )

    async def deploy(self, *args: Any) -> "Contract":
        """
        Creates the contract on the ledger with the constructor arguments, and returns a binding at the address of
        the new contract
        """
        address = await self.constructor.call(*args)
        logger.info(f"Deployed contract at {address}")
        return self.at(address)

    def encode(self, function_name: str, *args: Any) -> str:
        """
        Encodes call data for a function as uppercase hex, without dispatching it

        :raises AbiLookupError: function not found, or name is overloaded
        :raises ArityMismatch: wrong number of arguments
        """
        entry = self.function(function_name).entry
        return encode_call_data(entry, args).hex().upper()

    def signatures(self) -> Sequence[tuple[str, str, str]]:
        """Returns ``(kind, signature, selector)`` for every function & event.  Events use the 32 byte topic"""
        return [("function", name, selector(fn.entry)) for name, fn in self.functions.items() if fn.entry] + [
            ("event", name, event_topic(evt.entry)) for name, evt in self.events.items()
        ]
