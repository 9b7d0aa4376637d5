from .base import LedgerTransport, LogHandler, SubscriptionHandle
from .json_rpc import JsonRpcTransport
