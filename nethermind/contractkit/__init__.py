from .contract import Contract
from .types.calls import ClientConfig, DecodedEvent, DecodedResult
