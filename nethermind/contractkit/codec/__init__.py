from .event_codec import ContractEvent, decode_log
from .function_codec import ContractFunction, build_payload, encode_call_data, unpack_output
from .signatures import display_name, event_topic, full_name, selector, type_suffix
from .type_codec import decode_values, encode_value, encode_values
