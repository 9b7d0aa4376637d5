import pytest

from nethermind.contractkit.codec.signatures import display_name, event_topic, full_name, selector, type_suffix
from nethermind.contractkit.types.abi import AbiEntry


def _function(name: str, *types: str) -> AbiEntry:
    return AbiEntry.from_json({"type": "function", "name": name, "inputs": [{"type": typ} for typ in types]})


def _event(name: str, *types: str) -> AbiEntry:
    return AbiEntry.from_json({"type": "event", "name": name, "inputs": [{"type": typ} for typ in types]})


def test_full_name_canonicalizes_types():
    assert full_name(_function("transfer", "address", "uint")) == "transfer(address,uint256)"
    assert full_name(_function("get")) == "get()"
    assert full_name(_function("batch", "uint[]", "bytes32[2]", "byte")) == "batch(uint256[],bytes32[2],bytes1)"


def test_full_name_is_idempotent():
    entry = _function("transfer(address,uint256)", "address", "uint256")

    assert full_name(entry) == "transfer(address,uint256)"


@pytest.mark.parametrize(
    "signature, name, types",
    [
        ("transfer(address,uint256)", "transfer", "address,uint256"),
        ("get()", "get", ""),
        ("swap(address, address, int128)", "swap", "address,address,int128"),
        ("fallback", "fallback", ""),
        ("broken(uint256", "broken", "uint256"),
    ],
)
def test_display_name_and_type_suffix(signature, name, types):
    assert display_name(signature) == name
    assert type_suffix(signature) == types


class TestSelectors:
    def test_known_function_selectors(self):
        assert selector(_function("transfer", "address", "uint256")) == "A9059CBB"
        assert selector(_function("balanceOf", "address")) == "70A08231"
        assert selector(_function("approve", "address", "uint")) == "095EA7B3"

    def test_selector_is_uppercase_hex(self):
        result = selector(_function("get"))

        assert len(result) == 8
        assert result == result.upper()
        assert result == "6D4CE63C"

    def test_known_event_topics(self):
        assert event_topic(_event("Transfer", "address", "address", "uint256")) == (
            "DDF252AD1BE2C89B69C2B068FC378DAA952BA7F163C4A11628F55A4DF523B3EF"
        )
        assert event_topic(_event("Approval", "address", "address", "uint")) == (
            "8C5BE1E5EBEC7D5BD14F71427D1E84F3DD0314C0F7B2291E5B200AC8C7C3B925"
        )

    def test_overloads_have_distinct_selectors(self):
        assert selector(_function("set", "uint256")) != selector(_function("set", "address"))
