import pytest

from nethermind.contractkit.codec.type_codec import decode_values, encode_value, encode_values, rec_apply
from nethermind.contractkit.exceptions import ArityMismatch, DecodeError, EncodeError, InvalidType
from nethermind.contractkit.types.abi import TypeDescriptor, TypeKind


def t(type_str: str) -> TypeDescriptor:
    return TypeDescriptor.from_string(type_str)


def round_trip(type_str: str, value):
    return decode_values([t(type_str)], encode_value(t(type_str), value))[0]


class TestTypeParsing:
    def test_integer_aliases(self):
        assert t("uint").canonical == "uint256"
        assert t("int").canonical == "int256"
        assert t("uint8") == TypeDescriptor(kind=TypeKind.uint, size=8)
        assert t("int128") == TypeDescriptor(kind=TypeKind.int, size=128)

    def test_byte_types(self):
        assert t("bytes") == TypeDescriptor(kind=TypeKind.bytes)
        assert t("bytes32") == TypeDescriptor(kind=TypeKind.fixed_bytes, size=32)
        assert t("byte").canonical == "bytes1"

    def test_nested_arrays(self):
        descriptor = t("uint256[2][]")

        assert descriptor.kind == TypeKind.array
        assert descriptor.length is None
        assert descriptor.element == TypeDescriptor(
            kind=TypeKind.array, element=TypeDescriptor(kind=TypeKind.uint, size=256), length=2
        )
        assert descriptor.canonical == "uint256[2][]"
        assert descriptor.leaf() == t("uint256")

    def test_dynamic_types(self):
        assert t("string").is_dynamic
        assert t("bytes").is_dynamic
        assert t("uint256[]").is_dynamic
        assert t("string[2]").is_dynamic
        assert not t("uint256[2]").is_dynamic
        assert not t("bytes32").is_dynamic
        assert not t("address").is_dynamic

    @pytest.mark.parametrize(
        "type_str",
        [
            "uint7",
            "uint264",
            "int0",
            "uint08",
            "bytes0",
            "bytes01",
            "bytes33",
            "tuple",
            "(uint256,bool)",
            "fixed128x18",
            "uint256[0]",
            "uint256[01]",
            "uint256[",
            "",
            "foo",
        ],
    )
    def test_invalid_types(self, type_str):
        with pytest.raises(InvalidType):
            t(type_str)

    def test_non_string_type(self):
        with pytest.raises(InvalidType):
            TypeDescriptor.from_string(None)  # type: ignore[arg-type]


def test_rec_apply_preserves_nesting():
    assert rec_apply(5, str) == "5"
    assert rec_apply([1, [2, [3, 4]], []], str) == ["1", ["2", ["3", "4"]], []]
    assert rec_apply((1, (2, 3)), lambda x: x + 1) == [2, [3, 4]]


class TestRoundTrip:
    @pytest.mark.parametrize("bits", [8, 32, 128, 256])
    def test_uint_boundaries(self, bits):
        max_value = 2**bits - 1
        for value in (0, max_value, max_value - 1):
            assert round_trip(f"uint{bits}", value) == value

    @pytest.mark.parametrize("bits", [8, 64, 256])
    def test_int_boundaries(self, bits):
        min_value, max_value = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1
        for value in (0, min_value, max_value, max_value - 1, -1):
            assert round_trip(f"int{bits}", value) == value

    def test_integers_keep_full_precision(self):
        value = 2**200 + 1
        decoded = round_trip("uint256", value)

        assert decoded == value
        assert isinstance(decoded, int)

    def test_address(self):
        assert round_trip("address", "88977A37D05A4FE86D09E88C88A49C2FCF7D6D8F") == (
            "88977A37D05A4FE86D09E88C88A49C2FCF7D6D8F"
        )
        assert round_trip("address", "0x88977a37d05a4fe86d09e88c88a49c2fcf7d6d8f") == (
            "88977A37D05A4FE86D09E88C88A49C2FCF7D6D8F"
        )
        assert round_trip("address", "0" * 40) == "0" * 40
        assert round_trip("address", "F" * 40) == "F" * 40

    def test_fixed_bytes(self):
        assert round_trip("bytes32", "AB" * 32) == "AB" * 32
        assert round_trip("bytes32", "00" * 32) == "00" * 32
        assert round_trip("bytes4", "0xdeadbeef") == "DEADBEEF"
        assert round_trip("bytes1", b"\xff") == "FF"

    def test_dynamic_bytes(self):
        assert round_trip("bytes", "0102") == "0102"
        assert round_trip("bytes", "") == ""
        assert round_trip("bytes", b"\x00" * 33) == "00" * 33

    def test_string_and_bool(self):
        assert round_trip("string", "  Pieter") == "  Pieter"
        assert round_trip("string", "") == ""
        assert round_trip("bool", True) is True
        assert round_trip("bool", False) is False

    def test_nested_arrays(self):
        assert round_trip("uint8[][2]", [[1, 2], [3]]) == [[1, 2], [3]]
        assert round_trip("uint256[2][]", [[0, 2**256 - 1], [5, 6]]) == [[0, 2**256 - 1], [5, 6]]
        assert round_trip("address[]", ["AA" * 20, "0x" + "bb" * 20]) == ["AA" * 20, "BB" * 20]
        assert round_trip("bytes2[][]", [["0102"], [], ["FFFF", "0000"]]) == [["0102"], [], ["FFFF", "0000"]]
        assert round_trip("string[]", ["a", "bc"]) == ["a", "bc"]

    def test_multiple_values(self):
        types = [t("uint256"), t("address"), t("string"), t("bool[]")]
        values = [42, "88977A37D05A4FE86D09E88C88A49C2FCF7D6D8F", "hello", [True, False]]

        assert decode_values(types, encode_values(types, values)) == values


class TestEncoding:
    def test_uint_encoding(self):
        assert encode_value(t("uint256"), 42).hex() == "00" * 31 + "2a"

    def test_integers_parsed_from_strings(self):
        assert round_trip("uint256", "42") == 42
        assert round_trip("uint256", "0x2A") == 42
        assert round_trip("int8", "-5") == -5

    def test_bools_parsed_from_strings(self):
        assert round_trip("bool", "true") is True
        assert round_trip("bool", "False") is False

    def test_arity_mismatch(self):
        with pytest.raises(ArityMismatch):
            encode_values([t("uint256")], [1, 2])
        with pytest.raises(ArityMismatch):
            encode_values([t("uint256"), t("bool")], [1])

    def test_out_of_range_integers(self):
        with pytest.raises(EncodeError):
            encode_value(t("uint8"), 256)
        with pytest.raises(EncodeError):
            encode_value(t("uint256"), -1)
        with pytest.raises(EncodeError):
            encode_value(t("int8"), 128)

    def test_invalid_values(self):
        with pytest.raises(EncodeError):
            encode_value(t("address"), "0x1234")
        with pytest.raises(EncodeError):
            encode_value(t("address"), b"\x00" * 19)
        with pytest.raises(EncodeError):
            encode_value(t("bytes"), "not hex")
        with pytest.raises(EncodeError):
            encode_value(t("bytes2"), "010203")
        with pytest.raises(EncodeError):
            encode_value(t("uint256"), "forty two")
        with pytest.raises(EncodeError):
            encode_value(t("uint256"), True)
        with pytest.raises(EncodeError):
            encode_value(t("bool"), "maybe")


class TestDecoding:
    def test_accepts_hex_strings(self):
        data = "000000000000000000000000000000000000000000000000000000000000002A"

        assert decode_values([t("uint256")], data) == [42]
        assert decode_values([t("uint256")], "0x" + data.lower()) == [42]

    def test_insufficient_data(self):
        with pytest.raises(DecodeError):
            decode_values([t("uint256")], "00")
        with pytest.raises(DecodeError):
            decode_values([t("uint256"), t("uint256")], "00" * 32)

    def test_invalid_hex(self):
        with pytest.raises(DecodeError):
            decode_values([t("uint256")], "ZZ" * 32)

    def test_dirty_padding(self):
        with pytest.raises(DecodeError):
            decode_values([t("uint8")], "FF" * 32)

    def test_invalid_utf8_string(self):
        data = encode_value(t("bytes"), b"\xff\xfe")

        with pytest.raises(DecodeError):
            decode_values([t("string")], data)
