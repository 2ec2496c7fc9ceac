"""Tests for the Python runtime primitives and the bundled runtime files."""

import pytest

from serdegen.runtime import RUNTIME_FILES, runtime_path, runtime_source
from serdegen.runtime.python.serde_runtime import (
    MAX_ULEB128,
    MAX_ZERO_SIZE_LENGTH,
    DeserializationError,
    Deserializer,
    SerializationError,
    Serializer,
)


def encode(method, *values):
    serializer = Serializer()
    for value in values:
        getattr(serializer, method)(value)
    return serializer.get_bytes()


class TestFixedWidth:
    @pytest.mark.parametrize(
        "method, value, expected",
        [
            ("write_u8", 255, "ff"),
            ("write_u16", 0x1234, "3412"),
            ("write_u32", 1, "01000000"),
            ("write_u64", 2, "0200000000000000"),
            ("write_i8", -1, "ff"),
            ("write_i32", -2, "feffffff"),
            ("write_f32", 1.0, "0000803f"),
            ("write_f64", 1.0, "000000000000f03f"),
            ("write_char", "A", "41000000"),
            ("write_bool", True, "01"),
        ],
    )
    def test_little_endian(self, method, value, expected):
        assert encode(method, value) == bytes.fromhex(expected)

    def test_128_bit_integers(self):
        assert encode("write_u128", 1) == bytes([1] + [0] * 15)
        assert Deserializer(encode("write_i128", -(2**127))).read_i128() == -(2**127)

    @pytest.mark.parametrize(
        "method, value",
        [("write_u8", 256), ("write_u16", -1), ("write_i8", 128), ("write_u64", 2**64)],
    )
    def test_out_of_range_integers(self, method, value):
        with pytest.raises(SerializationError, match="out of range"):
            encode(method, value)

    def test_f32_overflow(self):
        with pytest.raises(SerializationError, match="f32"):
            encode("write_f32", 1e40)

    def test_char_must_be_one_character(self):
        with pytest.raises(SerializationError):
            encode("write_char", "ab")

    @pytest.mark.parametrize("value", ["\ud800", "\udbff", "\udfff"])
    def test_char_rejects_surrogates(self, value):
        with pytest.raises(SerializationError, match="char scalar"):
            encode("write_char", value)

    def test_char_accepts_values_around_surrogates(self):
        for value in ("\ud7ff", "\ue000", "\U0010ffff"):
            assert Deserializer(encode("write_char", value)).read_char() == value

    def test_unit_writes_nothing(self):
        assert encode("write_unit", None) == b""
        assert Deserializer(b"").read_unit() is None


class TestUleb128:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (0, "00"),
            (127, "7f"),
            (128, "8001"),
            (300, "ac02"),
            (MAX_ULEB128, "ffffffff0f"),
        ],
    )
    def test_encoding(self, value, expected):
        data = bytes.fromhex(expected)
        assert encode("write_uleb128", value) == data

        deserializer = Deserializer(data)
        assert deserializer.read_uleb128() == value
        deserializer.check_end()

    def test_values_above_u32_are_rejected(self):
        with pytest.raises(SerializationError):
            encode("write_uleb128", MAX_ULEB128 + 1)
        with pytest.raises(SerializationError):
            encode("write_uleb128", -1)

    @pytest.mark.parametrize("data", ["ffffffff10", "ffffffff8f01"])
    def test_overflow(self, data):
        with pytest.raises(DeserializationError, match="Overflow"):
            Deserializer(bytes.fromhex(data)).read_uleb128()

    @pytest.mark.parametrize("data", ["8000", "ff00", "808000"])
    def test_non_minimal(self, data):
        with pytest.raises(DeserializationError, match="Non-canonical"):
            Deserializer(bytes.fromhex(data)).read_uleb128()

    def test_truncated(self):
        with pytest.raises(DeserializationError, match="end of input"):
            Deserializer(b"\x80").read_uleb128()


class TestValidation:
    def test_bool(self):
        assert Deserializer(b"\x00").read_bool() is False
        assert Deserializer(b"\x01").read_bool() is True
        with pytest.raises(DeserializationError, match="bool"):
            Deserializer(b"\x02").read_bool()

    @pytest.mark.parametrize("scalar", [0xD800, 0xDFFF, 0x110000])
    def test_invalid_char(self, scalar):
        with pytest.raises(DeserializationError, match="char"):
            Deserializer(scalar.to_bytes(4, "little")).read_char()

    def test_valid_char(self):
        assert Deserializer((0x1F600).to_bytes(4, "little")).read_char() == "\U0001F600"

    def test_invalid_utf8(self):
        with pytest.raises(DeserializationError, match="UTF-8"):
            Deserializer(b"\xff\xfe").read_str(2)

    def test_option_tag(self):
        assert Deserializer(b"\x01").read_option_tag() is True
        with pytest.raises(DeserializationError):
            Deserializer(b"\x03").read_option_tag()

    def test_trailing_input(self):
        deserializer = Deserializer(b"\x01\x02")
        deserializer.read_u8()
        assert deserializer.remaining() == 1
        with pytest.raises(DeserializationError, match="Trailing"):
            deserializer.check_end()


class TestZeroSizeLengths:
    def test_limit_is_inclusive(self):
        Serializer().check_zero_size_length(MAX_ZERO_SIZE_LENGTH)
        Deserializer(b"").check_zero_size_length(MAX_ZERO_SIZE_LENGTH)

    def test_encode_rejects_longer_runs(self):
        with pytest.raises(SerializationError, match="zero-size"):
            Serializer().check_zero_size_length(MAX_ZERO_SIZE_LENGTH + 1)

    def test_decode_rejects_longer_runs(self):
        with pytest.raises(DeserializationError, match="zero-size"):
            Deserializer(b"").check_zero_size_length(2**64 - 1)


class TestCanonicalMapHelpers:
    def test_sort_map_entries_keeps_the_prefix(self):
        serializer = Serializer()
        serializer.write_uleb128(2)
        offsets = []
        for key, value in (("b", 2), ("a", 1)):
            offsets.append(serializer.get_offset())
            serializer.write_uleb128(1)
            serializer.write_raw(key.encode())
            serializer.write_u8(value)
        serializer.sort_map_entries(offsets)

        assert serializer.get_bytes() == bytes.fromhex("02" "016101" "016202")

    def test_sort_single_entry_is_a_no_op(self):
        serializer = Serializer()
        serializer.write_u8(9)
        serializer.sort_map_entries([0])
        assert serializer.get_bytes() == b"\x09"

    def test_check_key_order(self):
        deserializer = Deserializer(b"\x01a\x01b")

        deserializer.check_key_order(None, (0, 2))
        deserializer.check_key_order((0, 2), (2, 4))
        with pytest.raises(DeserializationError, match="canonical order"):
            deserializer.check_key_order((2, 4), (0, 2))
        with pytest.raises(DeserializationError):
            deserializer.check_key_order((0, 2), (0, 2))


class TestRuntimeFiles:
    @pytest.mark.parametrize("language", sorted(RUNTIME_FILES))
    def test_runtime_sources_ship_with_the_package(self, language):
        assert runtime_path(language).is_file()
        assert "uleb128" in runtime_source(language)

    def test_unknown_language(self):
        with pytest.raises(KeyError, match="No runtime"):
            runtime_path("cobol")
