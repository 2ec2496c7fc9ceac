"""
Runtime support for generated Python serialization code.

Provides the binary primitives shared by the bincode and canonical formats:
little-endian fixed-width integers and floats, ULEB128 lengths, option tags,
raw byte runs, and the canonical map-key ordering helpers. Generated modules
import this file and call nothing else.
"""

import struct
from typing import List, Optional, Tuple

MAX_ULEB128 = 2**32 - 1

# Entries of a sequence or map whose entries encode to no bytes are not
# bounded by the input size, so their count is capped on both sides.
MAX_ZERO_SIZE_LENGTH = 2**20

_FIXED = {
    "u8": (1, False),
    "u16": (2, False),
    "u32": (4, False),
    "u64": (8, False),
    "u128": (16, False),
    "i8": (1, True),
    "i16": (2, True),
    "i32": (4, True),
    "i64": (8, True),
    "i128": (16, True),
}


class SerdeError(Exception):
    """Base exception for runtime errors."""

    pass


class SerializationError(SerdeError):
    """Raised when a value cannot be encoded."""

    pass


class DeserializationError(SerdeError):
    """Raised when input bytes are not a valid encoding."""

    pass


class Serializer:
    """Appends encoded values to a growing byte buffer."""

    def __init__(self):
        self._output = bytearray()

    def get_bytes(self) -> bytes:
        return bytes(self._output)

    def get_offset(self) -> int:
        """Current length of the output."""
        return len(self._output)

    def write_raw(self, data: bytes) -> None:
        self._output.extend(data)

    def _write_int(self, value: int, suffix: str) -> None:
        size, signed = _FIXED[suffix]
        try:
            self._output.extend(int(value).to_bytes(size, "little", signed=signed))
        except OverflowError as e:
            raise SerializationError(f"Value {value} out of range for {suffix}") from e

    def write_u8(self, value: int) -> None:
        self._write_int(value, "u8")

    def write_u16(self, value: int) -> None:
        self._write_int(value, "u16")

    def write_u32(self, value: int) -> None:
        self._write_int(value, "u32")

    def write_u64(self, value: int) -> None:
        self._write_int(value, "u64")

    def write_u128(self, value: int) -> None:
        self._write_int(value, "u128")

    def write_i8(self, value: int) -> None:
        self._write_int(value, "i8")

    def write_i16(self, value: int) -> None:
        self._write_int(value, "i16")

    def write_i32(self, value: int) -> None:
        self._write_int(value, "i32")

    def write_i64(self, value: int) -> None:
        self._write_int(value, "i64")

    def write_i128(self, value: int) -> None:
        self._write_int(value, "i128")

    def write_f32(self, value: float) -> None:
        try:
            self._output.extend(struct.pack("<f", value))
        except (OverflowError, struct.error) as e:
            raise SerializationError(f"Value {value} out of range for f32") from e

    def write_f64(self, value: float) -> None:
        self._output.extend(struct.pack("<d", value))

    def write_bool(self, value: bool) -> None:
        self._output.append(1 if value else 0)

    def write_unit(self, value: None = None) -> None:
        pass

    def write_char(self, value: str) -> None:
        if len(value) != 1:
            raise SerializationError(f"Expected a single character, got {value!r}")
        if 0xD800 <= ord(value) <= 0xDFFF:
            raise SerializationError(f"Invalid char scalar value: {ord(value):#x}")
        self._write_int(ord(value), "u32")

    def write_option_tag(self, present: bool) -> None:
        self._output.append(1 if present else 0)

    def write_uleb128(self, value: int) -> None:
        """Write an unsigned LEB128 value, at most 2**32 - 1."""
        if value < 0 or value > MAX_ULEB128:
            raise SerializationError(f"Value {value} out of range for uleb128")
        while value >= 0x80:
            self._output.append((value & 0x7F) | 0x80)
            value >>= 7
        self._output.append(value)

    def check_zero_size_length(self, size: int) -> None:
        if size > MAX_ZERO_SIZE_LENGTH:
            raise SerializationError(
                f"Too many zero-size entries: {size} (at most {MAX_ZERO_SIZE_LENGTH})"
            )

    def sort_map_entries(self, offsets: List[int]) -> None:
        """
        Reorder the map entries written since ``offsets[0]``.

        Each offset marks the start of one encoded (key, value) entry; the
        last entry ends at the current offset. Entries are sorted by their
        encoded bytes, which orders them by key because key encodings are
        self-delimiting.
        """
        if len(offsets) < 2:
            return
        bounds = list(offsets) + [len(self._output)]
        entries = [
            bytes(self._output[bounds[i] : bounds[i + 1]]) for i in range(len(offsets))
        ]
        entries.sort()
        self._output[offsets[0] :] = b"".join(entries)


class Deserializer:
    """Reads encoded values from a byte buffer, front to back."""

    def __init__(self, data: bytes):
        self._input = memoryview(bytes(data))
        self._offset = 0

    def get_offset(self) -> int:
        """Number of bytes consumed so far."""
        return self._offset

    def remaining(self) -> int:
        return len(self._input) - self._offset

    def read_raw(self, size: int) -> bytes:
        if size < 0 or size > self.remaining():
            raise DeserializationError(
                f"Unexpected end of input: need {size} bytes at offset {self._offset}"
            )
        data = bytes(self._input[self._offset : self._offset + size])
        self._offset += size
        return data

    def _read_int(self, suffix: str) -> int:
        size, signed = _FIXED[suffix]
        return int.from_bytes(self.read_raw(size), "little", signed=signed)

    def read_u8(self) -> int:
        return self._read_int("u8")

    def read_u16(self) -> int:
        return self._read_int("u16")

    def read_u32(self) -> int:
        return self._read_int("u32")

    def read_u64(self) -> int:
        return self._read_int("u64")

    def read_u128(self) -> int:
        return self._read_int("u128")

    def read_i8(self) -> int:
        return self._read_int("i8")

    def read_i16(self) -> int:
        return self._read_int("i16")

    def read_i32(self) -> int:
        return self._read_int("i32")

    def read_i64(self) -> int:
        return self._read_int("i64")

    def read_i128(self) -> int:
        return self._read_int("i128")

    def read_f32(self) -> float:
        return struct.unpack("<f", self.read_raw(4))[0]

    def read_f64(self) -> float:
        return struct.unpack("<d", self.read_raw(8))[0]

    def read_bool(self) -> bool:
        value = self.read_u8()
        if value > 1:
            raise DeserializationError(f"Invalid bool byte: {value}")
        return value == 1

    def read_unit(self) -> None:
        return None

    def read_char(self) -> str:
        value = self.read_u32()
        if value > 0x10FFFF or 0xD800 <= value <= 0xDFFF:
            raise DeserializationError(f"Invalid char scalar value: {value:#x}")
        return chr(value)

    def read_option_tag(self) -> bool:
        tag = self.read_u8()
        if tag > 1:
            raise DeserializationError(f"Invalid option tag: {tag}")
        return tag == 1

    def read_uleb128(self) -> int:
        """Read a minimal unsigned LEB128 value of at most 2**32 - 1."""
        value = 0
        for shift in range(0, 35, 7):
            byte = self.read_u8()
            digit = byte & 0x7F
            value |= digit << shift
            if digit << shift > MAX_ULEB128:
                raise DeserializationError("Overflow while parsing uleb128 value")
            if byte & 0x80 == 0:
                if digit == 0 and shift > 0:
                    raise DeserializationError("Non-canonical uleb128 encoding")
                return value
        raise DeserializationError("Overflow while parsing uleb128 value")

    def read_str(self, size: int) -> str:
        data = self.read_raw(size)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DeserializationError(f"Invalid UTF-8 string: {e}") from e

    def read_bytes(self, size: int) -> bytes:
        return self.read_raw(size)

    def check_zero_size_length(self, size: int) -> None:
        if size > MAX_ZERO_SIZE_LENGTH:
            raise DeserializationError(
                f"Too many zero-size entries: {size} (at most {MAX_ZERO_SIZE_LENGTH})"
            )

    def check_key_order(
        self, previous: Optional[Tuple[int, int]], current: Tuple[int, int]
    ) -> None:
        """
        Require the encoded key at ``current`` to sort strictly after the
        one at ``previous`` (both are (start, end) offsets).
        """
        if previous is None:
            return
        before = bytes(self._input[previous[0] : previous[1]])
        key = bytes(self._input[current[0] : current[1]])
        if before >= key:
            raise DeserializationError(
                f"Map keys are not in canonical order at offset {current[0]}"
            )

    def check_end(self) -> None:
        if self.remaining():
            raise DeserializationError(
                f"Trailing input: {self.remaining()} bytes after offset {self._offset}"
            )


class Serializable:
    """Base class of every generated type."""

    __slots__ = ()

    def serialize(self, serializer: Serializer) -> None:
        raise NotImplementedError

    @classmethod
    def deserialize(cls, deserializer: Deserializer):
        raise NotImplementedError

    def to_bytes(self) -> bytes:
        serializer = Serializer()
        self.serialize(serializer)
        return serializer.get_bytes()

    @classmethod
    def from_bytes(cls, data: bytes):
        deserializer = Deserializer(data)
        value = cls.deserialize(deserializer)
        deserializer.check_end()
        return value
