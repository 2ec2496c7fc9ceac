"""
Shared walker over value formats.

Every backend renders three things per value format: the target-language
type, the statements that serialize a value and the statements that
deserialize one. FormatEmitter dispatches each format node to the matching
``_type_*``, ``_serialize_*`` or ``_deserialize_*`` hook of a backend and
tracks whether a site sits inline in its referrer or inside a sequence or
map, which decides where by-name references are indirected.
"""

from abc import ABC, abstractmethod
from typing import List

from ...formats import (
    Format,
    MapFormat,
    OptionFormat,
    Primitive,
    SeqFormat,
    TupleArrayFormat,
    TupleFormat,
    TypeName,
)
from .mapper import TypeMapper

# Hook suffix of every format node; the walk is exhaustive over this table.
_HOOKS = (
    (Primitive, "primitive"),
    (OptionFormat, "option"),
    (SeqFormat, "seq"),
    (MapFormat, "map"),
    (TupleFormat, "tuple"),
    (TupleArrayFormat, "tuple_array"),
    (TypeName, "type_name"),
)


def indent_lines(lines: List[str], unit: str = "    ", levels: int = 1) -> List[str]:
    """Indent non-blank lines by a number of indentation units."""
    prefix = unit * levels
    return [prefix + line if line else line for line in lines]


class FormatEmitter(ABC):
    """Base class for the per-language format walkers."""

    def __init__(self, mapper: TypeMapper, referrer: str, indent_size: int = 4):
        """
        Initialize an emitter for the declaration of one type.

        Args:
            mapper: Shared type mapping decisions
            referrer: Registry name of the type being declared
            indent_size: Spaces per indentation level
        """
        self.mapper = mapper
        self.referrer = referrer
        self.unit = " " * indent_size
        self._counter = 0

    def fresh(self, prefix: str = "_v") -> str:
        """Return a new local name, unique within this emitter."""
        name = f"{prefix}{self._counter}"
        self._counter += 1
        return name

    def indent(self, lines: List[str], levels: int = 1) -> List[str]:
        return indent_lines(lines, self.unit, levels)

    def is_indirect(self, format: TypeName, inline: bool) -> bool:
        return self.mapper.is_indirect(self.referrer, format, inline)

    @staticmethod
    def child_inline(format: Format, inline: bool) -> bool:
        """Sequences and maps own heap storage; their children are not inline."""
        return inline and not isinstance(format, (SeqFormat, MapFormat))

    # Entry points

    def type_of(self, format: Format, inline: bool = True) -> str:
        """Render the target-language type of a value format."""
        return self._dispatch("_type_", format, inline)

    def serialize(self, format: Format, expr: str, inline: bool = True) -> List[str]:
        """Render statements writing the value of ``expr``."""
        return self._dispatch("_serialize_", format, expr, inline)

    def deserialize(self, format: Format, target: str, inline: bool = True) -> List[str]:
        """Render statements leaving a decoded value in ``target``."""
        return self._dispatch("_deserialize_", format, target, inline)

    def _dispatch(self, prefix: str, format: Format, *args):
        for format_type, suffix in _HOOKS:
            if isinstance(format, format_type):
                return getattr(self, prefix + suffix)(format, *args)
        raise TypeError(f"Unknown format node: {format!r}")

    # Wire helpers

    def write_length(self) -> str:
        return f"write_{self.mapper.length_suffix}"

    def read_length(self) -> str:
        return f"read_{self.mapper.length_suffix}"

    def write_discriminant(self) -> str:
        return f"write_{self.mapper.discriminant_suffix}"

    def read_discriminant(self) -> str:
        return f"read_{self.mapper.discriminant_suffix}"

    def has_zero_size_entries(self, format: Format) -> bool:
        """Whether the entries of a sequence or map encode to no bytes at all."""
        if isinstance(format, SeqFormat):
            return self.mapper.is_zero_size(format.content)
        if isinstance(format, MapFormat):
            return self.mapper.is_zero_size(format.key) and self.mapper.is_zero_size(
                format.value
            )
        return False

    # Hooks

    @abstractmethod
    def _type_primitive(self, format: Primitive, inline: bool) -> str: ...

    @abstractmethod
    def _type_option(self, format: OptionFormat, inline: bool) -> str: ...

    @abstractmethod
    def _type_seq(self, format: SeqFormat, inline: bool) -> str: ...

    @abstractmethod
    def _type_map(self, format: MapFormat, inline: bool) -> str: ...

    @abstractmethod
    def _type_tuple(self, format: TupleFormat, inline: bool) -> str: ...

    @abstractmethod
    def _type_tuple_array(self, format: TupleArrayFormat, inline: bool) -> str: ...

    @abstractmethod
    def _type_type_name(self, format: TypeName, inline: bool) -> str: ...

    @abstractmethod
    def _serialize_primitive(self, format: Primitive, expr: str, inline: bool) -> List[str]: ...

    @abstractmethod
    def _serialize_option(self, format: OptionFormat, expr: str, inline: bool) -> List[str]: ...

    @abstractmethod
    def _serialize_seq(self, format: SeqFormat, expr: str, inline: bool) -> List[str]: ...

    @abstractmethod
    def _serialize_map(self, format: MapFormat, expr: str, inline: bool) -> List[str]: ...

    @abstractmethod
    def _serialize_tuple(self, format: TupleFormat, expr: str, inline: bool) -> List[str]: ...

    @abstractmethod
    def _serialize_tuple_array(
        self, format: TupleArrayFormat, expr: str, inline: bool
    ) -> List[str]: ...

    @abstractmethod
    def _serialize_type_name(self, format: TypeName, expr: str, inline: bool) -> List[str]: ...

    @abstractmethod
    def _deserialize_primitive(
        self, format: Primitive, target: str, inline: bool
    ) -> List[str]: ...

    @abstractmethod
    def _deserialize_option(
        self, format: OptionFormat, target: str, inline: bool
    ) -> List[str]: ...

    @abstractmethod
    def _deserialize_seq(self, format: SeqFormat, target: str, inline: bool) -> List[str]: ...

    @abstractmethod
    def _deserialize_map(self, format: MapFormat, target: str, inline: bool) -> List[str]: ...

    @abstractmethod
    def _deserialize_tuple(
        self, format: TupleFormat, target: str, inline: bool
    ) -> List[str]: ...

    @abstractmethod
    def _deserialize_tuple_array(
        self, format: TupleArrayFormat, target: str, inline: bool
    ) -> List[str]: ...

    @abstractmethod
    def _deserialize_type_name(
        self, format: TypeName, target: str, inline: bool
    ) -> List[str]: ...
