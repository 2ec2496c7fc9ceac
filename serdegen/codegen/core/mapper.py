"""
Backend-agnostic type mapping decisions.

The EncodingContract fixes the binary wire parameters (length-prefix and
discriminant encodings, map key ordering) for one generation run, and the
TypeMapper combines it with the emission plan so that every backend takes
the same decisions about primitive widths, indirection points and
emission order.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional, Set, Tuple

from ...analyzer import EmissionGroup, EmissionPlan
from ...formats import (
    ContainerFormat,
    EnumFormat,
    Format,
    MapFormat,
    Primitive,
    PrimitiveKind,
    Registry,
    SeqFormat,
    TupleArrayFormat,
    TupleFormat,
    TypeName,
    child_formats,
    container_formats,
    shape_formats,
)
from .config import ConfigError, GeneratorConfig


class Encoding(Enum):
    """Binary format variants."""

    BINCODE = "bincode"
    CANONICAL = "canonical"


@dataclass(frozen=True)
class EncodingContract:
    """
    Wire parameters shared by every backend of a run.

    Attributes:
        encoding: The binary format variant.
        length_prefix: Runtime primitive used for Seq/Map/Str/Bytes lengths.
        discriminant: Runtime primitive used for enum discriminants.
        sort_map_keys: Whether map entries are sorted by encoded key bytes.
    """

    encoding: Encoding
    length_prefix: str
    discriminant: str
    sort_map_keys: bool

    @property
    def canonical(self) -> bool:
        return self.encoding == Encoding.CANONICAL

    @classmethod
    def for_encoding(cls, encoding) -> "EncodingContract":
        """
        Get the contract of a binary format variant.

        Raises:
            ConfigError: If the variant is unknown.
        """
        try:
            key = encoding if isinstance(encoding, Encoding) else Encoding(str(encoding).lower())
        except ValueError:
            raise ConfigError(
                f"Unknown encoding: {encoding}. "
                f"Available: {', '.join(e.value for e in Encoding)}"
            )
        return CONTRACTS[key]

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> "EncodingContract":
        return cls.for_encoding(config.encoding)


BINCODE_CONTRACT = EncodingContract(
    encoding=Encoding.BINCODE,
    length_prefix="u64",
    discriminant="u32",
    sort_map_keys=False,
)

CANONICAL_CONTRACT = EncodingContract(
    encoding=Encoding.CANONICAL,
    length_prefix="uleb128",
    discriminant="uleb128",
    sort_map_keys=True,
)

CONTRACTS = {
    Encoding.BINCODE: BINCODE_CONTRACT,
    Encoding.CANONICAL: CANONICAL_CONTRACT,
}

# Runtime primitive suffix of each fixed-size kind (write_<suffix>/read_<suffix>).
PRIMITIVE_SUFFIXES = {
    PrimitiveKind.UNIT: "unit",
    PrimitiveKind.BOOL: "bool",
    PrimitiveKind.I8: "i8",
    PrimitiveKind.I16: "i16",
    PrimitiveKind.I32: "i32",
    PrimitiveKind.I64: "i64",
    PrimitiveKind.I128: "i128",
    PrimitiveKind.U8: "u8",
    PrimitiveKind.U16: "u16",
    PrimitiveKind.U32: "u32",
    PrimitiveKind.U64: "u64",
    PrimitiveKind.U128: "u128",
    PrimitiveKind.F32: "f32",
    PrimitiveKind.F64: "f64",
    PrimitiveKind.CHAR: "char",
}


class TypeMapper:
    """
    Central decisions every backend applies identically.

    Backends ask the mapper which runtime primitive encodes a value, where
    a by-name reference must be indirected, and in which order types and
    forward declarations are emitted.
    """

    def __init__(
        self, registry: Registry, plan: EmissionPlan, contract: EncodingContract
    ):
        self.registry = registry
        self.plan = plan
        self.contract = contract

    # Wire contract

    def primitive_suffix(self, kind: PrimitiveKind) -> str:
        """Runtime primitive for a fixed-size kind (not STR/BYTES)."""
        if kind in (PrimitiveKind.STR, PrimitiveKind.BYTES):
            raise ValueError(f"{kind.value} is length-prefixed, not fixed-size")
        return PRIMITIVE_SUFFIXES[kind]

    @property
    def length_suffix(self) -> str:
        return self.contract.length_prefix

    @property
    def discriminant_suffix(self) -> str:
        return self.contract.discriminant

    @property
    def sort_map_keys(self) -> bool:
        return self.contract.sort_map_keys

    # Emission order

    @property
    def groups(self) -> List[EmissionGroup]:
        return self.plan.groups

    @property
    def order(self) -> List[str]:
        return self.plan.order

    def container(self, name: str) -> ContainerFormat:
        return self.registry[name]

    def iter_containers(self) -> Iterator[Tuple[str, ContainerFormat]]:
        """Yield (name, container) pairs in emission order."""
        for name in self.plan.order:
            yield name, self.registry[name]

    def forward_declarations(self, group: EmissionGroup) -> List[str]:
        """Members of a group that are referenced before being declared."""
        if not group.cyclic:
            return []
        return list(group.names)

    # Indirection

    def is_indirect(self, referrer: str, format: TypeName, inline: bool = True) -> bool:
        """
        Decide whether a reference site is stored behind a heap pointer.

        Args:
            referrer: Type whose declaration holds the reference
            format: The reference
            inline: False when the site is already inside a heap-allocated
                collection (sequence or map), which bounds its size

        Returns:
            True if the site must be indirected
        """
        if not inline and format.name not in self.plan.forced_indirect:
            return False
        return self.plan.requires_indirection(referrer, format.name)

    def indirect_sites(self, referrer: str) -> List[str]:
        """List the indirected reference targets of a type, in walk order."""
        sites = []

        def walk(format: Format, inline: bool):
            if isinstance(format, TypeName):
                if self.is_indirect(referrer, format, inline):
                    sites.append(format.name)
                return
            child_inline = inline and not isinstance(format, (SeqFormat, MapFormat))
            for child in child_formats(format):
                walk(child, child_inline)

        for format in container_formats(self.registry[referrer]):
            walk(format, True)
        return sites

    # Transitive shape queries

    def reaches(
        self,
        format: Format,
        predicate: Callable[[Format], bool],
        _visited: Optional[Set[str]] = None,
    ) -> bool:
        """
        Check whether a format, following references, contains a node
        matching the predicate.
        """
        visited = _visited if _visited is not None else set()
        if predicate(format):
            return True
        if isinstance(format, TypeName):
            if format.name in visited:
                return False
            visited.add(format.name)
            return any(
                self.reaches(child, predicate, visited)
                for child in container_formats(self.registry[format.name])
            )
        return any(self.reaches(child, predicate, visited) for child in child_formats(format))

    def is_zero_size(self, format: Format, _visiting: Optional[Set[str]] = None) -> bool:
        """
        Check whether every value of a format encodes to zero bytes.

        Unit, tuples and fixed arrays of such values, and structs made only
        of them qualify. A reference back into a type being examined counts
        as zero-size.
        """
        visiting = _visiting if _visiting is not None else set()
        if isinstance(format, Primitive):
            return format.kind == PrimitiveKind.UNIT
        if isinstance(format, TupleFormat):
            return all(self.is_zero_size(item, visiting) for item in format.formats)
        if isinstance(format, TupleArrayFormat):
            return format.size == 0 or self.is_zero_size(format.content, visiting)
        if isinstance(format, TypeName):
            if format.name in visiting:
                return True
            container = self.registry[format.name]
            if isinstance(container, EnumFormat):
                return False
            visiting.add(format.name)
            try:
                return all(
                    self.is_zero_size(child, visiting) for child in shape_formats(container)
                )
            finally:
                visiting.discard(format.name)
        return False

    def contains_float(self, format: Format) -> bool:
        return self.reaches(
            format, lambda node: isinstance(node, Primitive) and node.kind.is_float
        )

    def contains_collection(self, format: Format) -> bool:
        return self.reaches(format, lambda node: isinstance(node, (SeqFormat, MapFormat)))

    def contains_type_name(self, format: Format) -> bool:
        return self.reaches(format, lambda node: isinstance(node, TypeName))

    def type_contains_float(self, name: str) -> bool:
        return self.contains_float(TypeName(name))

    def is_enum(self, name: str) -> bool:
        return isinstance(self.registry[name], EnumFormat)
