"""
Format model for named data types.

Describes the closed set of value shapes (primitives, options, sequences,
maps, tuples, fixed arrays and references to named types) and the
container shapes a named type can take, together with the Registry that
maps type names to containers. Also converts registry documents (the
serde-reflection layout found in YAML/JSON files) to and from the model.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .logging_config import get_logger

logger = get_logger(__name__)

MAX_DISCRIMINANT = 2**32 - 1


class FormatError(Exception):
    """Base exception for format model errors."""

    pass


class InvalidRegistryError(FormatError):
    """Raised when a registry holds a structurally impossible definition."""

    pass


class UnresolvedReferenceError(InvalidRegistryError):
    """Raised when a type name refers to no entry of the registry."""

    def __init__(self, referrer: str, name: str):
        self.referrer = referrer
        self.name = name
        super().__init__(f"Type '{referrer}' refers to unknown type '{name}'")


class PrimitiveKind(Enum):
    """Primitive value kinds, named as in registry documents."""

    UNIT = "UNIT"
    BOOL = "BOOL"
    I8 = "I8"
    I16 = "I16"
    I32 = "I32"
    I64 = "I64"
    I128 = "I128"
    U8 = "U8"
    U16 = "U16"
    U32 = "U32"
    U64 = "U64"
    U128 = "U128"
    F32 = "F32"
    F64 = "F64"
    CHAR = "CHAR"
    STR = "STR"
    BYTES = "BYTES"

    @property
    def is_float(self) -> bool:
        return self in (PrimitiveKind.F32, PrimitiveKind.F64)


# Value formats


@dataclass(frozen=True)
class Primitive:
    """A primitive value."""

    kind: PrimitiveKind


@dataclass(frozen=True)
class OptionFormat:
    """An optional value."""

    content: "Format"


@dataclass(frozen=True)
class SeqFormat:
    """A variable-length sequence of values."""

    content: "Format"


@dataclass(frozen=True)
class MapFormat:
    """A map from keys to values."""

    key: "Format"
    value: "Format"


@dataclass(frozen=True)
class TupleFormat:
    """A fixed, heterogeneous tuple of values."""

    formats: Tuple["Format", ...]

    def __post_init__(self):
        object.__setattr__(self, "formats", tuple(self.formats))


@dataclass(frozen=True)
class TupleArrayFormat:
    """A fixed-size array of values of the same format."""

    content: "Format"
    size: int


@dataclass(frozen=True)
class TypeName:
    """A reference, by name, to another entry of the registry."""

    name: str


Format = Union[
    Primitive,
    OptionFormat,
    SeqFormat,
    MapFormat,
    TupleFormat,
    TupleArrayFormat,
    TypeName,
]

FORMAT_TYPES = (
    Primitive,
    OptionFormat,
    SeqFormat,
    MapFormat,
    TupleFormat,
    TupleArrayFormat,
    TypeName,
)

# Shorthands used throughout the code and the tests.
UNIT = Primitive(PrimitiveKind.UNIT)
BOOL = Primitive(PrimitiveKind.BOOL)
I8 = Primitive(PrimitiveKind.I8)
I16 = Primitive(PrimitiveKind.I16)
I32 = Primitive(PrimitiveKind.I32)
I64 = Primitive(PrimitiveKind.I64)
I128 = Primitive(PrimitiveKind.I128)
U8 = Primitive(PrimitiveKind.U8)
U16 = Primitive(PrimitiveKind.U16)
U32 = Primitive(PrimitiveKind.U32)
U64 = Primitive(PrimitiveKind.U64)
U128 = Primitive(PrimitiveKind.U128)
F32 = Primitive(PrimitiveKind.F32)
F64 = Primitive(PrimitiveKind.F64)
CHAR = Primitive(PrimitiveKind.CHAR)
STR = Primitive(PrimitiveKind.STR)
BYTES = Primitive(PrimitiveKind.BYTES)


# Container formats


@dataclass(frozen=True)
class Named:
    """A named field of a struct."""

    name: str
    format: Format


@dataclass(frozen=True)
class UnitStruct:
    """A struct (or variant) carrying no data."""

    pass


@dataclass(frozen=True)
class NewTypeStruct:
    """A struct (or variant) wrapping exactly one value."""

    format: Format


@dataclass(frozen=True)
class TupleStruct:
    """A struct (or variant) made of unnamed, ordered values."""

    formats: Tuple[Format, ...]

    def __post_init__(self):
        object.__setattr__(self, "formats", tuple(self.formats))


@dataclass(frozen=True)
class Struct:
    """A struct (or variant) made of named fields in declared order."""

    fields: Tuple[Named, ...]

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))


StructShape = Union[UnitStruct, NewTypeStruct, TupleStruct, Struct]
STRUCT_SHAPES = (UnitStruct, NewTypeStruct, TupleStruct, Struct)


@dataclass(frozen=True)
class Variant:
    """A variant of an enum: its discriminant, name and payload shape."""

    index: int
    name: str
    shape: StructShape


@dataclass(frozen=True)
class EnumFormat:
    """A tagged union; variants are kept sorted by discriminant."""

    variants: Tuple[Variant, ...] = field(default_factory=tuple)

    def __post_init__(self):
        ordered = tuple(sorted(self.variants, key=lambda variant: variant.index))
        object.__setattr__(self, "variants", ordered)

    def get_variant(self, index: int) -> Optional[Variant]:
        """Get variant by discriminant."""
        for variant in self.variants:
            if variant.index == index:
                return variant
        return None


ContainerFormat = Union[UnitStruct, NewTypeStruct, TupleStruct, Struct, EnumFormat]


def shape_formats(shape: StructShape) -> List[Format]:
    """Return the value formats carried by a struct shape, in order."""
    if isinstance(shape, UnitStruct):
        return []
    if isinstance(shape, NewTypeStruct):
        return [shape.format]
    if isinstance(shape, TupleStruct):
        return list(shape.formats)
    if isinstance(shape, Struct):
        return [named.format for named in shape.fields]
    raise TypeError(f"Not a struct shape: {shape!r}")


def container_formats(container: ContainerFormat) -> List[Format]:
    """Return every top-level value format of a container, in order."""
    if isinstance(container, EnumFormat):
        formats = []
        for variant in container.variants:
            formats.extend(shape_formats(variant.shape))
        return formats
    return shape_formats(container)


def child_formats(format: Format) -> Tuple[Format, ...]:
    """Return the direct sub-formats of a value format."""
    if isinstance(format, (Primitive, TypeName)):
        return ()
    if isinstance(format, (OptionFormat, SeqFormat, TupleArrayFormat)):
        return (format.content,)
    if isinstance(format, MapFormat):
        return (format.key, format.value)
    if isinstance(format, TupleFormat):
        return format.formats
    raise TypeError(f"Unknown format node: {format!r}")


def iter_type_names(format: Format) -> Iterator[str]:
    """Yield the names referenced by a format tree, depth first."""
    stack = [format]
    while stack:
        node = stack.pop()
        if isinstance(node, TypeName):
            yield node.name
        else:
            stack.extend(reversed(child_formats(node)))


class Registry:
    """Insertion-ordered mapping from type names to container formats."""

    def __init__(
        self,
        containers: Optional[
            Union[Dict[str, ContainerFormat], Iterable[Tuple[str, ContainerFormat]]]
        ] = None,
    ):
        self._containers: Dict[str, ContainerFormat] = {}
        if containers is None:
            return
        items = containers.items() if isinstance(containers, dict) else containers
        for name, container in items:
            self.add(name, container)

    def add(self, name: str, container: ContainerFormat) -> None:
        """Add a named container.

        Raises:
            InvalidRegistryError: If the name is already present or invalid.
        """
        if not isinstance(name, str) or not name:
            raise InvalidRegistryError(f"Invalid type name: {name!r}")
        if name in self._containers:
            raise InvalidRegistryError(f"Duplicate type name: {name}")
        self._containers[name] = container

    def __getitem__(self, name: str) -> ContainerFormat:
        return self._containers[name]

    def __contains__(self, name: object) -> bool:
        return name in self._containers

    def __iter__(self) -> Iterator[str]:
        return iter(self._containers)

    def __len__(self) -> int:
        return len(self._containers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Registry):
            return NotImplemented
        return list(self._containers.items()) == list(other._containers.items())

    def __repr__(self) -> str:
        return f"Registry({list(self._containers)!r})"

    def get(self, name: str) -> Optional[ContainerFormat]:
        return self._containers.get(name)

    def names(self) -> List[str]:
        return list(self._containers)

    def items(self) -> List[Tuple[str, ContainerFormat]]:
        return list(self._containers.items())

    def position(self, name: str) -> int:
        """Return the insertion index of a type name."""
        return list(self._containers).index(name)

    def validate(self) -> None:
        """
        Check that the registry is closed and structurally sound.

        Raises:
            UnresolvedReferenceError: For a reference to an unknown name.
            InvalidRegistryError: For duplicate discriminants, variant or
                field names, empty enums, or malformed formats.
        """
        for name, container in self._containers.items():
            _validate_container(name, container)
            for format in container_formats(container):
                for referenced in iter_type_names(format):
                    if referenced not in self._containers:
                        logger.error(
                            "Unresolved reference from %s to %s", name, referenced
                        )
                        raise UnresolvedReferenceError(name, referenced)
        logger.debug("Registry validated: %d types", len(self._containers))


def _validate_container(name: str, container: ContainerFormat) -> None:
    if isinstance(container, EnumFormat):
        if not container.variants:
            raise InvalidRegistryError(f"Enum '{name}' has no variants")
        seen_indexes = set()
        seen_names = set()
        for variant in container.variants:
            if not 0 <= variant.index <= MAX_DISCRIMINANT:
                raise InvalidRegistryError(
                    f"Enum '{name}' has out-of-range discriminant {variant.index}"
                )
            if variant.index in seen_indexes:
                raise InvalidRegistryError(
                    f"Enum '{name}' has duplicate discriminant {variant.index}"
                )
            if variant.name in seen_names:
                raise InvalidRegistryError(
                    f"Enum '{name}' has duplicate variant name '{variant.name}'"
                )
            seen_indexes.add(variant.index)
            seen_names.add(variant.name)
            _validate_shape(f"{name}::{variant.name}", variant.shape)
    elif isinstance(container, STRUCT_SHAPES):
        _validate_shape(name, container)
    else:
        raise InvalidRegistryError(f"Type '{name}' has an unknown container format")


def _validate_shape(context: str, shape: StructShape) -> None:
    if not isinstance(shape, STRUCT_SHAPES):
        raise InvalidRegistryError(f"'{context}' has an unknown shape: {shape!r}")
    if isinstance(shape, Struct):
        seen = set()
        for named in shape.fields:
            if named.name in seen:
                raise InvalidRegistryError(
                    f"'{context}' has duplicate field name '{named.name}'"
                )
            seen.add(named.name)
    for format in shape_formats(shape):
        _validate_format(context, format)


def _validate_format(context: str, format: Format) -> None:
    if not isinstance(format, FORMAT_TYPES):
        raise InvalidRegistryError(f"'{context}' has an unknown format: {format!r}")
    if isinstance(format, TupleArrayFormat) and format.size < 0:
        raise InvalidRegistryError(
            f"'{context}' has a fixed array with negative size {format.size}"
        )
    for child in child_formats(format):
        _validate_format(context, child)


# Registry documents


def format_from_value(value: Any) -> Format:
    """
    Build a value format from its document form.

    Args:
        value: A primitive name such as ``"U64"`` or a single-key mapping
            such as ``{"SEQ": "U8"}``.

    Returns:
        The corresponding format.

    Raises:
        InvalidRegistryError: If the value is not a known format.
    """
    if isinstance(value, str):
        try:
            return Primitive(PrimitiveKind(value.upper()))
        except ValueError:
            raise InvalidRegistryError(f"Unknown primitive format: {value}")

    tag, body = _single_entry(value, "format")
    if tag == "TYPENAME":
        return TypeName(str(body))
    if tag == "OPTION":
        return OptionFormat(format_from_value(body))
    if tag == "SEQ":
        return SeqFormat(format_from_value(body))
    if tag == "MAP":
        body = _upper_keys(body, "MAP")
        return MapFormat(
            key=format_from_value(_required(body, "KEY", "MAP")),
            value=format_from_value(_required(body, "VALUE", "MAP")),
        )
    if tag == "TUPLE":
        return TupleFormat(tuple(format_from_value(item) for item in _as_list(body)))
    if tag == "TUPLEARRAY":
        body = _upper_keys(body, "TUPLEARRAY")
        return TupleArrayFormat(
            content=format_from_value(_required(body, "CONTENT", "TUPLEARRAY")),
            size=_as_int(_required(body, "SIZE", "TUPLEARRAY")),
        )
    raise InvalidRegistryError(f"Unknown format tag: {tag}")


def format_to_value(format: Format) -> Any:
    """Inverse of :func:`format_from_value`."""
    if isinstance(format, Primitive):
        return format.kind.value
    if isinstance(format, TypeName):
        return {"TYPENAME": format.name}
    if isinstance(format, OptionFormat):
        return {"OPTION": format_to_value(format.content)}
    if isinstance(format, SeqFormat):
        return {"SEQ": format_to_value(format.content)}
    if isinstance(format, MapFormat):
        return {
            "MAP": {
                "KEY": format_to_value(format.key),
                "VALUE": format_to_value(format.value),
            }
        }
    if isinstance(format, TupleFormat):
        return {"TUPLE": [format_to_value(item) for item in format.formats]}
    if isinstance(format, TupleArrayFormat):
        return {
            "TUPLEARRAY": {
                "CONTENT": format_to_value(format.content),
                "SIZE": format.size,
            }
        }
    raise TypeError(f"Unknown format node: {format!r}")


def shape_from_value(value: Any) -> StructShape:
    """Build a struct or variant shape from its document form."""
    if isinstance(value, str):
        if value.upper() in ("UNIT", "UNITSTRUCT"):
            return UnitStruct()
        raise InvalidRegistryError(f"Unknown struct shape: {value}")

    tag, body = _single_entry(value, "shape")
    if tag in ("NEWTYPE", "NEWTYPESTRUCT"):
        return NewTypeStruct(format_from_value(body))
    if tag in ("TUPLE", "TUPLESTRUCT"):
        return TupleStruct(tuple(format_from_value(item) for item in _as_list(body)))
    if tag == "STRUCT":
        fields = []
        for item in _as_list(body):
            field_name, field_value = _single_entry(item, "field", upper=False)
            fields.append(Named(field_name, format_from_value(field_value)))
        return Struct(tuple(fields))
    raise InvalidRegistryError(f"Unknown struct shape: {tag}")


def shape_to_value(shape: StructShape, variant: bool = False) -> Any:
    """Inverse of :func:`shape_from_value`."""
    if isinstance(shape, UnitStruct):
        return "UNIT" if variant else "UNITSTRUCT"
    if isinstance(shape, NewTypeStruct):
        return {"NEWTYPE" if variant else "NEWTYPESTRUCT": format_to_value(shape.format)}
    if isinstance(shape, TupleStruct):
        return {
            "TUPLE" if variant else "TUPLESTRUCT": [
                format_to_value(item) for item in shape.formats
            ]
        }
    if isinstance(shape, Struct):
        return {
            "STRUCT": [
                {named.name: format_to_value(named.format)} for named in shape.fields
            ]
        }
    raise TypeError(f"Not a struct shape: {shape!r}")


def container_from_value(value: Any) -> ContainerFormat:
    """Build a container format from its document form."""
    if isinstance(value, dict) and len(value) == 1:
        tag = str(next(iter(value))).upper()
        if tag == "ENUM":
            variants = []
            for index, entry in next(iter(value.values())).items():
                variant_name, variant_value = _single_entry(entry, "variant", upper=False)
                variants.append(
                    Variant(_as_int(index), variant_name, shape_from_value(variant_value))
                )
            indexes = [variant.index for variant in variants]
            if len(set(indexes)) != len(indexes):
                raise InvalidRegistryError(f"Duplicate discriminant in {indexes}")
            return EnumFormat(tuple(variants))
    return shape_from_value(value)


def container_to_value(container: ContainerFormat) -> Any:
    """Inverse of :func:`container_from_value`."""
    if isinstance(container, EnumFormat):
        return {
            "ENUM": {
                variant.index: {
                    variant.name: shape_to_value(variant.shape, variant=True)
                }
                for variant in container.variants
            }
        }
    return shape_to_value(container)


def registry_from_dict(data: Dict[str, Any]) -> Registry:
    """
    Build and validate a Registry from a parsed registry document.

    Args:
        data: Mapping from type names to container documents.

    Returns:
        Validated Registry, in document order.

    Raises:
        InvalidRegistryError: If the document is malformed or not closed.
    """
    if not isinstance(data, dict):
        raise InvalidRegistryError("Registry document must be a mapping")

    registry = Registry()
    for name, value in data.items():
        try:
            registry.add(str(name), container_from_value(value))
        except InvalidRegistryError as e:
            raise InvalidRegistryError(f"In type '{name}': {e}") from e
    registry.validate()
    return registry


def registry_to_dict(registry: Registry) -> Dict[str, Any]:
    """Convert a Registry back to its document form."""
    return {name: container_to_value(container) for name, container in registry.items()}


def _single_entry(value: Any, what: str, upper: bool = True) -> Tuple[str, Any]:
    if not isinstance(value, dict) or len(value) != 1:
        raise InvalidRegistryError(f"Expected a single-entry mapping for {what}: {value!r}")
    key, body = next(iter(value.items()))
    key = str(key)
    return (key.upper() if upper else key), body


def _upper_keys(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise InvalidRegistryError(f"Expected a mapping for {what}: {value!r}")
    return {str(key).upper(): item for key, item in value.items()}


def _required(value: Dict[str, Any], key: str, what: str) -> Any:
    if key not in value:
        raise InvalidRegistryError(f"Missing {key} in {what}")
    return value[key]


def _as_list(value: Any) -> List[Any]:
    if not isinstance(value, list):
        raise InvalidRegistryError(f"Expected a list: {value!r}")
    return value


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidRegistryError(f"Expected an integer: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidRegistryError(f"Expected an integer: {value!r}")
