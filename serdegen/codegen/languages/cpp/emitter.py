"""
C++ rendering of value formats.

Serialization statements read from const lvalues; deserialization
statements assign into default-constructed lvalues, so containers are
filled in place and no element type has to be spelled out except for map
entries.
"""

from typing import Dict, List

from ....formats import (
    MapFormat,
    OptionFormat,
    Primitive,
    PrimitiveKind,
    SeqFormat,
    TupleArrayFormat,
    TupleFormat,
    TypeName,
)
from ...core.emitter import FormatEmitter
from ...core.mapper import TypeMapper

RUNTIME_NAMESPACE = "::serde_runtime"

CPP_PRIMITIVE_TYPES = {
    PrimitiveKind.UNIT: "std::monostate",
    PrimitiveKind.BOOL: "bool",
    PrimitiveKind.I8: "int8_t",
    PrimitiveKind.I16: "int16_t",
    PrimitiveKind.I32: "int32_t",
    PrimitiveKind.I64: "int64_t",
    PrimitiveKind.I128: f"{RUNTIME_NAMESPACE}::int128_t",
    PrimitiveKind.U8: "uint8_t",
    PrimitiveKind.U16: "uint16_t",
    PrimitiveKind.U32: "uint32_t",
    PrimitiveKind.U64: "uint64_t",
    PrimitiveKind.U128: f"{RUNTIME_NAMESPACE}::uint128_t",
    PrimitiveKind.F32: "float",
    PrimitiveKind.F64: "double",
    PrimitiveKind.CHAR: "char32_t",
    PrimitiveKind.STR: "std::string",
    PrimitiveKind.BYTES: "std::vector<uint8_t>",
}


class CppEmitter(FormatEmitter):
    """Renders C++ types and (de)serialization statements."""

    def __init__(
        self,
        mapper: TypeMapper,
        referrer: str,
        type_names: Dict[str, str],
        qualifier: str,
        indent_size: int = 4,
    ):
        """
        Args:
            mapper: Shared type mapping decisions
            referrer: Registry name of the type being declared
            type_names: C++ name of every registry type
            qualifier: Namespace prefix of generated types (e.g. ``::demo::``)
            indent_size: Spaces per indentation level
        """
        super().__init__(mapper, referrer, indent_size)
        self.type_names = type_names
        self.qualifier = qualifier

    def qualified(self, name: str) -> str:
        return f"{self.qualifier}{self.type_names[name]}"

    # Types

    def _type_primitive(self, format: Primitive, inline: bool) -> str:
        return CPP_PRIMITIVE_TYPES[format.kind]

    def _type_option(self, format: OptionFormat, inline: bool) -> str:
        return f"std::optional<{self.type_of(format.content, inline)}>"

    def _type_seq(self, format: SeqFormat, inline: bool) -> str:
        return f"std::vector<{self.type_of(format.content, False)}>"

    def _type_map(self, format: MapFormat, inline: bool) -> str:
        key = self.type_of(format.key, False)
        value = self.type_of(format.value, False)
        return f"std::map<{key}, {value}>"

    def _type_tuple(self, format: TupleFormat, inline: bool) -> str:
        items = ", ".join(self.type_of(item, inline) for item in format.formats)
        return f"std::tuple<{items}>"

    def _type_tuple_array(self, format: TupleArrayFormat, inline: bool) -> str:
        return f"std::array<{self.type_of(format.content, inline)}, {format.size}>"

    def _type_type_name(self, format: TypeName, inline: bool) -> str:
        name = self.qualified(format.name)
        if self.is_indirect(format, inline):
            return f"{RUNTIME_NAMESPACE}::value_ptr<{name}>"
        return name

    # Serialization

    def _serialize_primitive(self, format: Primitive, expr: str, inline: bool) -> List[str]:
        if format.kind in (PrimitiveKind.STR, PrimitiveKind.BYTES):
            return [
                f"_serializer.{self.write_length()}({expr}.size());",
                f"_serializer.write_raw({expr});",
            ]
        if format.kind == PrimitiveKind.UNIT:
            return ["_serializer.write_unit();"]
        return [f"_serializer.write_{self.mapper.primitive_suffix(format.kind)}({expr});"]

    def _serialize_option(self, format: OptionFormat, expr: str, inline: bool) -> List[str]:
        return [
            f"if ({expr}.has_value()) {{",
            *self.indent(
                ["_serializer.write_option_tag(true);"]
                + self.serialize(format.content, f"(*{expr})", inline)
            ),
            "} else {",
            *self.indent(["_serializer.write_option_tag(false);"]),
            "}",
        ]

    def _serialize_seq(self, format: SeqFormat, expr: str, inline: bool) -> List[str]:
        item = self.fresh("_e")
        lines = []
        if self.has_zero_size_entries(format):
            lines.append(f"_serializer.check_zero_size_length({expr}.size());")
        return lines + [
            f"_serializer.{self.write_length()}({expr}.size());",
            f"for (const auto &{item} : {expr}) {{",
            *self.indent(self.serialize(format.content, item, False)),
            "}",
        ]

    def _serialize_map(self, format: MapFormat, expr: str, inline: bool) -> List[str]:
        entry = self.fresh("_entry")
        lines = []
        if self.has_zero_size_entries(format):
            lines.append(f"_serializer.check_zero_size_length({expr}.size());")
        lines.append(f"_serializer.{self.write_length()}({expr}.size());")
        body = []
        if self.mapper.sort_map_keys:
            offsets = self.fresh("_offsets")
            lines.append(f"std::vector<size_t> {offsets};")
            body.append(f"{offsets}.push_back(_serializer.get_offset());")
        body += self.serialize(format.key, f"{entry}.first", False)
        body += self.serialize(format.value, f"{entry}.second", False)
        lines.append(f"for (const auto &{entry} : {expr}) {{")
        lines += self.indent(body)
        lines.append("}")
        if self.mapper.sort_map_keys:
            lines.append(f"_serializer.sort_map_entries({offsets});")
        return lines

    def _serialize_tuple(self, format: TupleFormat, expr: str, inline: bool) -> List[str]:
        lines = []
        for position, item in enumerate(format.formats):
            lines += self.serialize(item, f"std::get<{position}>({expr})", inline)
        return lines

    def _serialize_tuple_array(
        self, format: TupleArrayFormat, expr: str, inline: bool
    ) -> List[str]:
        item = self.fresh("_e")
        return [
            f"for (const auto &{item} : {expr}) {{",
            *self.indent(self.serialize(format.content, item, inline)),
            "}",
        ]

    def _serialize_type_name(self, format: TypeName, expr: str, inline: bool) -> List[str]:
        if self.is_indirect(format, inline):
            return [f"{expr}->serialize(_serializer);"]
        return [f"{expr}.serialize(_serializer);"]

    # Deserialization

    def _deserialize_primitive(
        self, format: Primitive, target: str, inline: bool
    ) -> List[str]:
        if format.kind in (PrimitiveKind.STR, PrimitiveKind.BYTES):
            reader = "read_str" if format.kind == PrimitiveKind.STR else "read_bytes"
            return [f"{target} = _deserializer.{reader}(_deserializer.{self.read_length()}());"]
        if format.kind == PrimitiveKind.UNIT:
            return [f"{target} = _deserializer.read_unit();"]
        suffix = self.mapper.primitive_suffix(format.kind)
        return [f"{target} = _deserializer.read_{suffix}();"]

    def _deserialize_option(
        self, format: OptionFormat, target: str, inline: bool
    ) -> List[str]:
        return [
            "if (_deserializer.read_option_tag()) {",
            *self.indent(
                [f"{target}.emplace();"]
                + self.deserialize(format.content, f"(*{target})", inline)
            ),
            "} else {",
            *self.indent([f"{target} = std::nullopt;"]),
            "}",
        ]

    def _deserialize_seq(self, format: SeqFormat, target: str, inline: bool) -> List[str]:
        size = self.fresh("_n")
        index = self.fresh("_i")
        lines = [f"auto {size} = _deserializer.{self.read_length()}();"]
        if self.has_zero_size_entries(format):
            lines.append(f"_deserializer.check_zero_size_length({size});")
        return lines + [
            f"{target}.clear();",
            f"for (uint64_t {index} = 0; {index} < {size}; ++{index}) {{",
            *self.indent(
                [f"{target}.emplace_back();"]
                + self.deserialize(format.content, f"{target}.back()", False)
            ),
            "}",
        ]

    def _deserialize_map(self, format: MapFormat, target: str, inline: bool) -> List[str]:
        size = self.fresh("_n")
        index = self.fresh("_i")
        key = self.fresh("_k")
        value = self.fresh("_v")
        lines = [f"auto {size} = _deserializer.{self.read_length()}();"]
        if self.has_zero_size_entries(format):
            lines.append(f"_deserializer.check_zero_size_length({size});")
        lines.append(f"{target}.clear();")
        body = []
        if self.mapper.sort_map_keys:
            previous = self.fresh("_previous")
            start = self.fresh("_start")
            span = self.fresh("_span")
            lines.append(f"std::optional<std::pair<size_t, size_t>> {previous};")
            body.append(f"size_t {start} = _deserializer.get_offset();")
            body.append(f"{self.type_of(format.key, False)} {key};")
            body += self.deserialize(format.key, key, False)
            body += [
                f"std::pair<size_t, size_t> {span}({start}, _deserializer.get_offset());",
                f"_deserializer.check_key_order({previous}, {span});",
                f"{previous} = {span};",
            ]
        else:
            body.append(f"{self.type_of(format.key, False)} {key};")
            body += self.deserialize(format.key, key, False)
        body.append(f"{self.type_of(format.value, False)} {value};")
        body += self.deserialize(format.value, value, False)
        body.append(f"{target}.insert_or_assign(std::move({key}), std::move({value}));")
        lines.append(f"for (uint64_t {index} = 0; {index} < {size}; ++{index}) {{")
        lines += self.indent(body)
        lines.append("}")
        return lines

    def _deserialize_tuple(self, format: TupleFormat, target: str, inline: bool) -> List[str]:
        lines = []
        for position, item in enumerate(format.formats):
            lines += self.deserialize(item, f"std::get<{position}>({target})", inline)
        return lines

    def _deserialize_tuple_array(
        self, format: TupleArrayFormat, target: str, inline: bool
    ) -> List[str]:
        item = self.fresh("_e")
        return [
            f"for (auto &{item} : {target}) {{",
            *self.indent(self.deserialize(format.content, item, inline)),
            "}",
        ]

    def _deserialize_type_name(
        self, format: TypeName, target: str, inline: bool
    ) -> List[str]:
        name = self.qualified(format.name)
        if self.is_indirect(format, inline):
            return [
                f"{target} = {RUNTIME_NAMESPACE}::value_ptr<{name}>("
                f"{name}::deserialize(_deserializer));"
            ]
        return [f"{target} = {name}::deserialize(_deserializer);"]
