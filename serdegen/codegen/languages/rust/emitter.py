"""
Rust rendering of value formats.

Serialization statements take place expressions (``self.a``, ``(*_e0)``)
and rely on auto-deref to reach through ``Box``. Deserialization
statements bind each decoded value with ``let``.
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

RUST_PRIMITIVE_TYPES = {
    PrimitiveKind.UNIT: "()",
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
    PrimitiveKind.STR: "String",
    PrimitiveKind.BYTES: "Vec<u8>",
}


def rust_tuple(items: List[str]) -> str:
    """Render a tuple type or expression; one-element tuples keep the comma."""
    if len(items) == 1:
        return f"({items[0]},)"
    return f"({', '.join(items)})"


class RustEmitter(FormatEmitter):
    """Renders Rust types and (de)serialization statements."""

    def __init__(
        self,
        mapper: TypeMapper,
        referrer: str,
        type_names: Dict[str, str],
        indent_size: int = 4,
    ):
        super().__init__(mapper, referrer, indent_size)
        self.type_names = type_names

    # Types

    def _type_primitive(self, format: Primitive, inline: bool) -> str:
        return RUST_PRIMITIVE_TYPES[format.kind]

    def _type_option(self, format: OptionFormat, inline: bool) -> str:
        return f"Option<{self.type_of(format.content, inline)}>"

    def _type_seq(self, format: SeqFormat, inline: bool) -> str:
        return f"Vec<{self.type_of(format.content, False)}>"

    def _type_map(self, format: MapFormat, inline: bool) -> str:
        key = self.type_of(format.key, False)
        value = self.type_of(format.value, False)
        return f"BTreeMap<{key}, {value}>"

    def _type_tuple(self, format: TupleFormat, inline: bool) -> str:
        return rust_tuple([self.type_of(item, inline) for item in format.formats])

    def _type_tuple_array(self, format: TupleArrayFormat, inline: bool) -> str:
        return f"[{self.type_of(format.content, inline)}; {format.size}]"

    def _type_type_name(self, format: TypeName, inline: bool) -> str:
        name = self.type_names[format.name]
        if self.is_indirect(format, inline):
            return f"Box<{name}>"
        return name

    # Serialization

    def _serialize_primitive(self, format: Primitive, expr: str, inline: bool) -> List[str]:
        if format.kind == PrimitiveKind.STR:
            return [
                f"serializer.{self.write_length()}({expr}.len() as u64)?;",
                f"serializer.write_raw({expr}.as_bytes())?;",
            ]
        if format.kind == PrimitiveKind.BYTES:
            return [
                f"serializer.{self.write_length()}({expr}.len() as u64)?;",
                f"serializer.write_raw(&{expr})?;",
            ]
        if format.kind == PrimitiveKind.UNIT:
            return ["serializer.write_unit()?;"]
        return [f"serializer.write_{self.mapper.primitive_suffix(format.kind)}({expr})?;"]

    def _serialize_option(self, format: OptionFormat, expr: str, inline: bool) -> List[str]:
        item = self.fresh("_e")
        return [
            f"match &{expr} {{",
            *self.indent(["None => serializer.write_option_tag(false)?,"]),
            *self.indent([f"Some({item}) => {{"]),
            *self.indent(
                ["serializer.write_option_tag(true)?;"]
                + self.serialize(format.content, f"(*{item})", inline),
                2,
            ),
            *self.indent(["}"]),
            "}",
        ]

    def _serialize_seq(self, format: SeqFormat, expr: str, inline: bool) -> List[str]:
        item = self.fresh("_e")
        lines = []
        if self.has_zero_size_entries(format):
            lines.append(f"serializer.check_zero_size_length({expr}.len() as u64)?;")
        return lines + [
            f"serializer.{self.write_length()}({expr}.len() as u64)?;",
            f"for {item} in {expr}.iter() {{",
            *self.indent(self.serialize(format.content, f"(*{item})", False)),
            "}",
        ]

    def _serialize_map(self, format: MapFormat, expr: str, inline: bool) -> List[str]:
        key = self.fresh("_k")
        value = self.fresh("_v")
        lines = []
        if self.has_zero_size_entries(format):
            lines.append(f"serializer.check_zero_size_length({expr}.len() as u64)?;")
        lines.append(f"serializer.{self.write_length()}({expr}.len() as u64)?;")
        body = []
        if self.mapper.sort_map_keys:
            offsets = self.fresh("_offsets")
            lines.append(f"let mut {offsets} = Vec::new();")
            body.append(f"{offsets}.push(serializer.get_offset());")
        body += self.serialize(format.key, f"(*{key})", False)
        body += self.serialize(format.value, f"(*{value})", False)
        lines.append(f"for ({key}, {value}) in {expr}.iter() {{")
        lines += self.indent(body)
        lines.append("}")
        if self.mapper.sort_map_keys:
            lines.append(f"serializer.sort_map_entries(&{offsets});")
        return lines

    def _serialize_tuple(self, format: TupleFormat, expr: str, inline: bool) -> List[str]:
        lines = []
        for position, item in enumerate(format.formats):
            lines += self.serialize(item, f"{expr}.{position}", inline)
        return lines

    def _serialize_tuple_array(
        self, format: TupleArrayFormat, expr: str, inline: bool
    ) -> List[str]:
        item = self.fresh("_e")
        return [
            f"for {item} in {expr}.iter() {{",
            *self.indent(self.serialize(format.content, f"(*{item})", inline)),
            "}",
        ]

    def _serialize_type_name(self, format: TypeName, expr: str, inline: bool) -> List[str]:
        return [f"{expr}.serialize(serializer)?;"]

    # Deserialization

    def _deserialize_primitive(
        self, format: Primitive, target: str, inline: bool
    ) -> List[str]:
        if format.kind in (PrimitiveKind.STR, PrimitiveKind.BYTES):
            size = self.fresh("_n")
            reader = "read_str" if format.kind == PrimitiveKind.STR else "read_bytes"
            return [
                f"let {size} = deserializer.{self.read_length()}()?;",
                f"let {target} = deserializer.{reader}({size})?;",
            ]
        if format.kind == PrimitiveKind.UNIT:
            return [f"let {target} = deserializer.read_unit()?;"]
        suffix = self.mapper.primitive_suffix(format.kind)
        return [f"let {target} = deserializer.read_{suffix}()?;"]

    def _deserialize_option(
        self, format: OptionFormat, target: str, inline: bool
    ) -> List[str]:
        item = self.fresh("_e")
        return [
            f"let {target} = if deserializer.read_option_tag()? {{",
            *self.indent(self.deserialize(format.content, item, inline) + [f"Some({item})"]),
            "} else {",
            *self.indent(["None"]),
            "};",
        ]

    def _deserialize_seq(self, format: SeqFormat, target: str, inline: bool) -> List[str]:
        size = self.fresh("_n")
        item = self.fresh("_e")
        lines = [f"let {size} = deserializer.{self.read_length()}()?;"]
        if self.has_zero_size_entries(format):
            lines.append(f"deserializer.check_zero_size_length({size})?;")
        return lines + [
            f"let mut {target} = Vec::new();",
            f"for _ in 0..{size} {{",
            *self.indent(
                self.deserialize(format.content, item, False) + [f"{target}.push({item});"]
            ),
            "}",
        ]

    def _deserialize_map(self, format: MapFormat, target: str, inline: bool) -> List[str]:
        size = self.fresh("_n")
        key = self.fresh("_k")
        value = self.fresh("_v")
        lines = [f"let {size} = deserializer.{self.read_length()}()?;"]
        if self.has_zero_size_entries(format):
            lines.append(f"deserializer.check_zero_size_length({size})?;")
        lines.append(f"let mut {target} = BTreeMap::new();")
        body = []
        if self.mapper.sort_map_keys:
            previous = self.fresh("_previous")
            start = self.fresh("_start")
            span = self.fresh("_span")
            lines.append(f"let mut {previous}: Option<(usize, usize)> = None;")
            body.append(f"let {start} = deserializer.get_offset();")
            body += self.deserialize(format.key, key, False)
            body += [
                f"let {span} = ({start}, deserializer.get_offset());",
                f"deserializer.check_key_order({previous}, {span})?;",
                f"{previous} = Some({span});",
            ]
        else:
            body += self.deserialize(format.key, key, False)
        body += self.deserialize(format.value, value, False)
        body.append(f"{target}.insert({key}, {value});")
        lines.append(f"for _ in 0..{size} {{")
        lines += self.indent(body)
        lines.append("}")
        return lines

    def _deserialize_tuple(self, format: TupleFormat, target: str, inline: bool) -> List[str]:
        lines = []
        items = []
        for item in format.formats:
            local = self.fresh("_t")
            lines += self.deserialize(item, local, inline)
            items.append(local)
        lines.append(f"let {target} = {rust_tuple(items)};")
        return lines

    def _deserialize_tuple_array(
        self, format: TupleArrayFormat, target: str, inline: bool
    ) -> List[str]:
        items = self.fresh("_items")
        item = self.fresh("_e")
        array_type = self.type_of(format, inline)
        return [
            f"let mut {items} = Vec::new();",
            f"for _ in 0..{format.size} {{",
            *self.indent(
                self.deserialize(format.content, item, inline) + [f"{items}.push({item});"]
            ),
            "}",
            f"let {target}: {array_type} = _rt::into_array({items})?;",
        ]

    def _deserialize_type_name(
        self, format: TypeName, target: str, inline: bool
    ) -> List[str]:
        call = f"{self.type_names[format.name]}::deserialize(deserializer)?"
        if self.is_indirect(format, inline):
            call = f"Box::new({call})"
        return [f"let {target} = {call};"]
