"""
Python rendering of value formats.

Types are rendered as ``typing`` annotations, and every value is written
or read with the runtime Serializer/Deserializer methods. Decoded sequences
become lists, fixed arrays and tuples become tuples, maps become dicts.
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

PYTHON_PRIMITIVE_TYPES = {
    PrimitiveKind.UNIT: "None",
    PrimitiveKind.BOOL: "bool",
    PrimitiveKind.I8: "int",
    PrimitiveKind.I16: "int",
    PrimitiveKind.I32: "int",
    PrimitiveKind.I64: "int",
    PrimitiveKind.I128: "int",
    PrimitiveKind.U8: "int",
    PrimitiveKind.U16: "int",
    PrimitiveKind.U32: "int",
    PrimitiveKind.U64: "int",
    PrimitiveKind.U128: "int",
    PrimitiveKind.F32: "float",
    PrimitiveKind.F64: "float",
    PrimitiveKind.CHAR: "str",
    PrimitiveKind.STR: "str",
    PrimitiveKind.BYTES: "bytes",
}


class PythonEmitter(FormatEmitter):
    """Renders Python annotations and (de)serialization statements."""

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
        return PYTHON_PRIMITIVE_TYPES[format.kind]

    def _type_option(self, format: OptionFormat, inline: bool) -> str:
        return f"_typing.Optional[{self.type_of(format.content, inline)}]"

    def _type_seq(self, format: SeqFormat, inline: bool) -> str:
        return f"_typing.List[{self.type_of(format.content, False)}]"

    def _type_map(self, format: MapFormat, inline: bool) -> str:
        key = self.type_of(format.key, False)
        value = self.type_of(format.value, False)
        return f"_typing.Dict[{key}, {value}]"

    def _type_tuple(self, format: TupleFormat, inline: bool) -> str:
        if not format.formats:
            return "_typing.Tuple[()]"
        items = ", ".join(self.type_of(item, inline) for item in format.formats)
        return f"_typing.Tuple[{items}]"

    def _type_tuple_array(self, format: TupleArrayFormat, inline: bool) -> str:
        return f"_typing.Tuple[{self.type_of(format.content, inline)}, ...]"

    def _type_type_name(self, format: TypeName, inline: bool) -> str:
        return self.type_names[format.name]

    # Serialization

    def _serialize_primitive(self, format: Primitive, expr: str, inline: bool) -> List[str]:
        if format.kind == PrimitiveKind.STR:
            data = self.fresh("_b")
            return [
                f'{data} = {expr}.encode("utf-8")',
                f"serializer.{self.write_length()}(len({data}))",
                f"serializer.write_raw({data})",
            ]
        if format.kind == PrimitiveKind.BYTES:
            return [
                f"serializer.{self.write_length()}(len({expr}))",
                f"serializer.write_raw({expr})",
            ]
        if format.kind == PrimitiveKind.UNIT:
            return ["serializer.write_unit()"]
        return [f"serializer.write_{self.mapper.primitive_suffix(format.kind)}({expr})"]

    def _serialize_option(self, format: OptionFormat, expr: str, inline: bool) -> List[str]:
        return [
            f"if {expr} is None:",
            *self.indent(["serializer.write_option_tag(False)"]),
            "else:",
            *self.indent(
                ["serializer.write_option_tag(True)"]
                + self.serialize(format.content, expr, inline)
            ),
        ]

    def _serialize_seq(self, format: SeqFormat, expr: str, inline: bool) -> List[str]:
        item = self.fresh("_e")
        lines = []
        if self.has_zero_size_entries(format):
            lines.append(f"serializer.check_zero_size_length(len({expr}))")
        return lines + [
            f"serializer.{self.write_length()}(len({expr}))",
            f"for {item} in {expr}:",
            *self.indent(self.serialize(format.content, item, False) or ["pass"]),
        ]

    def _serialize_map(self, format: MapFormat, expr: str, inline: bool) -> List[str]:
        key = self.fresh("_k")
        value = self.fresh("_v")
        lines = []
        if self.has_zero_size_entries(format):
            lines.append(f"serializer.check_zero_size_length(len({expr}))")
        lines.append(f"serializer.{self.write_length()}(len({expr}))")
        body = []
        if self.mapper.sort_map_keys:
            offsets = self.fresh("_offsets")
            lines.append(f"{offsets} = []")
            body.append(f"{offsets}.append(serializer.get_offset())")
        body += self.serialize(format.key, key, False)
        body += self.serialize(format.value, value, False)
        lines.append(f"for {key}, {value} in {expr}.items():")
        lines += self.indent(body or ["pass"])
        if self.mapper.sort_map_keys:
            lines.append(f"serializer.sort_map_entries({offsets})")
        return lines

    def _serialize_tuple(self, format: TupleFormat, expr: str, inline: bool) -> List[str]:
        lines = []
        for position, item in enumerate(format.formats):
            lines += self.serialize(item, f"{expr}[{position}]", inline)
        return lines

    def _serialize_tuple_array(
        self, format: TupleArrayFormat, expr: str, inline: bool
    ) -> List[str]:
        item = self.fresh("_e")
        return [
            f"if len({expr}) != {format.size}:",
            *self.indent(
                [
                    "raise _rt.SerializationError(",
                    f'    f"Expected {format.size} items, got {{len({expr})}}"',
                    ")",
                ]
            ),
            f"for {item} in {expr}:",
            *self.indent(self.serialize(format.content, item, inline) or ["pass"]),
        ]

    def _serialize_type_name(self, format: TypeName, expr: str, inline: bool) -> List[str]:
        return [f"{expr}.serialize(serializer)"]

    # Deserialization

    def _deserialize_primitive(
        self, format: Primitive, target: str, inline: bool
    ) -> List[str]:
        if format.kind in (PrimitiveKind.STR, PrimitiveKind.BYTES):
            size = self.fresh("_n")
            reader = "read_str" if format.kind == PrimitiveKind.STR else "read_bytes"
            return [
                f"{size} = deserializer.{self.read_length()}()",
                f"{target} = deserializer.{reader}({size})",
            ]
        if format.kind == PrimitiveKind.UNIT:
            return [f"{target} = deserializer.read_unit()"]
        return [f"{target} = deserializer.read_{self.mapper.primitive_suffix(format.kind)}()"]

    def _deserialize_option(
        self, format: OptionFormat, target: str, inline: bool
    ) -> List[str]:
        return [
            "if deserializer.read_option_tag():",
            *self.indent(self.deserialize(format.content, target, inline)),
            "else:",
            *self.indent([f"{target} = None"]),
        ]

    def _deserialize_seq(self, format: SeqFormat, target: str, inline: bool) -> List[str]:
        size = self.fresh("_n")
        item = self.fresh("_e")
        lines = [f"{size} = deserializer.{self.read_length()}()"]
        if self.has_zero_size_entries(format):
            lines.append(f"deserializer.check_zero_size_length({size})")
        return lines + [
            f"{target} = []",
            f"for _ in range({size}):",
            *self.indent(
                self.deserialize(format.content, item, False) + [f"{target}.append({item})"]
            ),
        ]

    def _deserialize_map(self, format: MapFormat, target: str, inline: bool) -> List[str]:
        size = self.fresh("_n")
        key = self.fresh("_k")
        value = self.fresh("_v")
        lines = [f"{size} = deserializer.{self.read_length()}()"]
        if self.has_zero_size_entries(format):
            lines.append(f"deserializer.check_zero_size_length({size})")
        lines.append(f"{target} = {{}}")
        body = []
        if self.mapper.sort_map_keys:
            previous = self.fresh("_previous")
            start = self.fresh("_start")
            span = self.fresh("_span")
            lines.append(f"{previous} = None")
            body.append(f"{start} = deserializer.get_offset()")
            body += self.deserialize(format.key, key, False)
            body += [
                f"{span} = ({start}, deserializer.get_offset())",
                f"deserializer.check_key_order({previous}, {span})",
                f"{previous} = {span}",
            ]
        else:
            body += self.deserialize(format.key, key, False)
        body += self.deserialize(format.value, value, False)
        body.append(f"{target}[{key}] = {value}")
        lines.append(f"for _ in range({size}):")
        lines += self.indent(body)
        return lines

    def _deserialize_tuple(self, format: TupleFormat, target: str, inline: bool) -> List[str]:
        lines = []
        items = []
        for item in format.formats:
            local = self.fresh("_t")
            lines += self.deserialize(item, local, inline)
            items.append(local)
        if len(items) == 1:
            lines.append(f"{target} = ({items[0]},)")
        else:
            lines.append(f"{target} = ({', '.join(items)})")
        return lines

    def _deserialize_tuple_array(
        self, format: TupleArrayFormat, target: str, inline: bool
    ) -> List[str]:
        items = self.fresh("_items")
        item = self.fresh("_e")
        return [
            f"{items} = []",
            f"for _ in range({format.size}):",
            *self.indent(
                self.deserialize(format.content, item, inline) + [f"{items}.append({item})"]
            ),
            f"{target} = tuple({items})",
        ]

    def _deserialize_type_name(
        self, format: TypeName, target: str, inline: bool
    ) -> List[str]:
        return [f"{target} = {self.type_names[format.name]}.deserialize(deserializer)"]
