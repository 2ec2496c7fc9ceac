"""
C++ code generator implementation.

Generates a single C++17 header: forward declarations for recursive
types, struct declarations in dependency order, then the inline
definitions of every member function once all types are complete.
Enums become a struct holding a ``std::variant`` of nested variant structs.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ....analyzer import EmissionPlan
from ....formats import (
    EnumFormat,
    Format,
    MapFormat,
    NewTypeStruct,
    Registry,
    Struct,
    StructShape,
    TupleFormat,
    TupleStruct,
    child_formats,
    container_formats,
)
from ....logging_config import get_logger
from ...core.config import GeneratorConfig, load_config
from ...core.generator import CodeGenerator, UnsupportedConstructError
from ...core.mapper import TypeMapper
from ...core.naming import NamingCase
from .emitter import CppEmitter
from .naming import create_cpp_member_sanitizer, create_cpp_sanitizer

logger = get_logger(__name__)


class CppGenerator(CodeGenerator):
    """Code generator for a C++17 header with binary serialization."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize C++ generator with configuration."""
        super().__init__(config)

        self.sanitizer = create_cpp_sanitizer()
        self.member_sanitizer = create_cpp_member_sanitizer()
        self.type_names: Dict[str, str] = {}

    @property
    def language_name(self) -> str:
        return "cpp"

    @property
    def file_extension(self) -> str:
        return ".hpp"

    @property
    def namespace(self) -> str:
        return self.config.module_name

    @property
    def qualifier(self) -> str:
        return f"::{self.namespace}::"

    def get_template_directory(self) -> Path:
        """Return the C++ templates directory."""
        return Path(__file__).parent / "templates"

    def check_supported(self, registry: Registry, mapper: TypeMapper) -> None:
        """Reject map keys that have no ordering in C++."""

        def check(name: str, format: Format):
            if isinstance(format, MapFormat) and mapper.contains_type_name(format.key):
                raise UnsupportedConstructError(
                    self.language_name, name, "map keys must not contain named types"
                )
            for child in child_formats(format):
                check(name, child)

        for name, container in registry.items():
            for format in container_formats(container):
                check(name, format)

    def generate(self, registry: Registry, plan: EmissionPlan, mapper: TypeMapper) -> str:
        """Generate the complete header for all registry types."""
        self._assign_names(mapper)
        logger.debug("Rendering %d C++ declarations", len(plan.order))

        forward_declarations = [
            self.type_names[name]
            for group in mapper.groups
            for name in mapper.forward_declarations(group)
        ]

        declarations = []
        definitions = []
        for name in plan.order:
            context = self._declaration_context(name, mapper)
            declarations.append(self.render_template("declaration.hpp.j2", context))
            definitions.append(self.render_template("definition.hpp.j2", context))

        context = {
            "encoding": mapper.contract.encoding.value,
            "runtime_include": self.config.runtime_module,
            "namespace": self.namespace,
            "forward_declarations": forward_declarations,
            "declarations": declarations,
            "definitions": definitions,
        }
        return self.render_template("header.hpp.j2", context)

    def generate_declaration(self, name: str, mapper: TypeMapper) -> str:
        """Generate the struct declaration and member definitions of one type."""
        if name not in self.type_names:
            self._assign_names(mapper)
        context = self._declaration_context(name, mapper)
        return (
            self.render_template("declaration.hpp.j2", context)
            + "\n"
            + self.render_template("definition.hpp.j2", context)
        )

    def _assign_names(self, mapper: TypeMapper):
        self.sanitizer.reset_used_names()
        self.member_sanitizer.reset_used_names()
        self.type_names.clear()
        for name in mapper.registry.names():
            self.type_names[name] = self.sanitizer.sanitize_name(name, NamingCase.PRESERVE)

    def _members(self, scope: str, shape: StructShape) -> List[Tuple[str, Format]]:
        """Data members of a struct or variant payload."""
        if isinstance(shape, NewTypeStruct):
            return [("value", shape.format)]
        if isinstance(shape, TupleStruct):
            return [("value", TupleFormat(shape.formats))]
        if isinstance(shape, Struct):
            return [
                (
                    self.member_sanitizer.sanitize_name(
                        named.name, NamingCase.PRESERVE, scope=scope
                    ),
                    named.format,
                )
                for named in shape.fields
            ]
        return []

    def _declaration_context(self, name: str, mapper: TypeMapper) -> Dict[str, Any]:
        container = mapper.container(name)
        cpp_name = self.type_names[name]
        emitter = CppEmitter(
            mapper, name, self.type_names, self.qualifier, self.config.indent_size
        )
        context: Dict[str, Any] = {
            "name": cpp_name,
            "doc": f"Registry type {cpp_name}." if self.config.add_comments else None,
        }

        if isinstance(container, EnumFormat):
            context.update(self._enum_context(cpp_name, container, emitter))
            return context

        members = self._members(cpp_name, container)
        serialize_lines: List[str] = []
        deserialize_lines = [f"{cpp_name} _obj;"]
        for member, format in members:
            serialize_lines += emitter.serialize(format, f"this->{member}")
            deserialize_lines += emitter.deserialize(format, f"_obj.{member}")
        if not members:
            serialize_lines.append("(void)_serializer;")
            deserialize_lines.insert(0, "(void)_deserializer;")
        deserialize_lines.append("return _obj;")

        context.update(
            {
                "variants": [],
                "fields": [
                    {"name": member, "type": emitter.type_of(format)}
                    for member, format in members
                ],
                "serialize_body": "\n".join(serialize_lines),
                "deserialize_body": "\n".join(deserialize_lines),
                "equality": _equality([member for member, _ in members]),
            }
        )
        return context

    def _enum_context(
        self, cpp_name: str, container: EnumFormat, emitter: CppEmitter
    ) -> Dict[str, Any]:
        # Nested structs must not reuse the enclosing name or the variant member.
        self.member_sanitizer.add_used_name(cpp_name, scope=cpp_name)
        self.member_sanitizer.add_used_name("value", scope=cpp_name)

        variants = []
        serialize_cases: List[str] = []
        deserialize_cases: List[str] = []
        unit = emitter.unit

        for position, variant in enumerate(container.variants):
            variant_name = self.member_sanitizer.sanitize_name(
                variant.name, NamingCase.PRESERVE, scope=cpp_name
            )
            members = self._members(f"{cpp_name}::{variant_name}", variant.shape)

            encode = [
                f"const auto &_payload = std::get<{position}>(this->value);",
                f"_serializer.{emitter.write_discriminant()}({variant.index});",
            ]
            decode = [f"{cpp_name}::{variant_name} _payload;"]
            for member, format in members:
                encode += emitter.serialize(format, f"_payload.{member}")
                decode += emitter.deserialize(format, f"_payload.{member}")
            if not members:
                encode.append("(void)_payload;")
            encode.append("break;")
            decode.append(f"return {cpp_name}{{std::move(_payload)}};")

            serialize_cases += [f"case {position}: {{", *emitter.indent(encode), "}"]
            deserialize_cases += [f"case {variant.index}: {{", *emitter.indent(decode), "}"]

            variants.append(
                {
                    "name": variant_name,
                    "fields": [
                        {"name": member, "type": emitter.type_of(format)}
                        for member, format in members
                    ],
                    "equality": _equality([member for member, _ in members]),
                }
            )

        serialize_lines = [
            "switch (this->value.index()) {",
            *serialize_cases,
            "default:",
            unit
            + f'throw ::serde_runtime::serialization_error("{cpp_name} holds no value");',
            "}",
        ]
        deserialize_lines = [
            f"auto _index = _deserializer.{emitter.read_discriminant()}();",
            "switch (_index) {",
            *deserialize_cases,
            "default:",
            unit + "throw ::serde_runtime::deserialization_error(",
            unit * 2 + f'"unknown variant index for {cpp_name}: " + std::to_string(_index));',
            "}",
        ]
        variant_list = ", ".join(variant["name"] for variant in variants)
        return {
            "variants": variants,
            "fields": [{"name": "value", "type": f"std::variant<{variant_list}>"}],
            "serialize_body": "\n".join(serialize_lines),
            "deserialize_body": "\n".join(deserialize_lines),
            "equality": _equality(["value"]),
        }


def _equality(members: List[str]) -> str:
    if not members:
        return "(void)_rhs;\nreturn true;"
    comparisons = " &&\n       ".join(f"this->{member} == _rhs.{member}" for member in members)
    return f"return {comparisons};"


def create_cpp_generator(config: Optional[GeneratorConfig] = None) -> CppGenerator:
    """Create a C++ generator, with the C++ defaults when no config is given."""
    if config is None:
        config = load_config("cpp")
    return CppGenerator(config)
