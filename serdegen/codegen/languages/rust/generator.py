"""
Rust code generator implementation.

Generates Rust structs and enums with inherent serialize/deserialize
methods. Recursive references are boxed, and comparison traits are
derived whenever a type holds no floating-point values.
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

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
    UnitStruct,
    child_formats,
    container_formats,
)
from ....logging_config import get_logger
from ...core.config import GeneratorConfig, load_config
from ...core.generator import CodeGenerator, UnsupportedConstructError
from ...core.mapper import TypeMapper
from ...core.naming import NamingCase
from .emitter import RustEmitter
from .naming import create_rust_field_sanitizer, create_rust_sanitizer

logger = get_logger(__name__)

# Standard library trait impls for tuples stop at this arity.
MAX_TUPLE_ARITY = 12

BASE_DERIVES = ["Clone", "Debug", "PartialEq"]
ORDERED_DERIVES = ["Clone", "Debug", "PartialEq", "Eq", "Hash", "PartialOrd", "Ord"]


class RustGenerator(CodeGenerator):
    """Code generator for Rust types with binary serialization."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize Rust generator with configuration."""
        super().__init__(config)

        self.sanitizer = create_rust_sanitizer()
        self.field_sanitizer = create_rust_field_sanitizer()
        self.type_names: Dict[str, str] = {}

    @property
    def language_name(self) -> str:
        return "rust"

    @property
    def file_extension(self) -> str:
        return ".rs"

    def get_template_directory(self) -> Path:
        """Return the Rust templates directory."""
        return Path(__file__).parent / "templates"

    def check_supported(self, registry: Registry, mapper: TypeMapper) -> None:
        """Reject float map keys and tuples beyond the derivable arity."""

        def check(name: str, format: Format):
            if isinstance(format, MapFormat) and mapper.contains_float(format.key):
                raise UnsupportedConstructError(
                    self.language_name, name, "ordered map keys must not contain floats"
                )
            if isinstance(format, TupleFormat) and len(format.formats) > MAX_TUPLE_ARITY:
                raise UnsupportedConstructError(
                    self.language_name,
                    name,
                    f"tuples are limited to {MAX_TUPLE_ARITY} elements",
                )
            for child in child_formats(format):
                check(name, child)

        for name, container in registry.items():
            for format in container_formats(container):
                check(name, format)

    def generate(self, registry: Registry, plan: EmissionPlan, mapper: TypeMapper) -> str:
        """Generate a complete Rust module for all registry types."""
        self._assign_names(mapper)
        logger.debug("Rendering %d Rust declarations", len(plan.order))

        declarations = [self.generate_declaration(name, mapper) for name in plan.order]

        context = {
            "encoding": mapper.contract.encoding.value,
            "module_name": self.config.module_name,
            "runtime_module": self.config.runtime_module,
            "add_comments": self.config.add_comments,
            "declarations": declarations,
        }
        return self.render_template("module.rs.j2", context)

    def generate_declaration(self, name: str, mapper: TypeMapper) -> str:
        """Generate the type definition and impl block of one type."""
        if name not in self.type_names:
            self._assign_names(mapper)

        container = mapper.container(name)
        rust_name = self.type_names[name]
        derives = ORDERED_DERIVES if not mapper.type_contains_float(name) else BASE_DERIVES
        emitter = RustEmitter(mapper, name, self.type_names, self.config.indent_size)

        context = {
            "name": rust_name,
            "doc": f"Registry type `{rust_name}`." if self.config.add_comments else None,
            "derives": ", ".join(derives),
        }

        if isinstance(container, EnumFormat):
            context.update(self._enum_context(name, rust_name, container, emitter))
            return self.render_template("enum.rs.j2", context)

        context.update(self._struct_context(rust_name, container, emitter))
        return self.render_template("struct.rs.j2", context)

    def _assign_names(self, mapper: TypeMapper):
        self.sanitizer.reset_used_names()
        self.field_sanitizer.reset_used_names()
        self.type_names.clear()
        for name in mapper.registry.names():
            self.type_names[name] = self.sanitizer.sanitize_name(name, NamingCase.PASCAL_CASE)

    def _fields(self, scope: str, shape: Struct) -> List[Tuple[str, Format]]:
        return [
            (
                self.field_sanitizer.sanitize_name(
                    named.name, NamingCase.SNAKE_CASE, scope=scope
                ),
                named.format,
            )
            for named in shape.fields
        ]

    def _struct_context(self, rust_name: str, shape: StructShape, emitter: RustEmitter):
        serialize_lines: List[str] = []
        deserialize_lines: List[str] = []

        if isinstance(shape, UnitStruct):
            return {
                "kind": "unit",
                "fields": [],
                "serialize_body": "",
                "deserialize_body": f"Ok({rust_name})",
            }

        if isinstance(shape, Struct):
            fields = self._fields(rust_name, shape)
            arguments = []
            for field_name, format in fields:
                serialize_lines += emitter.serialize(format, f"self.{field_name}")
                local = emitter.fresh("_v")
                deserialize_lines += emitter.deserialize(format, local)
                arguments.append(f"{field_name}: {local}")
            deserialize_lines.append(f"Ok({rust_name} {{ {', '.join(arguments)} }})")
            return {
                "kind": "struct",
                "fields": [
                    {"name": field_name, "type": emitter.type_of(format)}
                    for field_name, format in fields
                ],
                "serialize_body": "\n".join(serialize_lines),
                "deserialize_body": "\n".join(deserialize_lines),
            }

        formats = [shape.format] if isinstance(shape, NewTypeStruct) else list(shape.formats)
        locals_ = []
        for position, format in enumerate(formats):
            serialize_lines += emitter.serialize(format, f"self.{position}")
            local = emitter.fresh("_v")
            deserialize_lines += emitter.deserialize(format, local)
            locals_.append(local)
        deserialize_lines.append(f"Ok({rust_name}({', '.join(locals_)}))")
        return {
            "kind": "tuple",
            "fields": [{"type": emitter.type_of(format)} for format in formats],
            "serialize_body": "\n".join(serialize_lines),
            "deserialize_body": "\n".join(deserialize_lines),
        }

    def _enum_context(
        self, name: str, rust_name: str, container: EnumFormat, emitter: RustEmitter
    ):
        unit = emitter.unit
        declarations = []
        serialize_arms: List[str] = []
        deserialize_arms: List[str] = []

        for variant in container.variants:
            variant_name = self.sanitizer.sanitize_name(
                variant.name, NamingCase.PASCAL_CASE, scope=rust_name
            )
            path = f"{rust_name}::{variant_name}"
            tag = [f"serializer.{emitter.write_discriminant()}({variant.index})?;"]
            shape = variant.shape
            body: List[str] = []
            decode: List[str] = []

            if isinstance(shape, UnitStruct):
                declarations.append(variant_name)
                pattern = path
                value = path
            elif isinstance(shape, Struct):
                fields = self._fields(path, shape)
                declarations.append(
                    f"{variant_name} {{ "
                    + ", ".join(
                        f"{field_name}: {emitter.type_of(format)}"
                        for field_name, format in fields
                    )
                    + " }"
                )
                bindings = []
                arguments = []
                for field_name, format in fields:
                    binding = emitter.fresh("_f")
                    bindings.append(f"{field_name}: {binding}")
                    body += emitter.serialize(format, f"(*{binding})")
                    local = emitter.fresh("_v")
                    decode += emitter.deserialize(format, local)
                    arguments.append(f"{field_name}: {local}")
                pattern = f"{path} {{ {', '.join(bindings)} }}"
                value = f"{path} {{ {', '.join(arguments)} }}"
            else:
                formats = (
                    [shape.format] if isinstance(shape, NewTypeStruct) else list(shape.formats)
                )
                declarations.append(
                    f"{variant_name}({', '.join(emitter.type_of(format) for format in formats)})"
                )
                bindings = []
                locals_ = []
                for format in formats:
                    binding = emitter.fresh("_f")
                    bindings.append(binding)
                    body += emitter.serialize(format, f"(*{binding})")
                    local = emitter.fresh("_v")
                    decode += emitter.deserialize(format, local)
                    locals_.append(local)
                pattern = f"{path}({', '.join(bindings)})"
                value = f"{path}({', '.join(locals_)})"

            serialize_arms += [f"{pattern} => {{", *[unit + line for line in tag + body], "}"]
            deserialize_arms += [
                f"{variant.index} => {{",
                *[unit + line for line in decode + [f"Ok({value})"]],
                "}",
            ]

        deserialize_arms.append(
            f'_ => Err(_rt::Error::UnknownVariant {{ name: "{rust_name}", index: _index as u64 }}),'
        )
        serialize_lines = ["match self {", *emitter.indent(serialize_arms), "}"]
        deserialize_lines = [
            f"let _index = deserializer.{emitter.read_discriminant()}()?;",
            "match _index {",
            *emitter.indent(deserialize_arms),
            "}",
        ]
        return {
            "variants": declarations,
            "serialize_body": "\n".join(serialize_lines),
            "deserialize_body": "\n".join(deserialize_lines),
        }


def create_rust_generator(config: Optional[GeneratorConfig] = None) -> RustGenerator:
    """Create a Rust generator, with the Rust defaults when no config is given."""
    if config is None:
        config = load_config("rust")
    return RustGenerator(config)
