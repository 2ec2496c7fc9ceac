"""
Python code generator implementation.

Generates frozen dataclasses with serialize/deserialize methods using
templates. Enums become a base class plus one dataclass per variant.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ....analyzer import EmissionPlan
from ....formats import (
    EnumFormat,
    Format,
    MapFormat,
    NewTypeStruct,
    OptionFormat,
    Registry,
    SeqFormat,
    Struct,
    StructShape,
    TupleFormat,
    TupleStruct,
    UNIT,
    child_formats,
    container_formats,
)
from ....logging_config import get_logger
from ...core.config import GeneratorConfig, load_config
from ...core.generator import CodeGenerator, UnsupportedConstructError
from ...core.mapper import TypeMapper
from ...core.naming import NamingCase
from .emitter import PythonEmitter
from .naming import create_python_field_sanitizer, create_python_sanitizer

logger = get_logger(__name__)


class PythonGenerator(CodeGenerator):
    """Code generator for Python dataclasses with binary serialization."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize Python generator with configuration."""
        super().__init__(config)

        # Initialize naming
        self.sanitizer = create_python_sanitizer()
        self.field_sanitizer = create_python_field_sanitizer()

        # State tracking
        self.type_names: Dict[str, str] = {}
        self.variant_names: Dict[Tuple[str, str], str] = {}

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "python"

    @property
    def file_extension(self) -> str:
        """Return Python file extension."""
        return ".py"

    def get_template_directory(self) -> Path:
        """Return the Python templates directory."""
        return Path(__file__).parent / "templates"

    def check_supported(self, registry: Registry, mapper: TypeMapper) -> None:
        """Reject options that cannot be told apart from None and unhashable keys."""

        def check(name: str, format: Format):
            if isinstance(format, OptionFormat):
                content = format.content
                if isinstance(content, OptionFormat) or content == UNIT:
                    raise UnsupportedConstructError(
                        self.language_name, name, "an option of a unit or option is ambiguous"
                    )
            if isinstance(format, MapFormat) and mapper.contains_collection(format.key):
                raise UnsupportedConstructError(
                    self.language_name, name, "map keys must not contain sequences or maps"
                )
            for child in child_formats(format):
                check(name, child)

        for name, container in registry.items():
            for format in container_formats(container):
                check(name, format)

    def generate(self, registry: Registry, plan: EmissionPlan, mapper: TypeMapper) -> str:
        """Generate complete Python module for all registry types."""
        self._assign_names(mapper)
        logger.debug("Rendering %d Python declarations", len(plan.order))

        declarations = [self.generate_declaration(name, mapper) for name in plan.order]

        exports = []
        for name in plan.order:
            exports.append(self.type_names[name])
            container = mapper.container(name)
            if isinstance(container, EnumFormat):
                exports.extend(
                    self.variant_names[(name, variant.name)] for variant in container.variants
                )

        context = {
            "encoding": mapper.contract.encoding.value,
            "module_name": self.config.module_name,
            "runtime_module": self.config.runtime_module,
            "add_comments": self.config.add_comments,
            "exports": exports,
            "declarations": declarations,
        }
        return self.render_template("module.py.j2", context)

    def generate_declaration(self, name: str, mapper: TypeMapper) -> str:
        """Generate the class (or class family, for enums) of one type."""
        if name not in self.type_names:
            self._assign_names(mapper)

        container = mapper.container(name)
        class_name = self.type_names[name]

        if isinstance(container, EnumFormat):
            variants = []
            for variant in container.variants:
                variant_class = self.variant_names[(name, variant.name)]
                declaration = self._render_struct(
                    name,
                    variant_class,
                    variant.shape,
                    mapper,
                    base=class_name,
                    index=variant.index,
                    doc=f"Variant {variant.name} of {name}.",
                )
                variants.append(
                    {
                        "index": variant.index,
                        "class_name": variant_class,
                        "declaration": declaration,
                    }
                )
            return self.render_template(
                "enum.py.j2",
                {
                    "class_name": class_name,
                    "doc": self._doc(f"Enum {name}."),
                    "read_discriminant": f"read_{mapper.discriminant_suffix}",
                    "variants": variants,
                },
            )

        return self._render_struct(name, class_name, container, mapper, doc=f"Struct {name}.")

    def _assign_names(self, mapper: TypeMapper):
        """Name every class up front so references resolve in any order."""
        self.sanitizer.reset_used_names()
        self.field_sanitizer.reset_used_names()
        self.type_names.clear()
        self.variant_names.clear()

        for name in mapper.registry.names():
            self.type_names[name] = self.sanitizer.sanitize_name(name, NamingCase.PRESERVE)

        for name, container in mapper.registry.items():
            if not isinstance(container, EnumFormat):
                continue
            for variant in container.variants:
                self.variant_names[(name, variant.name)] = self.sanitizer.sanitize_name(
                    f"{self.type_names[name]}__{variant.name}", NamingCase.PRESERVE
                )

    def _members(self, scope: str, shape: StructShape) -> List[Tuple[str, Format]]:
        """Attribute names and formats of a struct or variant payload."""
        if isinstance(shape, NewTypeStruct):
            return [("value", shape.format)]
        if isinstance(shape, TupleStruct):
            return [("value", TupleFormat(shape.formats))]
        if isinstance(shape, Struct):
            return [
                (
                    self.field_sanitizer.sanitize_name(
                        named.name, NamingCase.SNAKE_CASE, scope=scope
                    ),
                    named.format,
                )
                for named in shape.fields
            ]
        return []

    def _render_struct(
        self,
        name: str,
        class_name: str,
        shape: StructShape,
        mapper: TypeMapper,
        base: str = "_rt.Serializable",
        index: Optional[int] = None,
        doc: str = "",
    ) -> str:
        emitter = PythonEmitter(mapper, name, self.type_names, self.config.indent_size)
        members = self._members(class_name, shape)

        fields = [
            {"name": attribute, "type": emitter.type_of(format)}
            for attribute, format in members
        ]

        serialize_lines: List[str] = []
        if index is not None:
            serialize_lines.append(f"serializer.{emitter.write_discriminant()}(self.INDEX)")
        for attribute, format in members:
            serialize_lines += emitter.serialize(format, f"self.{attribute}")

        deserialize_lines: List[str] = []
        arguments = []
        for attribute, format in members:
            local = emitter.fresh("_v")
            deserialize_lines += emitter.deserialize(format, local)
            arguments.append(f"{attribute}={local}")
        deserialize_lines.append(f"return cls({', '.join(arguments)})")

        context: Dict[str, Any] = {
            "class_name": class_name,
            "base": base,
            "doc": self._doc(doc),
            "index": index,
            "fields": fields,
            "serialize_body": "\n".join(serialize_lines or ["pass"]),
            "deserialize_method": "deserialize" if index is None else "_deserialize_payload",
            "deserialize_body": "\n".join(deserialize_lines),
        }
        return self.render_template("struct.py.j2", context)

    def _doc(self, text: str) -> Optional[str]:
        if not self.config.add_comments:
            return None
        return "".join(ch for ch in text if ch.isprintable() and ch not in "\"\\")


def create_python_generator(config: Optional[GeneratorConfig] = None) -> PythonGenerator:
    """Create a Python generator, with the Python defaults when no config is given."""
    if config is None:
        config = load_config("python")
    return PythonGenerator(config)
