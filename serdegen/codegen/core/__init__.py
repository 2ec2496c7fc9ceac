"""
Core code generation components.

Provides base classes and utilities used by all language generators.
"""

from .config import ConfigError, ConfigManager, GeneratorConfig, load_config
from .emitter import FormatEmitter, indent_lines
from .generator import (
    CodeGenerator,
    GenerationResult,
    GeneratorError,
    UnsupportedConstructError,
    generate_code,
    prepare_generation,
)
from .mapper import (
    BINCODE_CONTRACT,
    CANONICAL_CONTRACT,
    Encoding,
    EncodingContract,
    TypeMapper,
)
from .naming import NameSanitizer, NamingCase
from .templates import TemplateEngine, TemplateError, create_template_engine

__all__ = [
    # Base generator interface
    "CodeGenerator",
    "GeneratorError",
    "UnsupportedConstructError",
    "GenerationResult",
    "generate_code",
    "prepare_generation",
    # Shared type mapping
    "Encoding",
    "EncodingContract",
    "BINCODE_CONTRACT",
    "CANONICAL_CONTRACT",
    "TypeMapper",
    "FormatEmitter",
    "indent_lines",
    # Naming utilities - language-agnostic
    "NameSanitizer",
    "NamingCase",
    # Configuration system
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Template system - language-agnostic
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
]
