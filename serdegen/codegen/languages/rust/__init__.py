"""
Rust code generator module.

Generates Rust structs and enums with binary serialization methods from a
format registry.
"""

from .emitter import RUST_PRIMITIVE_TYPES, RustEmitter
from .generator import RustGenerator, create_rust_generator
from .naming import (
    RUST_BUILTIN_TYPES,
    RUST_RESERVED_WORDS,
    create_rust_field_sanitizer,
    create_rust_sanitizer,
    validate_rust_module_name,
)

__all__ = [
    "RustGenerator",
    "create_rust_generator",
    "RustEmitter",
    "RUST_PRIMITIVE_TYPES",
    "create_rust_sanitizer",
    "create_rust_field_sanitizer",
    "validate_rust_module_name",
    "RUST_RESERVED_WORDS",
    "RUST_BUILTIN_TYPES",
]
