"""
C++ code generator module.

Generates a C++17 header of structs with binary serialization methods
from a format registry.
"""

from .emitter import CPP_PRIMITIVE_TYPES, CppEmitter
from .generator import CppGenerator, create_cpp_generator
from .naming import (
    CPP_BUILTIN_TYPES,
    CPP_MEMBER_NAMES,
    CPP_RESERVED_WORDS,
    create_cpp_member_sanitizer,
    create_cpp_sanitizer,
)

__all__ = [
    "CppGenerator",
    "create_cpp_generator",
    "CppEmitter",
    "CPP_PRIMITIVE_TYPES",
    "create_cpp_sanitizer",
    "create_cpp_member_sanitizer",
    "CPP_RESERVED_WORDS",
    "CPP_BUILTIN_TYPES",
    "CPP_MEMBER_NAMES",
]
