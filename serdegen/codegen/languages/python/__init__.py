"""
Python code generator module.

Generates frozen dataclasses with binary serialization methods from a
format registry.
"""

from .emitter import PYTHON_PRIMITIVE_TYPES, PythonEmitter
from .generator import PythonGenerator, create_python_generator
from .naming import (
    PYTHON_BUILTIN_TYPES,
    PYTHON_MEMBER_NAMES,
    PYTHON_RESERVED_WORDS,
    create_python_field_sanitizer,
    create_python_sanitizer,
)

__all__ = [
    # Generator
    "PythonGenerator",
    "create_python_generator",
    "PythonEmitter",
    "PYTHON_PRIMITIVE_TYPES",
    # Naming
    "create_python_sanitizer",
    "create_python_field_sanitizer",
    "PYTHON_RESERVED_WORDS",
    "PYTHON_BUILTIN_TYPES",
    "PYTHON_MEMBER_NAMES",
]
