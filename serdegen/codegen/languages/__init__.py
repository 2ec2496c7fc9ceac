"""
Language-specific code generators.

This module contains generators for different programming languages.
"""

from .cpp import CppGenerator, create_cpp_generator
from .python import PythonGenerator, create_python_generator
from .rust import RustGenerator, create_rust_generator

__all__ = [
    "CppGenerator",
    "create_cpp_generator",
    "PythonGenerator",
    "create_python_generator",
    "RustGenerator",
    "create_rust_generator",
]
