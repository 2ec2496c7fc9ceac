"""
Python-specific naming utilities and sanitization.

Handles Python reserved words, builtins, and the method names every
generated class defines.
"""

from ...core.naming import NameSanitizer

# Python reserved keywords
PYTHON_RESERVED_WORDS = {
    "False",
    "None",
    "True",
    "and",
    "as",
    "assert",
    "async",
    "await",
    "break",
    "class",
    "continue",
    "def",
    "del",
    "elif",
    "else",
    "except",
    "finally",
    "for",
    "from",
    "global",
    "if",
    "import",
    "in",
    "is",
    "lambda",
    "nonlocal",
    "not",
    "or",
    "pass",
    "raise",
    "return",
    "try",
    "while",
    "with",
    "yield",
}

# Python built-in types used in generated annotations
PYTHON_BUILTIN_TYPES = {
    "int",
    "float",
    "str",
    "bool",
    "bytes",
    "list",
    "dict",
    "tuple",
    "object",
    "type",
}

# Names taken by the generated class API
PYTHON_MEMBER_NAMES = {
    "self",
    "cls",
    "serialize",
    "deserialize",
    "to_bytes",
    "from_bytes",
    "INDEX",
}


def create_python_sanitizer() -> NameSanitizer:
    """Create a name sanitizer for Python class names."""
    return NameSanitizer(PYTHON_RESERVED_WORDS, PYTHON_BUILTIN_TYPES)


def create_python_field_sanitizer() -> NameSanitizer:
    """Create a name sanitizer for Python attribute names."""
    return NameSanitizer(PYTHON_RESERVED_WORDS, PYTHON_BUILTIN_TYPES | PYTHON_MEMBER_NAMES)
