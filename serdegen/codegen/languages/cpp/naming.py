"""
C++-specific naming utilities and sanitization.

Handles C++ keywords, alternative operator tokens and the namespaces and
member functions generated headers rely on.
"""

from ...core.naming import NameSanitizer

# C++17 keywords and alternative tokens
CPP_RESERVED_WORDS = {
    "alignas",
    "alignof",
    "and",
    "and_eq",
    "asm",
    "auto",
    "bitand",
    "bitor",
    "bool",
    "break",
    "case",
    "catch",
    "char",
    "char16_t",
    "char32_t",
    "class",
    "compl",
    "const",
    "constexpr",
    "const_cast",
    "continue",
    "decltype",
    "default",
    "delete",
    "do",
    "double",
    "dynamic_cast",
    "else",
    "enum",
    "explicit",
    "export",
    "extern",
    "false",
    "float",
    "for",
    "friend",
    "goto",
    "if",
    "inline",
    "int",
    "long",
    "mutable",
    "namespace",
    "new",
    "noexcept",
    "not",
    "not_eq",
    "nullptr",
    "operator",
    "or",
    "or_eq",
    "private",
    "protected",
    "public",
    "register",
    "reinterpret_cast",
    "return",
    "short",
    "signed",
    "sizeof",
    "static",
    "static_assert",
    "static_cast",
    "struct",
    "switch",
    "template",
    "this",
    "thread_local",
    "throw",
    "true",
    "try",
    "typedef",
    "typeid",
    "typename",
    "union",
    "unsigned",
    "using",
    "virtual",
    "void",
    "volatile",
    "wchar_t",
    "while",
    "xor",
    "xor_eq",
}

# Namespaces and fixed-width typedefs referenced by generated headers
CPP_BUILTIN_TYPES = {
    "std",
    "serde_runtime",
    "int8_t",
    "int16_t",
    "int32_t",
    "int64_t",
    "uint8_t",
    "uint16_t",
    "uint32_t",
    "uint64_t",
    "size_t",
}

# Member functions declared on every generated struct
CPP_MEMBER_NAMES = {
    "serialize",
    "deserialize",
    "to_bytes",
    "from_bytes",
}


def create_cpp_sanitizer() -> NameSanitizer:
    """Create a name sanitizer for C++ type names."""
    return NameSanitizer(CPP_RESERVED_WORDS, CPP_BUILTIN_TYPES)


def create_cpp_member_sanitizer() -> NameSanitizer:
    """Create a name sanitizer for data members and nested variant structs."""
    return NameSanitizer(CPP_RESERVED_WORDS, CPP_BUILTIN_TYPES | CPP_MEMBER_NAMES)
