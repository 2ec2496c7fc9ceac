"""
Rust-specific naming utilities and sanitization.

Handles Rust keywords and the prelude names generated code relies on.
"""

from ...core.naming import NameSanitizer

# Rust keywords (strict and reserved)
RUST_RESERVED_WORDS = {
    "as",
    "async",
    "await",
    "break",
    "const",
    "continue",
    "crate",
    "dyn",
    "else",
    "enum",
    "extern",
    "false",
    "fn",
    "for",
    "if",
    "impl",
    "in",
    "let",
    "loop",
    "match",
    "mod",
    "move",
    "mut",
    "pub",
    "ref",
    "return",
    "self",
    "Self",
    "static",
    "struct",
    "super",
    "trait",
    "true",
    "type",
    "unsafe",
    "use",
    "where",
    "while",
    "abstract",
    "become",
    "box",
    "do",
    "final",
    "macro",
    "override",
    "priv",
    "try",
    "typeof",
    "unsized",
    "virtual",
    "yield",
}

# Prelude types and constructors used by generated code
RUST_BUILTIN_TYPES = {
    "Option",
    "Some",
    "None",
    "Result",
    "Ok",
    "Err",
    "Vec",
    "String",
    "Box",
    "bool",
    "char",
    "str",
    "u8",
    "u16",
    "u32",
    "u64",
    "u128",
    "i8",
    "i16",
    "i32",
    "i64",
    "i128",
    "f32",
    "f64",
}


def create_rust_sanitizer() -> NameSanitizer:
    """Create a name sanitizer for Rust type and variant names."""
    return NameSanitizer(RUST_RESERVED_WORDS, RUST_BUILTIN_TYPES)


def create_rust_field_sanitizer() -> NameSanitizer:
    """Create a name sanitizer for Rust field names."""
    return NameSanitizer(RUST_RESERVED_WORDS)


def validate_rust_module_name(name: str) -> list[str]:
    """
    Validate a Rust module name.

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not name:
        errors.append("Module name cannot be empty")
        return errors

    if not name.isidentifier():
        errors.append(f"'{name}' is not a valid Rust identifier")

    if name != name.lower():
        errors.append("Module names should be snake_case")

    if name in RUST_RESERVED_WORDS:
        errors.append(f"'{name}' is a Rust reserved word")

    return errors
