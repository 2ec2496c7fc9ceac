"""Tests for identifier sanitization."""

from serdegen.codegen.core.naming import NameSanitizer, NamingCase
from serdegen.codegen.languages.cpp.naming import create_cpp_member_sanitizer
from serdegen.codegen.languages.python.naming import (
    create_python_field_sanitizer,
    create_python_sanitizer,
)
from serdegen.codegen.languages.rust.naming import (
    create_rust_field_sanitizer,
    create_rust_sanitizer,
    validate_rust_module_name,
)


class TestNameSanitizer:
    def test_case_conversions(self):
        sanitizer = NameSanitizer()
        assert sanitizer.sanitize_name("userName", NamingCase.SNAKE_CASE) == "user_name"
        assert sanitizer.sanitize_name("user_id", NamingCase.PASCAL_CASE) == "UserId"
        assert sanitizer.sanitize_name("HTTPServer", NamingCase.SNAKE_CASE) == "http_server"
        assert sanitizer.sanitize_name("max-size", NamingCase.CAMEL_CASE) == "maxSize"

    def test_invalid_characters_and_leading_digits(self):
        sanitizer = NameSanitizer()
        assert sanitizer.sanitize_name("2fa code", NamingCase.SNAKE_CASE) == "n2fa_code"
        assert sanitizer.sanitize_name("__private", NamingCase.PRESERVE) == "private"
        assert sanitizer.sanitize_name("$$$", NamingCase.PRESERVE) == "field"

    def test_reserved_words_get_a_suffix(self):
        sanitizer = NameSanitizer({"class"}, {"list"})
        assert sanitizer.sanitize_name("class", NamingCase.SNAKE_CASE) == "class_"
        assert sanitizer.sanitize_name("list", NamingCase.PRESERVE) == "list_"
        assert sanitizer.sanitize_name("List", NamingCase.PRESERVE) == "List"

    def test_collisions_are_numbered_per_scope(self):
        sanitizer = NameSanitizer()
        assert sanitizer.sanitize_name("fooBar", NamingCase.SNAKE_CASE, scope="A") == "foo_bar"
        assert sanitizer.sanitize_name("foo_bar", NamingCase.SNAKE_CASE, scope="A") == "foo_bar_1"
        assert sanitizer.sanitize_name("foo_bar", NamingCase.SNAKE_CASE, scope="B") == "foo_bar"

    def test_results_are_stable(self):
        sanitizer = NameSanitizer()
        first = sanitizer.sanitize_name("someName", NamingCase.SNAKE_CASE)
        assert sanitizer.sanitize_name("someName", NamingCase.SNAKE_CASE) == first

    def test_reset_and_manual_reservations(self):
        sanitizer = NameSanitizer()
        sanitizer.add_used_name("value", scope="E")
        assert sanitizer.sanitize_name("value", NamingCase.PRESERVE, scope="E") == "value_1"
        sanitizer.reset_used_names()
        assert sanitizer.sanitize_name("value", NamingCase.PRESERVE, scope="E") == "value"


class TestLanguageSanitizers:
    def test_python(self):
        assert create_python_sanitizer().sanitize_name("None", NamingCase.PRESERVE) == "None_"
        fields = create_python_field_sanitizer()
        assert fields.sanitize_name("from", NamingCase.SNAKE_CASE) == "from_"
        assert fields.sanitize_name("serialize", NamingCase.SNAKE_CASE) == "serialize_"

    def test_rust(self):
        assert create_rust_sanitizer().sanitize_name("option", NamingCase.PASCAL_CASE) == "Option_"
        assert create_rust_field_sanitizer().sanitize_name("type", NamingCase.SNAKE_CASE) == "type_"

    def test_cpp(self):
        members = create_cpp_member_sanitizer()
        assert members.sanitize_name("namespace", NamingCase.PRESERVE) == "namespace_"
        assert members.sanitize_name("to_bytes", NamingCase.PRESERVE) == "to_bytes_"

    def test_rust_module_names(self):
        assert validate_rust_module_name("payments") == []
        assert validate_rust_module_name("") == ["Module name cannot be empty"]
        assert validate_rust_module_name("Payments")
        assert validate_rust_module_name("match")
