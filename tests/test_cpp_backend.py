"""Tests for the C++ header backend."""

import pytest

from serdegen.codegen import generate_code, get_generator
from serdegen.codegen.core.generator import UnsupportedConstructError
from serdegen.formats import (
    U8,
    STR,
    UNIT,
    MapFormat,
    Named,
    NewTypeStruct,
    Registry,
    SeqFormat,
    Struct,
    TupleStruct,
    TypeName,
)


def generate(registry, **options):
    return generate_code(get_generator("cpp", options), registry)


class TestHeaderLayout:
    def test_header_frame(self, test_registry):
        code = generate(test_registry, module_name="demo").code

        assert code.startswith("// Generated by serdegen")
        assert "#pragma once" in code
        assert '#include "serde_runtime.hpp"' in code
        assert "namespace demo {" in code
        assert code.rstrip().endswith("}  // namespace demo")

    def test_struct_members_and_methods(self, test_registry):
        code = generate(test_registry).code

        assert "struct Test {" in code
        assert "std::vector<uint64_t> a;" in code
        assert "std::tuple<uint32_t, uint32_t> b;" in code
        assert "static Test deserialize(::serde_runtime::Deserializer &_deserializer);" in code
        assert "inline void Test::serialize(::serde_runtime::Serializer &_serializer) const {" in code
        assert "_serializer.write_u64(this->a.size());" in code
        assert "_serializer.write_u32(std::get<0>(this->b));" in code
        assert "_deserializer.check_end();" in code

    def test_canonical_lengths(self, test_registry):
        code = generate(test_registry, encoding="canonical").code

        assert "// Wire format: canonical" in code
        assert "_serializer.write_uleb128(this->a.size());" in code
        assert "_deserializer.read_uleb128();" in code

    def test_nested_namespace(self, test_registry):
        code = generate(test_registry, module_name="acme::wire").code
        assert "namespace acme::wire {" in code


class TestRecursiveTypes:
    def test_self_recursive_enum_uses_value_ptr(self, list_registry):
        code = generate(list_registry).code

        assert "struct List;" in code
        assert "struct Cons {" in code
        assert "std::tuple<uint32_t, ::serde_runtime::value_ptr<::generated::List>> value;" in code
        assert "std::variant<Empty, Cons> value;" in code
        assert "_serializer.write_u32(1);" in code
        assert "case 1: {" in code
        assert "unknown variant index for List" in code

    def test_mutual_recursion_is_forward_declared(self, tree_registry):
        code = generate(tree_registry).code

        assert "struct Tree;" in code
        assert "struct Forest;" in code
        assert "struct Leaf;" not in code
        # Sequences own heap storage, so only inline sites are indirected.
        assert "std::vector<::generated::Tree> rest;" in code
        assert "std::optional<::serde_runtime::value_ptr<::generated::Tree>> first;" in code
        assert "::serde_runtime::value_ptr<::generated::Forest> children;" in code

    def test_forced_indirection(self, everything_registry):
        code = generate(everything_registry, force_indirect=["Pair"]).code
        assert "std::vector<::serde_runtime::value_ptr<::generated::Pair>> items;" in code

    def test_definitions_follow_declarations(self, tree_registry):
        code = generate(tree_registry).code
        assert code.index("struct Tree {") < code.index("inline void Tree::serialize")
        assert code.index("struct Forest {") < code.index("inline void Tree::serialize")


class TestCanonicalMaps:
    def test_map_entries_are_sorted_and_checked(self, map_registry):
        code = generate(map_registry, encoding="canonical").code

        assert "std::map<std::string, uint32_t> entries;" in code
        assert "_serializer.sort_map_entries(" in code
        assert "_deserializer.check_key_order(" in code

    def test_bincode_maps_are_not_sorted(self, map_registry):
        code = generate(map_registry).code
        assert "sort_map_entries" not in code
        assert "check_key_order" not in code


class TestZeroSizeEntries:
    def test_unit_sequences_are_capped(self):
        code = generate(Registry({"Units": NewTypeStruct(SeqFormat(UNIT))})).code

        assert "std::vector<std::monostate> value;" in code
        assert "_serializer.check_zero_size_length(this->value.size());" in code
        assert "_deserializer.check_zero_size_length(" in code

    def test_sized_elements_are_not_capped(self, test_registry, map_registry):
        assert "check_zero_size_length" not in generate(test_registry).code
        assert "check_zero_size_length" not in generate(map_registry).code


class TestUnsupported:
    def test_named_map_keys_are_rejected(self):
        registry = Registry(
            {
                "Pair": TupleStruct((U8, STR)),
                "Index": NewTypeStruct(MapFormat(TypeName("Pair"), U8)),
            }
        )
        result = generate(registry)

        assert not result.success
        assert isinstance(result.exception, UnsupportedConstructError)
        assert result.exception.type_name == "Index"
        assert "map keys" in result.error_message

    @pytest.mark.parametrize("alias", ["cpp", "c++", "CPP"])
    def test_aliases(self, alias, test_registry):
        result = generate_code(get_generator(alias), test_registry)
        assert result.success
        assert result.metadata["file_extension"] == ".hpp"


def test_reserved_member_names():
    registry = Registry({"Holder": Struct((Named("class", U8), Named("serialize", U8)))})
    code = generate(registry).code

    assert "uint8_t class_;" in code
    assert "uint8_t serialize_;" in code


def test_output_is_deterministic(everything_registry):
    assert generate(everything_registry).code == generate(everything_registry).code
