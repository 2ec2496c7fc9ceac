"""Tests for the encoding contract and the shared type mapper."""

import pytest

from serdegen.analyzer import compute_emission_plan
from serdegen.codegen.core.config import ConfigError, GeneratorConfig
from serdegen.codegen.core.mapper import (
    BINCODE_CONTRACT,
    CANONICAL_CONTRACT,
    Encoding,
    EncodingContract,
    TypeMapper,
)
from serdegen.formats import (
    F64,
    STR,
    U8,
    UNIT,
    EnumFormat,
    MapFormat,
    Named,
    NewTypeStruct,
    OptionFormat,
    PrimitiveKind,
    Registry,
    SeqFormat,
    Struct,
    TupleArrayFormat,
    TupleFormat,
    TupleStruct,
    TypeName,
    UnitStruct,
    Variant,
)


def make_mapper(registry, encoding="bincode", force_indirect=()):
    plan = compute_emission_plan(registry, force_indirect)
    return TypeMapper(registry, plan, EncodingContract.for_encoding(encoding))


class TestEncodingContract:
    def test_bincode_parameters(self):
        assert BINCODE_CONTRACT.length_prefix == "u64"
        assert BINCODE_CONTRACT.discriminant == "u32"
        assert not BINCODE_CONTRACT.sort_map_keys
        assert not BINCODE_CONTRACT.canonical

    def test_canonical_parameters(self):
        assert CANONICAL_CONTRACT.length_prefix == "uleb128"
        assert CANONICAL_CONTRACT.discriminant == "uleb128"
        assert CANONICAL_CONTRACT.sort_map_keys
        assert CANONICAL_CONTRACT.canonical

    def test_lookup_by_name_or_enum(self):
        assert EncodingContract.for_encoding("Canonical") is CANONICAL_CONTRACT
        assert EncodingContract.for_encoding(Encoding.BINCODE) is BINCODE_CONTRACT

    def test_from_config(self):
        config = GeneratorConfig(encoding="canonical")
        assert EncodingContract.from_config(config) is CANONICAL_CONTRACT

    def test_unknown_encoding(self):
        with pytest.raises(ConfigError, match="Unknown encoding"):
            EncodingContract.for_encoding("json")


class TestTypeMapper:
    def test_primitive_suffixes(self, test_registry):
        mapper = make_mapper(test_registry)
        assert mapper.primitive_suffix(PrimitiveKind.U64) == "u64"
        assert mapper.primitive_suffix(PrimitiveKind.CHAR) == "char"
        with pytest.raises(ValueError):
            mapper.primitive_suffix(PrimitiveKind.STR)

    def test_wire_parameters_follow_the_contract(self, test_registry):
        mapper = make_mapper(test_registry, "canonical")
        assert mapper.length_suffix == "uleb128"
        assert mapper.discriminant_suffix == "uleb128"
        assert mapper.sort_map_keys

    def test_inline_recursion_is_indirected(self, list_registry):
        mapper = make_mapper(list_registry)
        assert mapper.is_indirect("List", TypeName("List"))
        assert mapper.indirect_sites("List") == ["List"]

    def test_recursion_through_collections_is_not_indirected(self, tree_registry):
        mapper = make_mapper(tree_registry)

        # Forest.first is Option<Tree> (inline); Forest.rest is Seq<Tree>.
        assert mapper.indirect_sites("Forest") == ["Tree"]
        assert mapper.indirect_sites("Tree") == ["Forest"]
        assert not mapper.is_indirect("Forest", TypeName("Tree"), inline=False)

    def test_forced_indirection_applies_inside_collections(self):
        registry = Registry(
            {
                "Big": NewTypeStruct(STR),
                "Holder": Struct(
                    (
                        Named("one", TypeName("Big")),
                        Named("many", SeqFormat(TypeName("Big"))),
                    )
                ),
            }
        )
        mapper = make_mapper(registry, force_indirect=["Big"])
        assert mapper.indirect_sites("Holder") == ["Big", "Big"]

    def test_forward_declarations_only_for_cycles(self, tree_registry):
        mapper = make_mapper(tree_registry)
        cyclic, leaf = mapper.groups
        assert mapper.forward_declarations(cyclic) == ["Tree", "Forest"]
        assert mapper.forward_declarations(leaf) == []

    def test_iter_containers_in_emission_order(self, tree_registry):
        mapper = make_mapper(tree_registry)
        assert [name for name, _ in mapper.iter_containers()] == ["Tree", "Forest", "Leaf"]

    def test_transitive_shape_queries(self):
        registry = Registry(
            {
                "Measure": NewTypeStruct(F64),
                "Keyed": NewTypeStruct(MapFormat(STR, U8)),
                "Node": NewTypeStruct(OptionFormat(TypeName("Node"))),
            }
        )
        mapper = make_mapper(registry)

        assert mapper.type_contains_float("Measure")
        assert mapper.contains_float(TupleFormat((U8, TypeName("Measure"))))
        assert not mapper.type_contains_float("Node")
        assert mapper.contains_collection(TypeName("Keyed"))
        assert not mapper.contains_collection(STR)
        assert mapper.contains_type_name(SeqFormat(TypeName("Node")))
        assert not mapper.is_enum("Node")

    def test_zero_size_formats(self):
        registry = Registry(
            {
                "Marker": UnitStruct(),
                "Empty": Struct(()),
                "Wrapper": TupleStruct((UNIT, TypeName("Marker"))),
                "Loop": NewTypeStruct(TupleFormat((TypeName("Loop"),))),
                "Tag": EnumFormat((Variant(0, "Only", UnitStruct()),)),
                "Byte": NewTypeStruct(U8),
            }
        )
        mapper = make_mapper(registry)

        for format in (
            UNIT,
            TupleFormat(()),
            TupleFormat((UNIT, UNIT)),
            TupleArrayFormat(U8, 0),
            TupleArrayFormat(UNIT, 4),
            TypeName("Marker"),
            TypeName("Empty"),
            TypeName("Wrapper"),
            TypeName("Loop"),
        ):
            assert mapper.is_zero_size(format), format
        for format in (
            U8,
            STR,
            OptionFormat(UNIT),
            SeqFormat(UNIT),
            MapFormat(UNIT, UNIT),
            TupleArrayFormat(U8, 1),
            TypeName("Tag"),
            TypeName("Byte"),
        ):
            assert not mapper.is_zero_size(format), format
