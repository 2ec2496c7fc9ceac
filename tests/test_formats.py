"""Tests for the format model and registry documents."""

import pytest

from serdegen.formats import (
    STR,
    U8,
    U32,
    U64,
    EnumFormat,
    InvalidRegistryError,
    MapFormat,
    Named,
    NewTypeStruct,
    OptionFormat,
    Registry,
    SeqFormat,
    Struct,
    TupleArrayFormat,
    TupleFormat,
    TupleStruct,
    TypeName,
    UnitStruct,
    UnresolvedReferenceError,
    Variant,
    child_formats,
    container_formats,
    format_from_value,
    iter_type_names,
    registry_from_dict,
    registry_to_dict,
)

DOCUMENT = {
    "Test": {"STRUCT": [{"a": {"SEQ": "U64"}}, {"b": {"TUPLE": ["U32", "U32"]}}]},
    "List": {
        "ENUM": {
            0: {"Empty": "UNIT"},
            1: {"Cons": {"TUPLE": ["U32", {"TYPENAME": "List"}]}},
        }
    },
    "Wrapper": {"NEWTYPESTRUCT": {"OPTION": {"TYPENAME": "Test"}}},
    "Nothing": "UNITSTRUCT",
    "Grid": {"TUPLESTRUCT": [{"TUPLEARRAY": {"CONTENT": "U8", "SIZE": 4}}]},
    "Index": {"STRUCT": [{"by_name": {"MAP": {"KEY": "STR", "VALUE": "U64"}}}]},
}


class TestRegistryDocuments:
    def test_parses_every_container_shape(self):
        registry = registry_from_dict(DOCUMENT)

        assert registry.names() == ["Test", "List", "Wrapper", "Nothing", "Grid", "Index"]
        assert registry["Test"] == Struct(
            (Named("a", SeqFormat(U64)), Named("b", TupleFormat((U32, U32))))
        )
        assert registry["List"] == EnumFormat(
            (
                Variant(0, "Empty", UnitStruct()),
                Variant(1, "Cons", TupleStruct((U32, TypeName("List")))),
            )
        )
        assert registry["Wrapper"] == NewTypeStruct(OptionFormat(TypeName("Test")))
        assert registry["Nothing"] == UnitStruct()
        assert registry["Grid"] == TupleStruct((TupleArrayFormat(U8, 4),))
        assert registry["Index"] == Struct((Named("by_name", MapFormat(STR, U64)),))

    def test_document_round_trip(self):
        registry = registry_from_dict(DOCUMENT)
        assert registry_from_dict(registry_to_dict(registry)) == registry

    def test_enum_discriminants_may_be_strings(self):
        registry = registry_from_dict(
            {"E": {"ENUM": {"3": {"Three": "UNIT"}, "1": {"One": {"NEWTYPE": "STR"}}}}}
        )
        variants = registry["E"].variants
        assert [(v.index, v.name) for v in variants] == [(1, "One"), (3, "Three")]

    def test_primitive_names_are_case_insensitive(self):
        assert format_from_value("u64") == U64

    @pytest.mark.parametrize(
        "document",
        [
            {"A": {"STRUCT": [{"x": "U99"}]}},
            {"A": {"STRUCT": [{"x": {"SEQ": "U8", "OPTION": "U8"}}]}},
            {"A": {"STRUCT": [{"x": {"MAP": {"KEY": "U8"}}}]}},
            {"A": {"STRUCT": [{"x": {"TUPLEARRAY": {"CONTENT": "U8", "SIZE": "many"}}}]}},
            {"A": {"UNION": []}},
            {"A": "NOTHING"},
            ["not", "a", "mapping"],
        ],
    )
    def test_malformed_documents_are_rejected(self, document):
        with pytest.raises(InvalidRegistryError):
            registry_from_dict(document)

    def test_dangling_reference_is_reported(self):
        with pytest.raises(UnresolvedReferenceError) as excinfo:
            registry_from_dict({"A": {"NEWTYPESTRUCT": {"TYPENAME": "Missing"}}})
        assert excinfo.value.referrer == "A"
        assert excinfo.value.name == "Missing"


class TestRegistryValidation:
    def test_duplicate_type_name(self):
        registry = Registry({"A": UnitStruct()})
        with pytest.raises(InvalidRegistryError, match="Duplicate type name"):
            registry.add("A", UnitStruct())

    def test_duplicate_field_name(self):
        registry = Registry({"A": Struct((Named("x", U8), Named("x", U32)))})
        with pytest.raises(InvalidRegistryError, match="duplicate field name"):
            registry.validate()

    def test_duplicate_discriminant(self):
        registry = Registry(
            {
                "E": EnumFormat(
                    (Variant(0, "A", UnitStruct()), Variant(0, "B", UnitStruct()))
                )
            }
        )
        with pytest.raises(InvalidRegistryError, match="duplicate discriminant"):
            registry.validate()

    def test_duplicate_discriminant_in_document(self):
        with pytest.raises(InvalidRegistryError):
            registry_from_dict({"E": {"ENUM": {0: {"A": "UNIT"}, "0": {"B": "UNIT"}}}})

    def test_duplicate_variant_name(self):
        registry = Registry(
            {
                "E": EnumFormat(
                    (Variant(0, "A", UnitStruct()), Variant(1, "A", UnitStruct()))
                )
            }
        )
        with pytest.raises(InvalidRegistryError, match="duplicate variant name"):
            registry.validate()

    def test_empty_enum(self):
        with pytest.raises(InvalidRegistryError, match="no variants"):
            Registry({"E": EnumFormat(())}).validate()

    def test_negative_array_size(self):
        registry = Registry({"A": NewTypeStruct(TupleArrayFormat(U8, -1))})
        with pytest.raises(InvalidRegistryError, match="negative size"):
            registry.validate()

    def test_unresolved_reference_is_an_invalid_registry(self):
        registry = Registry({"A": NewTypeStruct(SeqFormat(TypeName("B")))})
        with pytest.raises(InvalidRegistryError):
            registry.validate()


class TestFormatWalking:
    def test_enum_variants_are_sorted_by_discriminant(self):
        enum = EnumFormat((Variant(5, "Five", UnitStruct()), Variant(2, "Two", UnitStruct())))
        assert [variant.index for variant in enum.variants] == [2, 5]
        assert enum.get_variant(5).name == "Five"
        assert enum.get_variant(3) is None

    def test_child_formats(self):
        assert child_formats(U8) == ()
        assert child_formats(MapFormat(STR, U8)) == (STR, U8)
        assert child_formats(TupleFormat((U8, STR))) == (U8, STR)
        assert child_formats(TupleArrayFormat(U32, 2)) == (U32,)

    def test_iter_type_names_is_depth_first(self):
        format = TupleFormat(
            (
                MapFormat(TypeName("K"), SeqFormat(TypeName("V"))),
                OptionFormat(TypeName("O")),
            )
        )
        assert list(iter_type_names(format)) == ["K", "V", "O"]

    def test_container_formats_of_enum(self):
        enum = EnumFormat(
            (
                Variant(0, "A", NewTypeStruct(U8)),
                Variant(1, "B", Struct((Named("x", STR), Named("y", U32)))),
            )
        )
        assert container_formats(enum) == [U8, STR, U32]
