"""Shared fixtures: sample registries and a loader for generated Python code."""

import importlib.util
import itertools
import sys

import pytest

from serdegen.codegen import generate_code, get_generator
from serdegen.formats import (
    BOOL,
    BYTES,
    CHAR,
    F32,
    F64,
    I8,
    I16,
    I32,
    I64,
    I128,
    STR,
    U8,
    U16,
    U32,
    U64,
    U128,
    UNIT,
    EnumFormat,
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
    Variant,
)

RUNTIME_MODULE = "serdegen.runtime.python.serde_runtime"

_module_counter = itertools.count()


@pytest.fixture
def test_registry():
    """``Test { a: Seq(U64), b: Tuple([U32, U32]) }``."""
    return Registry(
        {
            "Test": Struct(
                (
                    Named("a", SeqFormat(U64)),
                    Named("b", TupleFormat((U32, U32))),
                )
            )
        }
    )


@pytest.fixture
def list_registry():
    """Self-recursive ``List = Empty | Cons(U32, List)``."""
    return Registry(
        {
            "List": EnumFormat(
                (
                    Variant(0, "Empty", UnitStruct()),
                    Variant(1, "Cons", TupleStruct((U32, TypeName("List")))),
                )
            )
        }
    )


@pytest.fixture
def tree_registry():
    """Mutually recursive Tree/Forest plus an independent leaf type."""
    return Registry(
        {
            "Tree": Struct(
                (
                    Named("value", U16),
                    Named("children", TypeName("Forest")),
                )
            ),
            "Forest": Struct(
                (
                    Named("first", OptionFormat(TypeName("Tree"))),
                    Named("rest", SeqFormat(TypeName("Tree"))),
                )
            ),
            "Leaf": NewTypeStruct(STR),
        }
    )


@pytest.fixture
def map_registry():
    """A struct holding a string-keyed map."""
    return Registry(
        {
            "Scores": Struct((Named("entries", MapFormat(STR, U32)),)),
        }
    )


@pytest.fixture
def everything_registry():
    """One field of every primitive and compound shape."""
    return Registry(
        {
            "Color": EnumFormat(
                (
                    Variant(0, "Red", UnitStruct()),
                    Variant(1, "Custom", Struct((Named("rgb", TupleArrayFormat(U8, 3)),))),
                    Variant(7, "Named", NewTypeStruct(STR)),
                )
            ),
            "Marker": UnitStruct(),
            "Pair": TupleStruct((I32, BOOL)),
            "Everything": Struct(
                (
                    Named("unit", UNIT),
                    Named("flag", BOOL),
                    Named("i8", I8),
                    Named("i16", I16),
                    Named("i32", I32),
                    Named("i64", I64),
                    Named("i128", I128),
                    Named("u8", U8),
                    Named("u16", U16),
                    Named("u32", U32),
                    Named("u64", U64),
                    Named("u128", U128),
                    Named("f32", F32),
                    Named("f64", F64),
                    Named("letter", CHAR),
                    Named("text", STR),
                    Named("blob", BYTES),
                    Named("maybe", OptionFormat(U16)),
                    Named("items", SeqFormat(TypeName("Pair"))),
                    Named("lookup", MapFormat(U8, STR)),
                    Named("triple", TupleFormat((U8, STR, TypeName("Marker")))),
                    Named("color", TypeName("Color")),
                )
            ),
        }
    )


@pytest.fixture
def load_generated(tmp_path, monkeypatch):
    """Generate Python code for a registry and import it as a fresh module."""

    def load(registry, encoding="bincode", **options):
        options.setdefault("runtime_module", RUNTIME_MODULE)
        options["encoding"] = encoding
        generator = get_generator("python", options)
        result = generate_code(generator, registry)
        assert result.success, result.error_message

        name = f"serdegen_generated_{next(_module_counter)}"
        path = tmp_path / f"{name}.py"
        path.write_text(result.code, encoding="utf-8")

        spec = importlib.util.spec_from_file_location(name, path)
        module = importlib.util.module_from_spec(spec)
        monkeypatch.setitem(sys.modules, name, module)
        spec.loader.exec_module(module)
        return module

    return load
