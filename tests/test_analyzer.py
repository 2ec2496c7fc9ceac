"""Tests for dependency analysis and emission planning."""

import pytest

from serdegen.analyzer import (
    build_dependency_graph,
    compute_emission_plan,
    get_dependencies,
    strongly_connected_components,
)
from serdegen.formats import (
    U8,
    Named,
    NewTypeStruct,
    OptionFormat,
    Registry,
    SeqFormat,
    Struct,
    TypeName,
    UnitStruct,
    UnresolvedReferenceError,
)


def chain_registry():
    # Declared in reverse dependency order on purpose.
    return Registry(
        {
            "C": NewTypeStruct(TypeName("B")),
            "B": NewTypeStruct(TypeName("A")),
            "A": NewTypeStruct(U8),
        }
    )


def assert_topological(registry, plan):
    for name in registry:
        for target in plan.dependencies[name]:
            if plan.group_of(name) is not plan.group_of(target):
                assert plan.group_index(target) < plan.group_index(name)


class TestDependencies:
    def test_dependencies_in_first_seen_order(self):
        container = Struct(
            (
                Named("x", TypeName("B")),
                Named("y", SeqFormat(TypeName("A"))),
                Named("z", OptionFormat(TypeName("B"))),
            )
        )
        assert get_dependencies(container) == ["B", "A"]

    def test_graph_includes_self_loops(self, list_registry):
        assert build_dependency_graph(list_registry) == {"List": ["List"]}


class TestStronglyConnectedComponents:
    def test_components_complete_in_reverse_topological_order(self):
        graph = {"a": ["b"], "b": ["c"], "c": ["b"], "d": []}
        components = strongly_connected_components(graph)
        assert [sorted(component) for component in components] == [["b", "c"], ["a"], ["d"]]

    def test_deep_chain_does_not_recurse(self):
        size = 5000
        graph = {f"n{i}": [f"n{i + 1}"] for i in range(size)}
        graph[f"n{size}"] = ["n0"]
        components = strongly_connected_components(graph)
        assert len(components) == 1
        assert len(components[0]) == size + 1

    def test_unknown_targets_are_ignored(self):
        assert strongly_connected_components({"a": ["zzz"]}) == [["a"]]


class TestEmissionPlan:
    def test_dependencies_come_first(self):
        registry = chain_registry()
        plan = compute_emission_plan(registry)

        assert plan.order == ["A", "B", "C"]
        assert not any(group.cyclic for group in plan.groups)
        assert_topological(registry, plan)

    def test_independent_types_keep_insertion_order(self):
        registry = Registry(
            {
                "Zeta": UnitStruct(),
                "Alpha": UnitStruct(),
                "Uses": NewTypeStruct(TypeName("Alpha")),
                "Mid": UnitStruct(),
            }
        )
        assert compute_emission_plan(registry).order == ["Zeta", "Alpha", "Uses", "Mid"]

    def test_self_recursive_type_is_cyclic(self, list_registry):
        plan = compute_emission_plan(list_registry)

        assert len(plan.groups) == 1
        assert plan.groups[0].names == ("List",)
        assert plan.groups[0].cyclic
        assert plan.is_cyclic("List")
        assert plan.requires_indirection("List", "List")

    def test_mutual_recursion_forms_one_group(self, tree_registry):
        plan = compute_emission_plan(tree_registry)

        groups = [(group.names, group.cyclic) for group in plan.groups]
        assert groups == [(("Tree", "Forest"), True), (("Leaf",), False)]
        assert plan.requires_indirection("Tree", "Forest")
        assert plan.requires_indirection("Forest", "Tree")
        assert not plan.requires_indirection("Leaf", "Tree")
        assert_topological(tree_registry, plan)

    def test_references_outside_the_cycle_stay_by_value(self):
        registry = Registry(
            {
                "Node": Struct(
                    (
                        Named("payload", TypeName("Payload")),
                        Named("next", OptionFormat(TypeName("Node"))),
                    )
                ),
                "Payload": NewTypeStruct(U8),
            }
        )
        plan = compute_emission_plan(registry)

        assert plan.order == ["Payload", "Node"]
        assert plan.requires_indirection("Node", "Node")
        assert not plan.requires_indirection("Node", "Payload")

    def test_forced_indirection(self):
        plan = compute_emission_plan(chain_registry(), force_indirect=["A"])

        assert plan.forced_indirect == frozenset({"A"})
        assert plan.requires_indirection("B", "A")
        assert not plan.requires_indirection("C", "B")

    def test_unknown_forced_name_is_only_a_warning(self, caplog):
        plan = compute_emission_plan(chain_registry(), force_indirect=["Ghost"])
        assert plan.order == ["A", "B", "C"]
        assert "Ghost" in caplog.text

    def test_dangling_reference_fails_before_planning(self):
        registry = Registry({"A": NewTypeStruct(TypeName("Ghost"))})
        with pytest.raises(UnresolvedReferenceError):
            compute_emission_plan(registry)

    def test_plan_is_deterministic(self, tree_registry):
        first = compute_emission_plan(tree_registry)
        second = compute_emission_plan(tree_registry)
        assert first.groups == second.groups
