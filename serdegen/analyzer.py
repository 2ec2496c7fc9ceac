"""
Dependency analysis of a format registry.

Builds the direct-reference graph between named types, finds the
strongly-connected components (cyclic clusters) and orders them so that
every type is emitted after the types it depends on. Cyclic clusters are
marked as requiring indirection for the references between their members.
"""

import heapq
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .formats import ContainerFormat, Registry, container_formats, iter_type_names
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class EmissionGroup:
    """A single acyclic type, or a maximal cluster of mutually referencing types."""

    names: Tuple[str, ...]
    cyclic: bool = False

    def __contains__(self, name: object) -> bool:
        return name in self.names


@dataclass
class EmissionPlan:
    """Ordered emission groups plus the dependency data they were derived from."""

    groups: List[EmissionGroup]
    dependencies: Dict[str, List[str]]
    forced_indirect: FrozenSet[str] = field(default_factory=frozenset)
    _group_index: Dict[str, int] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        self._group_index = {
            name: position
            for position, group in enumerate(self.groups)
            for name in group.names
        }

    @property
    def order(self) -> List[str]:
        """All type names in emission order."""
        return [name for group in self.groups for name in group.names]

    def group_index(self, name: str) -> int:
        return self._group_index[name]

    def group_of(self, name: str) -> EmissionGroup:
        return self.groups[self._group_index[name]]

    def is_cyclic(self, name: str) -> bool:
        """True if the type belongs to a cluster that requires indirection."""
        return self.group_of(name).cyclic

    def requires_indirection(self, referrer: str, target: str) -> bool:
        """
        Decide whether a by-name reference needs a heap-indirected slot.

        A reference from a type to a member of its own cyclic cluster is
        indirected; so is any reference to a type listed in the forced
        indirection set. Everything else is stored by value.
        """
        if target in self.forced_indirect:
            return True
        if referrer not in self._group_index or target not in self._group_index:
            return False
        group = self._group_index[referrer]
        return group == self._group_index[target] and self.groups[group].cyclic


def get_dependencies(container: ContainerFormat) -> List[str]:
    """
    Return the names directly referenced by a container, in first-seen order.

    Args:
        container: Container format to inspect

    Returns:
        Unique referenced names (a self-reference included)
    """
    seen: Dict[str, None] = {}
    for format in container_formats(container):
        for name in iter_type_names(format):
            seen.setdefault(name, None)
    return list(seen)


def build_dependency_graph(registry: Registry) -> Dict[str, List[str]]:
    """Map every registry entry to the entries it references directly."""
    return {name: get_dependencies(container) for name, container in registry.items()}


def strongly_connected_components(
    graph: Dict[str, List[str]], nodes: Optional[Iterable[str]] = None
) -> List[List[str]]:
    """
    Find strongly-connected components with an iterative low-link search.

    Args:
        graph: Adjacency lists; targets missing from the graph are ignored
        nodes: Roots to start from, in order (defaults to graph order)

    Returns:
        Components in the order they complete (reverse topological order)
    """
    index_of: Dict[str, int] = {}
    low_link: Dict[str, int] = {}
    on_stack: Set[str] = set()
    stack: List[str] = []
    components: List[List[str]] = []
    counter = 0

    for root in nodes if nodes is not None else graph:
        if root in index_of:
            continue

        # Each frame: (node, iterator position over its successors)
        work = [(root, 0)]
        index_of[root] = low_link[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)

        while work:
            node, position = work[-1]
            successors = [target for target in graph.get(node, []) if target in graph]

            if position < len(successors):
                work[-1] = (node, position + 1)
                target = successors[position]
                if target not in index_of:
                    index_of[target] = low_link[target] = counter
                    counter += 1
                    stack.append(target)
                    on_stack.add(target)
                    work.append((target, 0))
                elif target in on_stack:
                    low_link[node] = min(low_link[node], index_of[target])
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                low_link[parent] = min(low_link[parent], low_link[node])

            if low_link[node] == index_of[node]:
                component = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                components.append(component)

    return components


def compute_emission_plan(
    registry: Registry, force_indirect: Iterable[str] = ()
) -> EmissionPlan:
    """
    Compute the ordered, cycle-aware emission plan of a registry.

    Groups are ordered so that dependencies come first. Ties, both between
    independent groups and between members of one cluster, follow the
    registry's insertion order.

    Args:
        registry: Validated registry
        force_indirect: Type names whose references are always indirected

    Returns:
        EmissionPlan

    Raises:
        UnresolvedReferenceError: If the registry is not closed.
    """
    registry.validate()

    graph = build_dependency_graph(registry)
    position = {name: rank for rank, name in enumerate(registry.names())}

    components = strongly_connected_components(graph, registry.names())
    groups: List[EmissionGroup] = []
    component_of: Dict[str, int] = {}
    for component in components:
        members = tuple(sorted(component, key=position.__getitem__))
        cyclic = len(members) > 1 or members[0] in graph[members[0]]
        for member in members:
            component_of[member] = len(groups)
        groups.append(EmissionGroup(members, cyclic))

    # Condensed graph: an edge from a dependency group to each dependent group.
    dependents: Dict[int, Set[int]] = {i: set() for i in range(len(groups))}
    pending: Dict[int, int] = {i: 0 for i in range(len(groups))}
    for name, targets in graph.items():
        source = component_of[name]
        for target in targets:
            dependency = component_of[target]
            if dependency != source and source not in dependents[dependency]:
                dependents[dependency].add(source)
                pending[source] += 1

    ready = [
        (position[groups[i].names[0]], i) for i, count in pending.items() if count == 0
    ]
    heapq.heapify(ready)
    ordered: List[EmissionGroup] = []
    while ready:
        _, current = heapq.heappop(ready)
        ordered.append(groups[current])
        for dependent in dependents[current]:
            pending[dependent] -= 1
            if pending[dependent] == 0:
                heapq.heappush(ready, (position[groups[dependent].names[0]], dependent))

    forced = frozenset(force_indirect)
    for name in sorted(forced):
        if name not in registry:
            logger.warning("Forced indirection names unknown type: %s", name)

    cyclic_count = sum(1 for group in ordered if group.cyclic)
    logger.debug(
        "Emission plan: %d types in %d groups (%d cyclic)",
        len(registry),
        len(ordered),
        cyclic_count,
    )
    return EmissionPlan(groups=ordered, dependencies=graph, forced_indirect=forced)
