"""
Dependency graph building and analysis functionality.

Edges point from a producer to its consumer: an edge u -> v means that model u
must be materialized before model v.
"""

import logging
from collections import deque
from collections.abc import Iterable
from graphlib import CycleError as GraphlibCycleError
from graphlib import TopologicalSorter
from typing import TYPE_CHECKING, Any

from cadac.exceptions import CycleError, ModelNotFoundError

from .reference_resolver import InternalModel, ReferenceResolver

if TYPE_CHECKING:
    from ..core.catalog import ModelCatalog

logger = logging.getLogger(__name__)


class DependencyGraph:
    """Directed acyclic graph of the models of a project."""

    def __init__(self):
        # node -> direct upstream models
        self._dependencies: dict[str, set[str]] = {}
        # node -> direct downstream models
        self._dependents: dict[str, set[str]] = {}

    @classmethod
    def build(cls, catalog: "ModelCatalog") -> "DependencyGraph":
        """
        Build the dependency graph of every model in a catalog.

        Args:
            catalog: The model catalog

        Returns:
            The dependency graph

        Raises:
            CycleError: If the models depend on each other in a cycle
        """
        graph = cls()
        resolver = ReferenceResolver(catalog)

        for name in catalog.names():
            graph.add_model(name)

        for name in catalog.names():
            metadata = catalog[name]
            for dependency in resolver.resolve_model(metadata):
                if not isinstance(dependency, InternalModel):
                    continue
                if dependency.qualified_name == name:
                    logger.warning(f"Model {name} references itself, ignoring the self-reference")
                    continue
                graph.add_dependency(dependency.qualified_name, name)

        cycle = graph.find_cycle()
        if cycle:
            raise CycleError(cycle)

        logger.debug(
            f"Built dependency graph with {graph.model_count} models "
            f"and {graph.dependency_count} dependencies"
        )
        return graph

    def add_model(self, name: str) -> None:
        """Add a model without dependencies (no-op if present)."""
        self._dependencies.setdefault(name, set())
        self._dependents.setdefault(name, set())

    def add_dependency(self, upstream: str, downstream: str) -> None:
        """Record that `upstream` must run before `downstream`."""
        self.add_model(upstream)
        self.add_model(downstream)
        self._dependencies[downstream].add(upstream)
        self._dependents[upstream].add(downstream)

    @property
    def models(self) -> list[str]:
        return sorted(self._dependencies)

    @property
    def edges(self) -> list[tuple[str, str]]:
        """All (upstream, downstream) pairs, sorted."""
        return sorted(
            (upstream, downstream)
            for downstream, upstreams in self._dependencies.items()
            for upstream in upstreams
        )

    @property
    def model_count(self) -> int:
        return len(self._dependencies)

    @property
    def dependency_count(self) -> int:
        return sum(len(upstreams) for upstreams in self._dependencies.values())

    def __contains__(self, name: object) -> bool:
        return name in self._dependencies

    def dependencies(self, model: str) -> list[str]:
        """Direct upstream models of a model."""
        self._require(model)
        return sorted(self._dependencies[model])

    def dependents(self, model: str) -> list[str]:
        """Direct downstream models of a model."""
        self._require(model)
        return sorted(self._dependents[model])

    def upstream(self, model: str) -> set[str]:
        """All models the given model transitively depends on."""
        self._require(model)
        return self._reachable(model, self._dependencies)

    def downstream(self, model: str) -> set[str]:
        """All models that transitively depend on the given model."""
        self._require(model)
        return self._reachable(model, self._dependents)

    def execution_order(
        self, subset: Iterable[str] | None = None, include_upstream: bool = True
    ) -> list[str]:
        """
        Compute the order in which models must be materialized.

        Ready models are released in lexicographic order, so the result is
        deterministic for a given graph. Restricting the order to a subset keeps
        the relative order of the full graph, so constraints that pass through
        excluded models still hold.

        Args:
            subset: Models to order (all models when None)
            include_upstream: Whether to add every upstream model of the subset

        Returns:
            List of qualified names, producers before consumers

        Raises:
            ModelNotFoundError: If the subset names an unknown model
            CycleError: If the graph contains a cycle
        """
        full_order = self._topological_order()
        if subset is None:
            return full_order

        selected: set[str] = set()
        for name in subset:
            self._require(name)
            selected.add(name)
            if include_upstream:
                selected |= self._reachable(name, self._dependencies)

        return [name for name in full_order if name in selected]

    def has_cycle(self) -> bool:
        return self.find_cycle() is not None

    def find_cycle(self) -> list[str] | None:
        """
        Find one cycle of the graph.

        The search keeps an explicit stack, so arbitrarily long dependency
        chains are walked without recursion.

        Returns:
            The cycle as qualified names following edge direction, starting at
            its lexicographically smallest member, or None for an acyclic graph
        """
        visiting: set[str] = set()
        visited: set[str] = set()

        for root in self.models:
            if root in visited:
                continue
            path = [root]
            visiting.add(root)
            pending = [iter(sorted(self._dependents[root]))]

            while pending:
                for neighbour in pending[-1]:
                    if neighbour in visiting:
                        cycle = path[path.index(neighbour) :]
                        start = cycle.index(min(cycle))
                        return cycle[start:] + cycle[:start]
                    if neighbour not in visited:
                        visiting.add(neighbour)
                        path.append(neighbour)
                        pending.append(iter(sorted(self._dependents[neighbour])))
                        break
                else:
                    done = path.pop()
                    visiting.discard(done)
                    visited.add(done)
                    pending.pop()
        return None

    def to_dict(self) -> dict[str, Any]:
        """Plain representation of the graph for export."""
        cycle = self.find_cycle()
        return {
            "nodes": self.models,
            "edges": [list(edge) for edge in self.edges],
            "dependencies": {node: sorted(deps) for node, deps in sorted(self._dependencies.items())},
            "dependents": {node: sorted(deps) for node, deps in sorted(self._dependents.items())},
            "execution_order": [] if cycle else self._topological_order(),
            "cycles": [cycle] if cycle else [],
        }

    def _topological_order(self) -> list[str]:
        sorter = TopologicalSorter()
        for node, upstreams in self._dependencies.items():
            sorter.add(node, *upstreams)

        try:
            sorter.prepare()
        except GraphlibCycleError as e:
            raise CycleError(self.find_cycle() or list(e.args[1])) from e

        order = []
        while sorter.is_active():
            ready = sorted(sorter.get_ready())
            order.extend(ready)
            sorter.done(*ready)
        return order

    def _require(self, model: str) -> None:
        if model not in self._dependencies:
            raise ModelNotFoundError(model, available=list(self._dependencies))

    @staticmethod
    def _reachable(start: str, adjacency: dict[str, set[str]]) -> set[str]:
        seen: set[str] = set()
        queue = deque(adjacency[start])
        while queue:
            node = queue.popleft()
            if node in seen:
                continue
            seen.add(node)
            queue.extend(adjacency[node])
        seen.discard(start)
        return seen
