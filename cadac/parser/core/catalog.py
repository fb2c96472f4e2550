"""
Model catalog: discovery and parsing of every model of a project.
"""

import logging
import threading
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any

from cadac.exceptions import CadacError, DuplicateModelError, ModelIdentityError

from ..analysis.dependency_graph import DependencyGraph
from ..parsers.sql_parser import SQLParser
from ..processing.file_discovery import FileDiscovery, read_source
from ..shared.constants import DEFAULT_PARSE_WORKERS
from ..shared.types import FilePath, ModelFailure, ModelIdentity, ModelMetadata

logger = logging.getLogger(__name__)


class ModelCatalog:
    """
    The parsed models of a project, keyed by qualified name.

    Files that could not be identified, read or parsed are kept apart in
    `failures`; they never prevent the other models from being cataloged.
    """

    def __init__(
        self,
        root: FilePath,
        models: dict[str, ModelMetadata] | None = None,
        failures: list[ModelFailure] | None = None,
    ):
        self.root = Path(root)
        self.models: dict[str, ModelMetadata] = dict(sorted((models or {}).items()))
        self.failures: list[ModelFailure] = sorted(
            failures or [], key=lambda f: str(f.file_path)
        )
        self._graph: DependencyGraph | None = None

    @classmethod
    def discover(
        cls, root: FilePath, max_workers: int | None = None, dialect: str | None = None
    ) -> "ModelCatalog":
        """
        Discover and parse every SQL file below a models root.

        Args:
            root: Path to the models folder
            max_workers: Size of the parsing thread pool
            dialect: sqlglot dialect used to read the models

        Returns:
            The populated catalog

        Raises:
            DiscoveryError: If the root cannot be listed
            DuplicateModelError: If two files resolve to the same qualified name
        """
        root = Path(root)
        files = FileDiscovery(root).discover_sql_files()
        return cls._build(root, [(path, None) for path in files], max_workers, dialect)

    @classmethod
    def from_sources(
        cls,
        root: FilePath,
        sources: Iterable[tuple[FilePath, str]],
        max_workers: int | None = None,
        dialect: str | None = None,
    ) -> "ModelCatalog":
        """
        Build a catalog from in-memory (path, sql) pairs.

        Raises:
            DuplicateModelError: If two paths resolve to the same qualified name
        """
        items = [(Path(path), sql) for path, sql in sources]
        return cls._build(Path(root), items, max_workers, dialect)

    @classmethod
    def _build(
        cls,
        root: Path,
        items: list[tuple[Path, str | None]],
        max_workers: int | None,
        dialect: str | None,
    ) -> "ModelCatalog":
        failures: list[ModelFailure] = []
        identified: list[tuple[ModelIdentity, str | None]] = []
        seen: dict[str, Path] = {}

        # Identities first, so duplicates are reported before any parsing
        for path, sql in items:
            try:
                identity = ModelIdentity.from_path(path, root)
            except ModelIdentityError as e:
                logger.warning(f"Skipping {path}: {e}")
                failures.append(ModelFailure(file_path=path, error=e))
                continue

            if identity.qualified_name in seen:
                raise DuplicateModelError(identity.qualified_name, [seen[identity.qualified_name], path])
            seen[identity.qualified_name] = path
            identified.append((identity, sql))

        parser = SQLParser(dialect=dialect)
        models: dict[str, ModelMetadata] = {}
        lock = threading.Lock()

        def parse_one(identity: ModelIdentity, sql: str | None) -> None:
            try:
                content = read_source(identity.file_path) if sql is None else sql
                metadata = parser.parse(content, identity=identity)
            except CadacError as e:
                logger.warning(f"Failed to parse {identity.qualified_name}: {e}")
                with lock:
                    failures.append(
                        ModelFailure(
                            file_path=identity.file_path,
                            error=e,
                            qualified_name=identity.qualified_name,
                        )
                    )
                return

            with lock:
                models[identity.qualified_name] = metadata

        if identified:
            workers = max_workers or min(DEFAULT_PARSE_WORKERS, len(identified))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="cadac-parse") as executor:
                futures = [executor.submit(parse_one, identity, sql) for identity, sql in identified]
                for future in as_completed(futures):
                    future.result()

        catalog = cls(root, models, failures)
        logger.info(
            f"Cataloged {len(catalog.models)} models from {root}"
            + (f" ({len(catalog.failures)} failed)" if catalog.failures else "")
        )
        return catalog

    def __contains__(self, qualified_name: object) -> bool:
        return qualified_name in self.models

    def __getitem__(self, qualified_name: str) -> ModelMetadata:
        return self.models[qualified_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.models)

    def __len__(self) -> int:
        return len(self.models)

    def get(self, qualified_name: str) -> ModelMetadata | None:
        return self.models.get(qualified_name)

    def names(self) -> list[str]:
        """Qualified names of all cataloged models, sorted."""
        return list(self.models)

    def identities(self) -> list[ModelIdentity]:
        return [m.identity for m in self.models.values() if m.identity is not None]

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    @property
    def graph(self) -> DependencyGraph:
        """The dependency graph of the catalog, built on first access."""
        if self._graph is None:
            self._graph = self.build_graph()
        return self._graph

    def build_graph(self) -> DependencyGraph:
        """
        Build the dependency graph of the cataloged models.

        Raises:
            CycleError: If the models depend on each other in a cycle
        """
        return DependencyGraph.build(self)

    def to_dict(self) -> dict[str, Any]:
        """Plain representation used by the JSON and YAML exports."""
        return {
            "root": str(self.root),
            "models": {name: metadata.to_dict() for name, metadata in self.models.items()},
            "failures": [
                {
                    "file_path": str(f.file_path),
                    "qualified_name": f.qualified_name,
                    "error": str(f.error),
                }
                for f in self.failures
            ],
        }


def discover(
    root: FilePath, max_workers: int | None = None, dialect: str | None = None
) -> ModelCatalog:
    """Discover and parse every SQL file below a models root."""
    return ModelCatalog.discover(root, max_workers=max_workers, dialect=dialect)
