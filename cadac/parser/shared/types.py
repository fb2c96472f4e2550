"""
Common type definitions for the parser module.
"""

from dataclasses import dataclass, field
from pathlib import Path

from cadac.exceptions import ModelIdentityError

# File paths
FilePath = str | Path

# Character offsets of a reference in the SQL text
SourceSpan = tuple[int, int]


@dataclass(frozen=True)
class ModelIdentity:
    """Location-derived identity of a model."""

    file_path: Path
    table_name: str
    schema_name: str

    @property
    def qualified_name(self) -> str:
        return f"{self.schema_name}.{self.table_name}"

    @classmethod
    def from_path(cls, file_path: FilePath, models_root: FilePath) -> "ModelIdentity":
        """
        Derive the identity of a model from its location below the models root.

        The schema is the first directory below the root regardless of deeper
        nesting, and the table is the file name without its extension:

        - models/bronze/users.sql -> bronze.users
        - models/test/users/deeper/user_model.sql -> test.user_model

        Args:
            file_path: Path to the SQL file
            models_root: Path to the models folder

        Returns:
            ModelIdentity for the file

        Raises:
            ModelIdentityError: If the file is outside the root or has no schema folder
        """
        file_path = Path(file_path)
        try:
            relative_path = file_path.relative_to(Path(models_root))
        except ValueError as e:
            raise ModelIdentityError(
                f"File path {file_path} is not within models root {models_root}",
                file_path=file_path,
            ) from e

        if len(relative_path.parts) < 2:
            raise ModelIdentityError(
                f"Cannot extract schema from path {relative_path}: models must live in "
                f"a schema folder (<models_root>/<schema>/<table>.sql)",
                file_path=file_path,
            )

        return cls(
            file_path=file_path,
            table_name=file_path.stem,
            schema_name=relative_path.parts[0],
        )


@dataclass(frozen=True)
class RawReference:
    """A table reference taken verbatim from a FROM or JOIN clause."""

    name: str
    schema: str | None = None
    database: str | None = None
    span: SourceSpan | None = field(default=None, compare=False)

    @property
    def parts(self) -> int:
        """Number of name parts (1 for `table`, 3 for `db.schema.table`)."""
        if self.database:
            return 3
        if self.schema:
            return 2
        return 1

    @property
    def qualified(self) -> str:
        return ".".join(p for p in (self.database, self.schema, self.name) if p)

    def __str__(self) -> str:
        return self.qualified


@dataclass(frozen=True)
class ColumnMetadata:
    """A column of the top-level select list."""

    name: str
    position: int
    alias: str | None = None
    description: str | None = None
    source: str | None = None

    @property
    def output_name(self) -> str:
        return self.alias or self.name


@dataclass(frozen=True)
class ModelMetadata:
    """Structural summary of a single model."""

    sql: str
    columns: tuple[ColumnMetadata, ...] = ()
    sources: tuple[RawReference, ...] = ()
    description: str | None = None
    identity: ModelIdentity | None = None
    aliases: dict[str, RawReference] = field(default_factory=dict, compare=False)
    ctes: frozenset[str] = frozenset()
    sql_hash: str = ""

    @property
    def qualified_name(self) -> str | None:
        return self.identity.qualified_name if self.identity else None

    def to_dict(self) -> dict:
        """Plain representation used by the JSON and YAML exports."""
        return {
            "qualified_name": self.qualified_name,
            "file_path": str(self.identity.file_path) if self.identity else None,
            "description": self.description,
            "columns": [
                {
                    "name": c.name,
                    "alias": c.alias,
                    "description": c.description,
                    "position": c.position,
                    "source": c.source,
                }
                for c in self.columns
            ],
            "sources": [s.qualified for s in self.sources],
            "sql_hash": self.sql_hash,
        }


@dataclass(frozen=True)
class ModelFailure:
    """A file that could not be identified, read or parsed during discovery."""

    file_path: Path
    error: Exception
    qualified_name: str | None = None

    def __str__(self) -> str:
        return f"{self.qualified_name or self.file_path}: {self.error}"
