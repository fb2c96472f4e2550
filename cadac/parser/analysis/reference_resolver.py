"""
Resolution of raw table references against the model catalog.
"""

import logging
from collections.abc import Container
from dataclasses import dataclass

from ..shared.types import ModelIdentity, ModelMetadata, RawReference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InternalModel:
    """A reference that points at another model of the project."""

    qualified_name: str

    def __str__(self) -> str:
        return self.qualified_name


@dataclass(frozen=True)
class ExternalTable:
    """A reference to a table the project does not define."""

    reference: RawReference

    @property
    def qualified_name(self) -> str:
        return self.reference.qualified

    def __str__(self) -> str:
        return self.qualified_name


ResolvedDependency = InternalModel | ExternalTable


def resolve(
    raw_reference: RawReference, current_identity: ModelIdentity, catalog: Container[str]
) -> ResolvedDependency:
    """
    Classify a table reference as internal or external.

    - db.schema.table is always external; cross-database refs never name a model.
    - schema.table is internal when that model exists.
    - table is looked up in the schema of the referencing model only.

    Args:
        raw_reference: Reference taken from the model SQL
        current_identity: Identity of the model that holds the reference
        catalog: Anything answering `qualified_name in catalog`

    Returns:
        InternalModel or ExternalTable
    """
    if raw_reference.database:
        return ExternalTable(raw_reference)

    if raw_reference.schema:
        candidate = f"{raw_reference.schema}.{raw_reference.name}"
    else:
        candidate = f"{current_identity.schema_name}.{raw_reference.name}"

    if candidate in catalog:
        return InternalModel(candidate)
    return ExternalTable(raw_reference)


class ReferenceResolver:
    """Resolves the references of parsed models against a catalog."""

    def __init__(self, catalog: Container[str]):
        """
        Initialize the resolver.

        Args:
            catalog: The model catalog (or any container of qualified names)
        """
        self.catalog = catalog

    def resolve(self, reference: RawReference, identity: ModelIdentity) -> ResolvedDependency:
        """Resolve one reference made by the model with the given identity."""
        return resolve(reference, identity, self.catalog)

    def resolve_model(self, metadata: ModelMetadata) -> list[ResolvedDependency]:
        """
        Resolve every source of a model, in first-appearance order.

        Raises:
            ValueError: If the metadata carries no identity
        """
        if metadata.identity is None:
            raise ValueError("Cannot resolve references of a model without identity")

        resolved = [self.resolve(ref, metadata.identity) for ref in metadata.sources]
        logger.debug(
            f"Resolved {len(resolved)} references of {metadata.qualified_name}: "
            f"{', '.join(str(r) for r in resolved) or 'none'}"
        )
        return resolved

    def internal_dependencies(self, metadata: ModelMetadata) -> list[str]:
        """Qualified names of the models this model reads from, without duplicates."""
        names = []
        for dependency in self.resolve_model(metadata):
            if isinstance(dependency, InternalModel) and dependency.qualified_name not in names:
                names.append(dependency.qualified_name)
        return names

    @staticmethod
    def substitute_alias(name: str, metadata: ModelMetadata) -> str:
        """
        Map an alias to the table it is bound to.

        Names that are not aliases in the model pass through unchanged.
        """
        reference = metadata.aliases.get(name)
        return reference.qualified if reference else name
