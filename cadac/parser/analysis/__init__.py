"""
Reference resolution and dependency analysis.
"""

from .dependency_graph import DependencyGraph
from .reference_resolver import (
    ExternalTable,
    InternalModel,
    ReferenceResolver,
    ResolvedDependency,
    resolve,
)

__all__ = [
    "DependencyGraph",
    "ExternalTable",
    "InternalModel",
    "ReferenceResolver",
    "ResolvedDependency",
    "resolve",
]
