"""
Base class for model parsers.
"""

from abc import ABC, abstractmethod

from ..shared.hashing import compute_sql_hash
from ..shared.types import FilePath, ModelIdentity, ModelMetadata


class BaseParser(ABC):
    """
    A parser turns the text of one model into ModelMetadata.

    Results are memoized per (location, text) so that re-parsing an unchanged
    file is free.
    """

    def __init__(self):
        self._cache: dict[str, ModelMetadata] = {}

    def clear_cache(self) -> None:
        self._cache.clear()

    @abstractmethod
    def parse(
        self, content: str, file_path: FilePath = None, identity: ModelIdentity | None = None
    ) -> ModelMetadata:
        """
        Extract the metadata of one model.

        Args:
            content: Model source text
            file_path: Where the text came from, used in errors and cache keys
            identity: Identity to attach to the result

        Returns:
            ModelMetadata for the model

        Raises:
            ModelParseError: If the text is not a single valid query
        """
        pass

    def _get_cache_key(self, content: str, file_path: FilePath = None) -> str:
        digest = compute_sql_hash(content)
        return f"{file_path}#{digest}" if file_path else digest

    def _get_from_cache(self, cache_key: str) -> ModelMetadata | None:
        return self._cache.get(cache_key)

    def _set_cache(self, cache_key: str, data: ModelMetadata) -> None:
        self._cache[cache_key] = data
