"""
Model selection utilities for filtering models by name.

Supports --select and --exclude flags with shell-style wildcards.
"""

from fnmatch import fnmatch


class ModelSelector:
    """Selects models based on name patterns."""

    def __init__(
        self, select_patterns: list[str] | None = None, exclude_patterns: list[str] | None = None
    ) -> None:
        """
        Initialize model selector.

        Args:
            select_patterns: List of selection patterns (e.g., ["staging.*", "orders"])
            exclude_patterns: List of exclusion patterns (e.g., ["*_deprecated"])
        """
        self.select_patterns = select_patterns or []
        self.exclude_patterns = exclude_patterns or []

    @property
    def is_active(self) -> bool:
        return bool(self.select_patterns or self.exclude_patterns)

    def _matches_name(self, model_name: str, patterns: list[str]) -> bool:
        """
        Check if model name matches any of the patterns.

        Patterns match the qualified name or just its table part, ignoring case.

        Args:
            model_name: Qualified name (e.g., "schema.table")
            patterns: List of patterns to match against

        Returns:
            True if model_name matches any pattern
        """
        table_name = model_name.split(".")[-1]
        for pattern in patterns:
            pattern = pattern.lower()
            if fnmatch(model_name.lower(), pattern) or fnmatch(table_name.lower(), pattern):
                return True
        return False

    def is_selected(self, model_name: str) -> bool:
        """
        Determine if a model should be selected.

        Selection logic:
        1. If no select patterns, all models are selected (unless excluded)
        2. Model must match at least one select pattern
        3. Model must not match any exclude pattern
        """
        if self.select_patterns and not self._matches_name(model_name, self.select_patterns):
            return False
        return not self._matches_name(model_name, self.exclude_patterns)

    def filter_models(self, model_names: list[str]) -> list[str]:
        """Keep the selected names, preserving their order."""
        return [name for name in model_names if self.is_selected(name)]
