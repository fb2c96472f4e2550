"""
Pytest configuration and shared fixtures for cadac tests.
"""

import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def temp_project_dir():
    """Create a temporary project directory with an empty models folder."""
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir_path = Path(tmpdir)
        (tmpdir_path / "models").mkdir()
        yield tmpdir_path


@pytest.fixture
def models_dir(temp_project_dir) -> Path:
    """The models folder of the temporary project."""
    return temp_project_dir / "models"


@pytest.fixture
def write_models(models_dir) -> Callable[[dict[str, str]], Path]:
    """Write model files below the models folder, keyed by relative path."""

    def _write(models: dict[str, str]) -> Path:
        for relative_path, sql in models.items():
            path = models_dir / relative_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(sql, encoding="utf-8")
        return models_dir

    return _write


@pytest.fixture
def sample_models() -> dict[str, str]:
    """A small project: two staging models feeding one mart."""
    return {
        "staging/customers.sql": "-- Cleaned customers\nSELECT id, name FROM raw.customers\n",
        "staging/orders.sql": (
            "SELECT o.id, o.customer_id, o.amount\nFROM raw.orders AS o\nWHERE o.amount > 0\n"
        ),
        "marts/revenue.sql": (
            "-- Revenue per customer\n"
            "SELECT\n"
            "    c.name, -- Customer name\n"
            "    SUM(o.amount) AS revenue\n"
            "FROM staging.orders o\n"
            "JOIN staging.customers c ON c.id = o.customer_id\n"
            "GROUP BY c.name\n"
        ),
    }


# Pytest configuration
def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
