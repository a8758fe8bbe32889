"""
Shared pytest fixtures and configuration for stepkit tests.

This module provides:
- Settings and structlog reset fixtures for test isolation
- A ``make_step`` factory so every test declares fields on a fresh step type

Usage:
    def test_something(make_step):
        Payment = make_step("Payment")
        Payment.receive("amount", currency="USD")
"""

import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import structlog

# Ensure stepkit package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from stepkit import Step
from stepkit.core.logging import clear_context
from stepkit.core.settings import reset_settings


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings_fixture() -> Generator[None, None, None]:
    """Drop cached settings before and after each test."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def clean_structlog_fixture() -> Generator[None, None, None]:
    """Undo any structlog configuration or bound context a test left behind."""
    yield
    clear_context()
    structlog.reset_defaults()


# =============================================================================
# Step Factories
# =============================================================================


@pytest.fixture
def make_step() -> Callable[..., type[Step]]:
    """Factory for fresh step types, so declarations never leak between tests."""

    def _make(name: str = "Sample", base: type[Step] = Step) -> type[Step]:
        return type(name, (base,), {})

    return _make
