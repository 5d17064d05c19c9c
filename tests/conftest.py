"""
Shared pytest fixtures and configuration for taskchain tests.

This module provides:
- Global state cleanup (default registry, cached settings, structlog config)
- Isolated handler registries with the built-in handlers
- An in-memory broker and a worker wired to it

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments:

    def test_something(worker, broker):
        ...
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from taskchain.core.settings import reset_settings
from taskchain.execution.broker import InMemoryBroker
from taskchain.execution.handlers import register_builtin_handlers
from taskchain.execution.registry import HandlerRegistry, reset_default_registry
from taskchain.execution.worker import Worker


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = item.path.relative_to(Path(__file__).parent)

        markers = {mark.name for mark in item.iter_markers()}
        if "integration" in str(test_path) or "cli" in test_path.parts:
            if "integration" not in markers:
                item.add_marker(pytest.mark.integration)
        elif not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Global State Cleanup
# =============================================================================


@pytest.fixture(autouse=True)
def clean_global_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """
    Reset process-wide state before and after each test.

    No test can leak handlers, cached settings or logging configuration into
    the next one.
    """
    monkeypatch.chdir(Path(__file__).parent)
    reset_default_registry()
    reset_settings()
    structlog.contextvars.clear_contextvars()
    yield
    reset_default_registry()
    reset_settings()
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


# =============================================================================
# Worker Fixtures
# =============================================================================


@pytest.fixture
def registry() -> HandlerRegistry:
    """Isolated registry holding the built-in handlers (add, log, fail, ...)."""
    registry = HandlerRegistry()
    register_builtin_handlers(registry)
    return registry


@pytest.fixture
def broker() -> InMemoryBroker:
    return InMemoryBroker()


@pytest.fixture
def worker(registry: HandlerRegistry, broker: InMemoryBroker) -> Worker:
    return Worker(registry, publisher=broker, consumer_tag="test-worker")


class RecordingPublisher:
    """Publisher that remembers what it was given, optionally failing on a name."""

    def __init__(self, fail_on: str | None = None, exc: Exception | None = None):
        self.published = []
        self.fail_on = fail_on
        self.exc = exc

    def publish(self, signature) -> None:
        if signature.name == self.fail_on:
            raise self.exc or RuntimeError("broker unavailable")
        self.published.append(signature)


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def make_publisher() -> type[RecordingPublisher]:
    """``make_publisher(fail_on="alert", exc=...)`` builds a publisher that rejects one name."""
    return RecordingPublisher
