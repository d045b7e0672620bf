"""Shared test fixtures for folio."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest


@pytest.fixture(autouse=True)
def _production_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test outside development mode unless it opts in."""
    monkeypatch.delenv("FOLIO_ENV", raising=False)


def make_record(
    model: str,
    *,
    source: str = "contentful",
    **fields: Any,
) -> dict[str, Any]:
    """Create a content record with a ``__metadata`` block."""
    return {"__metadata": {"modelName": model, "source": source}, **fields}


@pytest.fixture
def records() -> list[dict[str, Any]]:
    """A small mixed record set: config, two authors, three posts, one page.

    The third post has no category, so templates that use
    ``{category.name}`` drop it.
    """
    return [
        make_record("config", title="My Site"),
        make_record("author", slug="ada", name="Ada"),
        make_record("post", slug="hello-world", title="Hello", category={"name": "news"}),
        make_record("author", slug="grace", name="Grace"),
        make_record("post", slug="second", title="Second", category={"name": "/blog/"}),
        make_record("post", slug="orphan", title="Orphan"),
        make_record("page", slug="about", title="About", source="files"),
    ]


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """An empty project root."""
    root = tmp_path / "site"
    root.mkdir()
    return root
