"""Tests for folio.transform — snapshot orchestration."""

from __future__ import annotations

from typing import Any

from folio.rules import model_predicate
from folio.transform import PageTypeDefinition, PropDefinition, Snapshot, transform


class TestSnapshot:
    """Snapshot — the unit exchanged across the process boundary."""

    def test_defaults_empty(self) -> None:
        snapshot = Snapshot()
        assert snapshot.props == {}
        assert snapshot.pages == []

    def test_to_dict_layout(self) -> None:
        snapshot = Snapshot(props={"a": 1}, pages=[{"path": "/x", "page": {}}])
        assert snapshot.to_dict() == {"props": {"a": 1}, "pages": [{"path": "/x", "page": {}}]}

    def test_from_dict_round_trip(self) -> None:
        data = {"props": {"a": [1, 2]}, "pages": [{"path": "/x", "page": {"slug": "x"}}]}
        assert Snapshot.from_dict(data).to_dict() == data

    def test_from_dict_tolerates_missing_keys(self) -> None:
        assert Snapshot.from_dict({}) == Snapshot()

    def test_paths_keep_duplicates(self) -> None:
        snapshot = Snapshot(pages=[{"path": "/a"}, {"path": "/b"}, {"path": "/a"}])
        assert snapshot.paths == ["/a", "/b", "/a"]


class TestTransform:
    """transform — common props + pages in one pass."""

    def test_empty_config(self, records: list[dict[str, Any]]) -> None:
        assert transform(records) == Snapshot()

    def test_full_snapshot(self, records: list[dict[str, Any]]) -> None:
        snapshot = transform(
            records,
            common_props={"site": PropDefinition(model_predicate("config"), single=True)},
            pages=[
                PageTypeDefinition(model_predicate("post"), path="/posts/{slug}"),
                PageTypeDefinition(model_predicate("page")),
            ],
        )
        assert snapshot.props["site"]["title"] == "My Site"
        assert snapshot.paths == [
            "/posts/hello-world",
            "/posts/second",
            "/posts/orphan",
            "/about",
        ]

    def test_fresh_snapshot_each_call(self, records: list[dict[str, Any]]) -> None:
        pages = [PageTypeDefinition(model_predicate("page"))]
        first = transform(records, pages=pages)
        second = transform(records[:1], pages=pages)
        assert first.paths == ["/about"]
        assert second.paths == []
