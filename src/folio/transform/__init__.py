"""Data transformer — reduce content records into a page/props snapshot.

The transform is pure: the same records and rules always produce the same
snapshot, and nothing is written or broadcast here.  Persistence and change
notification live in :mod:`folio.store` and :mod:`folio.live`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from folio.transform.interpolate import interpolate_path, resolve_field
from folio.transform.pages import PageTypeDefinition, reduce_pages
from folio.transform.props import PropDefinition, reduce_props

if TYPE_CHECKING:
    from collections.abc import Sequence

    from folio._types import ContentObject, PageDescriptor
    from folio.config import PagesSpec, PropsSpec
    from folio.transform.pages import DropHandler


@dataclass(frozen=True, slots=True)
class Snapshot:
    """The complete output of one transform cycle.

    Attributes:
        props: Shared props available to every page.
        pages: Page descriptors in production order (duplicates kept).

    """

    props: dict[str, Any] = field(default_factory=dict)
    pages: list[PageDescriptor] = field(default_factory=list)

    @property
    def paths(self) -> list[str]:
        """Page paths in order, duplicates included."""
        return [page["path"] for page in self.pages]

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready ``{"props": ..., "pages": ...}`` mapping."""
        return {"props": self.props, "pages": self.pages}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Snapshot:
        """Rebuild a snapshot from its JSON mapping."""
        return cls(props=dict(data.get("props") or {}), pages=list(data.get("pages") or []))


def transform(
    records: Sequence[ContentObject],
    *,
    common_props: PropsSpec | None = None,
    pages: PagesSpec | None = None,
    on_drop: DropHandler | None = None,
) -> Snapshot:
    """Reduce *records* into a fresh :class:`Snapshot`."""
    return Snapshot(
        props=reduce_props(common_props, records),
        pages=reduce_pages(pages, records, on_drop=on_drop),
    )


__all__ = [
    "PageTypeDefinition",
    "PropDefinition",
    "Snapshot",
    "interpolate_path",
    "reduce_pages",
    "reduce_props",
    "resolve_field",
    "transform",
]
