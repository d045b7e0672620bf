"""Page reducer — turn content records into page descriptors.

Two modes, chosen by the shape of the configuration:

Declarative:
    A sequence of :class:`PageTypeDefinition`.  Each definition filters the
    records with its predicate, interpolates its path template for every
    match, and attaches props computed against the full record set.

Function:
    A callable ``records -> [{"path": template, "page": record, ...}]``.  Each
    returned path is re-interpolated against its ``page``.

In both modes a record whose path cannot be resolved is dropped and the
reduction carries on.  Any other exception propagates.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from folio._errors import MissingFieldError
from folio.transform.interpolate import interpolate_path
from folio.transform.props import reduce_props

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from folio._types import ContentObject, PageDescriptor, PagesFunc, Predicate, PropsFunc
    from folio.transform.props import PropDefinition

    type DropHandler = Callable[[MissingFieldError], None]


DEFAULT_PATH_TEMPLATE = "/{slug}"


@dataclass(frozen=True, slots=True)
class PageTypeDefinition:
    """How one class of content record becomes a page.

    Attributes:
        predicate: Selects the records of this page type.
        path: URL path template with ``{dotted.field}`` placeholders.
        props: Per-page props, as a prop map or a custom props function.

    """

    predicate: Predicate
    path: str = DEFAULT_PATH_TEMPLATE
    props: Mapping[str, PropDefinition] | PropsFunc | None = field(default=None)


def reduce_pages(
    spec: Sequence[PageTypeDefinition] | PagesFunc | None,
    records: Sequence[ContentObject],
    *,
    on_drop: DropHandler | None = None,
) -> list[PageDescriptor]:
    """Build the ordered list of page descriptors for *records*.

    Args:
        spec: Page-type definitions, or a custom page function.
        records: The full content record set.
        on_drop: Called with the error for every dropped record.

    Returns:
        Descriptors in definition order, then record order.  Duplicate
        paths are kept.

    """
    if spec is None:
        return []
    if callable(spec):
        return _reduce_function_pages(spec, records, on_drop)

    pages: list[PageDescriptor] = []
    for definition in spec:
        for record in records:
            if not definition.predicate(record):
                continue
            try:
                path = interpolate_path(definition.path, record)
            except MissingFieldError as exc:
                if on_drop is not None:
                    on_drop(exc)
                continue
            pages.append({
                "path": path,
                "page": record,
                **reduce_props(definition.props, records),
            })
    return pages


def _reduce_function_pages(
    func: PagesFunc,
    records: Sequence[ContentObject],
    on_drop: DropHandler | None,
) -> list[PageDescriptor]:
    """Function mode: re-interpolate each returned path against its page."""
    pages: list[PageDescriptor] = []
    for item in func(records):
        try:
            if not isinstance(item, Mapping) or not isinstance(item.get("path"), str):
                raise MissingFieldError("path", item)
            path = interpolate_path(item["path"], item.get("page"))
        except MissingFieldError as exc:
            if on_drop is not None:
                on_drop(exc)
            continue
        pages.append({**item, "path": path})
    return pages
