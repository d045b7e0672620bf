"""Props reducer — select content records into a named props mapping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from folio._types import ContentObject, Predicate, PropsFunc


@dataclass(frozen=True, slots=True)
class PropDefinition:
    """How one named prop is selected from the record set.

    Attributes:
        predicate: Test applied to each record, in input order.
        single: Select the first matching record (None when nothing matches)
            instead of the list of all matches.

    """

    predicate: Predicate
    single: bool = False


def select(definition: PropDefinition, records: Sequence[ContentObject]) -> Any:
    """Apply one prop definition to *records*."""
    if definition.single:
        return next((record for record in records if definition.predicate(record)), None)
    return [record for record in records if definition.predicate(record)]


def reduce_props(
    spec: Mapping[str, PropDefinition] | PropsFunc | None,
    records: Sequence[ContentObject],
) -> dict[str, Any]:
    """Build a props mapping from *records*.

    *spec* is either a mapping of prop name to :class:`PropDefinition` or a
    custom function ``records -> props``.  Exceptions raised by predicates or
    by the custom function propagate to the caller.
    """
    if spec is None:
        return {}
    if callable(spec):
        return dict(spec(records))
    return {name: select(definition, records) for name, definition in spec.items()}
