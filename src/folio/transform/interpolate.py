"""Path interpolation — resolve ``{dotted.field}`` templates against a record.

``/{category.name}/{slug}`` applied to a post record yields
``/news/hello-world``.  A placeholder that resolves to a missing or falsy
value raises :class:`~folio._errors.MissingFieldError`; the page reducer
catches it and drops the record.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from folio._errors import MissingFieldError

_PLACEHOLDER = re.compile(r"\{(.+?)\}", re.DOTALL)


def resolve_field(record: Any, dotted_path: str) -> Any:
    """Walk *dotted_path* through nested mappings and sequences.

    Integer segments index into lists (``authors.0.name``).  Returns None as
    soon as a step is missing.
    """
    value = record
    for segment in dotted_path.split("."):
        if isinstance(value, Mapping):
            if segment not in value:
                return None
            value = value[segment]
        elif isinstance(value, Sequence) and not isinstance(value, str):
            try:
                value = value[int(segment)]
            except (ValueError, IndexError):
                return None
        else:
            return None
    return value


def _stringify(value: Any) -> str:
    # Booleans render as in the records' JSON source
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def interpolate_path(template: str, record: Any) -> str:
    """Resolve every placeholder of *template* against *record*.

    Resolved values are stripped of leading and trailing ``/`` before
    substitution.  The result always starts with ``/``.

    Raises:
        MissingFieldError: If a placeholder resolves to a missing or falsy value.

    """

    def _substitute(match: re.Match[str]) -> str:
        field = match.group(1)
        value = resolve_field(record, field)
        if not value:
            raise MissingFieldError(field, record)
        return _stringify(value).strip("/")

    path = _PLACEHOLDER.sub(_substitute, template)
    if not path.startswith("/"):
        path = "/" + path
    return path
