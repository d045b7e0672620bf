"""Shared type definitions for folio."""

from collections.abc import Callable, Mapping, Sequence
from typing import Any

# An upstream content record: a ``__metadata`` block plus arbitrary fields
type ContentObject = dict[str, Any]

# Boolean test over a content record
type Predicate = Callable[[ContentObject], bool]

# Custom aggregation: records -> props mapping
type PropsFunc = Callable[[Sequence[ContentObject]], Mapping[str, Any]]

# Custom page generation: records -> [{"path": ..., "page": ...}, ...]
type PagesFunc = Callable[[Sequence[ContentObject]], Sequence[Mapping[str, Any]]]

# One generated page: {"path": "/...", "page": {...}, **props}
type PageDescriptor = dict[str, Any]
