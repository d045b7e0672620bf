"""Declarative rules — predicates and page/prop definitions as data.

Rules come from trusted configuration, either as ordinary Python callables or
as small tagged structures that are interpreted here.  Nothing is compiled
from text.

Config shapes accepted by :func:`parse_predicate`::

    {"field": "__metadata.modelName", "op": "eq", "value": "post"}
    {"all": [<predicate>, ...]}
    {"any": [<predicate>, ...]}
    {"not": <predicate>}
    {"modelName": "post", "source": "contentful"}     # metadata shorthand

A string ``"module:attr"`` anywhere a custom function is allowed resolves to
that attribute, loaded from ``<root>/module.py`` or imported by name.
"""

from __future__ import annotations

import importlib
import importlib.util
import sys
from collections.abc import Callable, Collection, Container, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from folio._errors import ConfigError
from folio.transform.interpolate import resolve_field
from folio.transform.pages import DEFAULT_PATH_TEMPLATE, PageTypeDefinition
from folio.transform.props import PropDefinition

if TYPE_CHECKING:
    from folio._types import ContentObject, Predicate

type Operator = Literal["eq", "ne", "in", "not_in", "contains", "exists", "truthy"]

_OPERATORS: frozenset[str] = frozenset(
    {"eq", "ne", "in", "not_in", "contains", "exists", "truthy"}
)

METADATA_KEY = "__metadata"

# Shorthand keys that test fields of the metadata block
_METADATA_SHORTHAND: frozenset[str] = frozenset({"modelName", "source"})

# Operators whose value is the collection a field is looked up in
_MEMBERSHIP_OPERATORS: frozenset[str] = frozenset({"in", "not_in"})

_MISSING = object()


# ---------------------------------------------------------------------------
# Predicate structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Condition:
    """Compare one (dotted) field of a record against a literal.

    Attributes:
        field: Dotted field path, e.g. ``__metadata.modelName``.
        op: Comparison operator.
        value: Literal operand (unused by ``exists`` and ``truthy``).

    """

    field: str
    op: Operator = "eq"
    value: Any = None

    def __call__(self, record: ContentObject) -> bool:
        actual = _lookup(record, self.field)
        match self.op:
            case "exists":
                return actual is not _MISSING
            case "truthy":
                return actual is not _MISSING and bool(actual)
        if actual is _MISSING:
            actual = None
        match self.op:
            case "eq":
                return actual == self.value
            case "ne":
                return actual != self.value
            case "in":
                return actual in self.value
            case "not_in":
                return actual not in self.value
            case "contains":
                return isinstance(actual, Container) and self.value in actual
        msg = f"unknown operator {self.op!r}"
        raise ConfigError(msg)


@dataclass(frozen=True, slots=True)
class AllOf:
    """True when every nested predicate holds (True for an empty list)."""

    conditions: tuple[Predicate, ...]

    def __call__(self, record: ContentObject) -> bool:
        return all(condition(record) for condition in self.conditions)


@dataclass(frozen=True, slots=True)
class AnyOf:
    """True when at least one nested predicate holds."""

    conditions: tuple[Predicate, ...]

    def __call__(self, record: ContentObject) -> bool:
        return any(condition(record) for condition in self.conditions)


@dataclass(frozen=True, slots=True)
class Not:
    """Negate a predicate."""

    condition: Predicate

    def __call__(self, record: ContentObject) -> bool:
        return not self.condition(record)


def model_predicate(model_name: str | None = None, source: str | None = None) -> AllOf:
    """Match records by metadata model name and/or source."""
    conditions: list[Predicate] = []
    if model_name:
        conditions.append(Condition(f"{METADATA_KEY}.modelName", "eq", model_name))
    if source:
        conditions.append(Condition(f"{METADATA_KEY}.source", "eq", source))
    return AllOf(tuple(conditions))


def _lookup(record: Any, dotted_path: str) -> Any:
    """Like resolve_field, but tells a missing key apart from a None value."""
    head, _, tail = dotted_path.rpartition(".")
    parent = resolve_field(record, head) if head else record
    if isinstance(parent, Mapping):
        return parent.get(tail, _MISSING)
    if isinstance(parent, Sequence) and not isinstance(parent, str):
        try:
            return parent[int(tail)]
        except (ValueError, IndexError):
            return _MISSING
    return _MISSING


# ---------------------------------------------------------------------------
# Parsing from configuration data
# ---------------------------------------------------------------------------


def parse_predicate(raw: Any) -> Predicate:
    """Build a predicate from configuration data.

    Raises:
        ConfigError: If *raw* is not a recognised predicate shape.

    """
    if callable(raw):
        return raw
    if not isinstance(raw, Mapping):
        msg = f"predicate must be a mapping or callable, got {type(raw).__name__}"
        raise ConfigError(msg)

    if "field" in raw:
        op = raw.get("op", "eq")
        if op not in _OPERATORS:
            msg = f"unknown operator {op!r} (expected one of {sorted(_OPERATORS)})"
            raise ConfigError(msg)
        _check_operand(raw, op)
        return Condition(field=str(raw["field"]), op=op, value=raw.get("value"))
    if "all" in raw:
        return AllOf(tuple(parse_predicate(item) for item in _as_list(raw["all"], "all")))
    if "any" in raw:
        return AnyOf(tuple(parse_predicate(item) for item in _as_list(raw["any"], "any")))
    if "not" in raw:
        return Not(parse_predicate(raw["not"]))

    unknown = set(raw) - _METADATA_SHORTHAND
    if unknown or not raw:
        msg = f"unrecognised predicate keys: {sorted(unknown) or '{}'}"
        raise ConfigError(msg)
    return model_predicate(raw.get("modelName"), raw.get("source"))


def parse_props(raw: Any, root: Path | None = None) -> Mapping[str, PropDefinition] | Callable[..., Any] | None:
    """Build a prop map (or resolve a custom props function) from config data."""
    if raw is None or callable(raw):
        return raw
    if isinstance(raw, str):
        return resolve_callable(raw, root)
    if not isinstance(raw, Mapping):
        msg = f"props must be a mapping, a callable or 'module:attr', got {type(raw).__name__}"
        raise ConfigError(msg)

    props: dict[str, PropDefinition] = {}
    for name, definition in raw.items():
        if isinstance(definition, PropDefinition):
            props[name] = definition
            continue
        if not isinstance(definition, Mapping) or "predicate" not in definition:
            msg = f"prop {name!r} needs a 'predicate'"
            raise ConfigError(msg)
        props[name] = PropDefinition(
            predicate=parse_predicate(definition["predicate"]),
            single=bool(definition.get("single", False)),
        )
    return props


def parse_pages(raw: Any, root: Path | None = None) -> list[PageTypeDefinition] | Callable[..., Any] | None:
    """Build page-type definitions (or resolve a custom pages function)."""
    if raw is None or callable(raw):
        return raw
    if isinstance(raw, str):
        return resolve_callable(raw, root)

    pages: list[PageTypeDefinition] = []
    for index, definition in enumerate(_as_list(raw, "pages")):
        if isinstance(definition, PageTypeDefinition):
            pages.append(definition)
            continue
        if not isinstance(definition, Mapping) or "predicate" not in definition:
            msg = f"page type #{index} needs a 'predicate'"
            raise ConfigError(msg)
        pages.append(
            PageTypeDefinition(
                predicate=parse_predicate(definition["predicate"]),
                path=str(definition.get("path") or DEFAULT_PATH_TEMPLATE),
                props=parse_props(definition.get("props"), root),
            )
        )
    return pages


def resolve_callable(spec: str, root: Path | None = None) -> Callable[..., Any]:
    """Resolve a ``module:attr`` reference to a callable.

    ``module`` is looked up as ``<root>/module.py`` first, then imported by
    name.

    Raises:
        ConfigError: If the module or attribute cannot be found, or is not callable.

    """
    module_part, _, attr = spec.partition(":")
    if not module_part or not attr:
        msg = f"{spec!r}: expected 'module:attr'"
        raise ConfigError(msg)

    py_file = (root / f"{module_part.replace('.', '/')}.py") if root is not None else None
    if py_file is not None and py_file.is_file():
        module_name = f"folio_rules_{module_part.replace('.', '_')}"
        spec_obj = importlib.util.spec_from_file_location(module_name, py_file)
        if spec_obj is None or spec_obj.loader is None:
            msg = f"{spec!r}: failed to load {py_file}"
            raise ConfigError(msg)
        module = importlib.util.module_from_spec(spec_obj)
        sys.modules[module_name] = module
        try:
            spec_obj.loader.exec_module(module)
        except Exception as exc:
            del sys.modules[module_name]
            msg = f"{spec!r}: error loading {py_file}: {exc}"
            raise ConfigError(msg) from exc
    else:
        try:
            module = importlib.import_module(module_part)
        except ImportError as exc:
            msg = f"{spec!r}: cannot import {module_part!r}"
            raise ConfigError(msg) from exc

    callable_obj = getattr(module, attr, None)
    if not callable(callable_obj):
        msg = f"{spec!r}: {attr} not callable in {module_part}"
        raise ConfigError(msg)
    return callable_obj


def _check_operand(raw: Mapping[str, Any], op: str) -> None:
    """Reject membership conditions whose operand cannot be tested against."""
    field_name = raw["field"]
    if op in _MEMBERSHIP_OPERATORS:
        value = raw.get("value")
        if not isinstance(value, Collection) or isinstance(value, str | bytes):
            msg = f"condition on {field_name!r}: {op!r} needs a list 'value', got {type(value).__name__}"
            raise ConfigError(msg)
    elif op == "contains" and raw.get("value") is None:
        msg = f"condition on {field_name!r}: 'contains' needs a 'value'"
        raise ConfigError(msg)


def _as_list(raw: Any, what: str) -> list[Any]:
    if isinstance(raw, Sequence) and not isinstance(raw, str | bytes):
        return list(raw)
    msg = f"{what!r} must be a list, got {type(raw).__name__}"
    raise ConfigError(msg)
