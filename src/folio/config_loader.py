"""Load FolioConfig from folio.yaml / folio.yml / folio.toml if present.

Merges file config with keyword overrides.  Overrides take precedence.
Option names may be written in snake_case or with the camelCase names used
by the content pipeline (``cacheFilePath``, ``liveUpdateWsPort``, ...), at
the top level or under a ``folio:`` section.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

import yaml

from folio._errors import ConfigError
from folio.config import FolioConfig
from folio.rules import parse_pages, parse_props

CONFIG_FILENAMES = ("folio.yaml", "folio.yml", "folio.toml")

_ALIASES: dict[str, str] = {
    "cacheFilePath": "cache_file_path",
    "liveUpdate": "live_update",
    "liveUpdateHost": "live_update_host",
    "liveUpdateWsPort": "live_update_ws_port",
    "liveUpdateWsClientPort": "live_update_ws_client_port",
    "commonProps": "common_props",
    "cacheRetryDelay": "cache_retry_delay",
    "cacheMaxRetries": "cache_max_retries",
}

_FIELDS = frozenset(
    {
        "cache_file_path",
        "live_update",
        "live_update_host",
        "live_update_ws_port",
        "live_update_ws_client_port",
        "common_props",
        "pages",
        "cache_retry_delay",
        "cache_max_retries",
    }
)

_RULE_FIELDS = ("common_props", "pages")


def load_config(root: str | Path, **overrides: Any) -> FolioConfig:
    """Load FolioConfig for *root*, merging its config file with *overrides*.

    Declarative ``common_props`` / ``pages`` data is parsed into rule
    structures; ``"module:attr"`` strings resolve relative to *root*.

    Raises:
        ConfigError: If the config file is unreadable or contains unknown keys
            or malformed rules.

    """
    root = Path(root).resolve()
    merged = _merge(root, overrides)
    merged["common_props"] = parse_props(merged.get("common_props"), root)
    merged["pages"] = parse_pages(merged.get("pages"), root)

    return FolioConfig(root=root, **merged)


def load_consumer_config(root: str | Path, **overrides: Any) -> FolioConfig:
    """Load FolioConfig for a consumer process.

    Same file lookup and overrides as :func:`load_config`, but rule data is
    left out: consumers only read the snapshot, so ``module:attr`` rule files
    are never imported here.
    """
    root = Path(root).resolve()
    merged = _merge(root, overrides)
    for name in _RULE_FIELDS:
        merged.pop(name, None)

    return FolioConfig(root=root, **merged)


def _merge(root: Path, overrides: dict[str, Any]) -> dict[str, Any]:
    merged = {**read_config_file(root), **normalize_keys(overrides)}
    if merged.get("cache_file_path") is not None:
        merged["cache_file_path"] = Path(str(merged["cache_file_path"]))
    return merged


def read_config_file(root: Path) -> dict[str, Any]:
    """Read folio options from the first config file found in *root*."""
    for name in CONFIG_FILENAMES:
        path = root / name
        if path.is_file():
            return normalize_keys(_flatten_folio_section(_parse(path)))
    return {}


def normalize_keys(options: dict[str, Any]) -> dict[str, Any]:
    """Map camelCase option names to FolioConfig fields.

    Raises:
        ConfigError: On an unknown option.

    """
    result: dict[str, Any] = {}
    for key, value in options.items():
        name = _ALIASES.get(key, key)
        if name not in _FIELDS:
            msg = f"unknown folio option {key!r}"
            raise ConfigError(msg)
        result[name] = value
    return result


def _parse(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix == ".toml":
            data = tomllib.loads(text)
        else:
            data = yaml.safe_load(text) or {}
    except (OSError, yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
        msg = f"cannot read {path}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path}: expected a mapping at the top level"
        raise ConfigError(msg)
    return data


def _flatten_folio_section(data: dict[str, Any]) -> dict[str, Any]:
    """Lift ``folio.*`` keys to the top level."""
    section = data.get("folio")
    if section is None:
        return data
    if not isinstance(section, dict):
        msg = "'folio' section must be a mapping"
        raise ConfigError(msg)
    rest = {k: v for k, v in data.items() if k != "folio"}
    return {**rest, **section}
