"""Records source — load content records from a file and watch it.

The content pipeline normally calls :meth:`folio.producer.Producer.on_data_ready`
directly.  For standalone use (``folio produce``) records come from a JSON or
YAML file holding either a list of records or ``{"objects": [...]}``, and
each change to that file is a new "data ready" event.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from folio._errors import ConfigError

if TYPE_CHECKING:
    import threading
    from collections.abc import Iterator

    from folio._types import ContentObject


def load_records(path: Path) -> list[ContentObject]:
    """Read content records from *path* (``.json``, ``.yaml`` or ``.yml``).

    Raises:
        ConfigError: If the file cannot be parsed or has the wrong shape.

    """
    try:
        text = path.read_text(encoding="utf-8")
        data: Any = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
        msg = f"cannot read records from {path}: {exc}"
        raise ConfigError(msg) from exc

    if isinstance(data, dict):
        data = data.get("objects")
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        msg = f"{path}: expected a list of records or {{'objects': [...]}}"
        raise ConfigError(msg)
    return data


def watch_records(path: Path, stop_event: threading.Event) -> Iterator[list[ContentObject]]:
    """Yield the reloaded record list each time *path* changes.

    Blocks between changes; returns when *stop_event* is set.  A change that
    leaves the file unparsable is reported and skipped so that a half-saved
    edit does not end the watch.
    """
    from watchfiles import watch

    target = path.resolve()
    for raw_changes in watch(target.parent, stop_event=stop_event, debounce=300, step=100):
        if not any(Path(changed).resolve() == target for _, changed in raw_changes):
            continue
        if not target.is_file():
            continue
        try:
            records = load_records(target)
        except ConfigError as exc:
            print(f"  Records error: {exc}", file=sys.stderr)
            continue
        yield records
