"""Folio configuration.

FolioConfig is the central configuration object, frozen after creation.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from folio._types import PagesFunc, PropsFunc
    from folio.transform.pages import PageTypeDefinition
    from folio.transform.props import PropDefinition

    type PropsSpec = Mapping[str, PropDefinition] | PropsFunc
    type PagesSpec = Sequence[PageTypeDefinition] | PagesFunc


DEFAULT_CACHE_FILE = ".snapshot-cache.json"
DEFAULT_LIVE_UPDATE_PORT = 8088

# Environment variable that selects development mode (live updates on by default)
ENV_VAR = "FOLIO_ENV"


def is_development() -> bool:
    """Return True when the process runs in development mode."""
    return os.environ.get(ENV_VAR, "").lower() == "development"


@dataclass(frozen=True, slots=True)
class FolioConfig:
    """Configuration for a Folio producer or consumer.

    Attributes:
        root: Project root. Always resolved to an absolute path on construction.
        cache_file_path: Snapshot file location. Relative paths resolve against
            ``root``; ``None`` means ``<root>/.snapshot-cache.json``.
        live_update: Enable push-channel notifications. ``None`` means "on in
            development mode" (``FOLIO_ENV=development``), resolved on construction.
        live_update_host: Bind address for the push-channel server.
        live_update_ws_port: Port the push-channel server listens on.
        live_update_ws_client_port: Port advertised to consumers, for setups
            where the channel is proxied. Falls back to ``live_update_ws_port``.
        common_props: Declarative prop map or custom function for shared props.
        pages: Declarative page-type list or custom function for pages.
        cache_retry_delay: Seconds between checks while the cache file is absent.
        cache_max_retries: Retries before a consumer read gives up.

    """

    root: Path = field(default_factory=Path.cwd)
    cache_file_path: Path | None = None
    live_update: bool | None = None
    live_update_host: str = "127.0.0.1"
    live_update_ws_port: int = DEFAULT_LIVE_UPDATE_PORT
    live_update_ws_client_port: int | None = None
    common_props: PropsSpec | None = None
    pages: PagesSpec | None = None
    cache_retry_delay: float = 0.5
    cache_max_retries: int = 10

    def __post_init__(self) -> None:
        root = Path(self.root)
        if not root.is_absolute():
            root = root.resolve()
        object.__setattr__(self, "root", root)

        if self.cache_file_path is not None and not isinstance(self.cache_file_path, Path):
            object.__setattr__(self, "cache_file_path", Path(self.cache_file_path))

        if self.live_update is None:
            object.__setattr__(self, "live_update", is_development())

    @property
    def cache_path(self) -> Path:
        """Absolute path to the snapshot cache file."""
        if self.cache_file_path is None:
            return self.root / DEFAULT_CACHE_FILE
        if self.cache_file_path.is_absolute():
            return self.cache_file_path
        return self.root / self.cache_file_path

    @property
    def client_port(self) -> int:
        """Push-channel port advertised to consumers."""
        if self.live_update_ws_client_port is not None:
            return self.live_update_ws_client_port
        return self.live_update_ws_port
