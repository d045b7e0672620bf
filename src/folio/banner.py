"""Startup banner — producer status output.

Prints a short summary of where snapshots go and whether the push channel is
live.  Detects ``NO_COLOR`` / ``TERM`` for safe fallback.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from folio.config import FolioConfig


# ---------------------------------------------------------------------------
# ANSI helpers — respect NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def print_banner(
    config: FolioConfig,
    page_count: int,
    *,
    record_count: int = 0,
    watching: bool = False,
    load_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> None:
    """Print the producer startup banner to stderr.

    Args:
        config: Resolved FolioConfig.
        page_count: Pages in the first snapshot.
        record_count: Content records the first snapshot was built from.
        watching: Whether the records file is being watched.
        load_ms: Time spent on the first cycle in milliseconds.
        warnings: Optional list of warning messages to display.

    """
    from folio import __version__

    lines: list[str] = [
        "",
        f"  {_BOLD}Folio{_RESET} {_DIM}v{__version__}{_RESET}",
        f"  {_DIM}{'─' * 43}{_RESET}",
    ]

    pages_label = "page" if page_count == 1 else "pages"
    records_label = "record" if record_count == 1 else "records"
    timing = f" {_DIM}in {load_ms:.0f}ms{_RESET}" if load_ms > 0 else ""
    lines.append(
        f"  {_DIM}├─{_RESET} {page_count} {pages_label} from {record_count} {records_label}{timing}"
    )
    lines.append(f"  {_DIM}├─{_RESET} snapshot: {_DIM}{config.cache_path}{_RESET}")

    if config.live_update:
        url = f"ws://{config.live_update_host}:{config.live_update_ws_port}/live-updates"
        lines.append(f"  {_DIM}└─{_RESET} {_GREEN}live{_RESET} on {_DIM}{url}{_RESET}")
    else:
        lines.append(f"  {_DIM}└─{_RESET} live updates off")

    if watching:
        lines.append("")
        lines.append(f"  {_DIM}Watching for changes...{_RESET}")

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")

    print("\n".join(lines), file=sys.stderr)
