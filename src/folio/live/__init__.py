"""Live updates — push channel that wakes consumers after each snapshot write."""

from folio.live.notifier import (
    GREETING,
    LIVE_UPDATE_EVENT_NAME,
    LIVE_UPDATE_PATH,
    ChangeNotifier,
    LiveConnection,
)

__all__ = [
    "GREETING",
    "LIVE_UPDATE_EVENT_NAME",
    "LIVE_UPDATE_PATH",
    "ChangeNotifier",
    "LiveConnection",
]
