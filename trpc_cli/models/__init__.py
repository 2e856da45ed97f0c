"""
Data Models Layer.

This package contains Pydantic models that define the payloads exchanged with
the daemon and the application configuration.
"""

from .config import ClientConfig
from .session import (
    BlocklistUpdate,
    FreeSpace,
    PortTest,
    SessionField,
    SessionInfo,
    SessionStats,
    Stats,
)
from .torrent import (
    AddedTorrent,
    RenamedPath,
    Torrent,
    TorrentAddArgs,
    TorrentAdded,
    TorrentField,
    TorrentGetResult,
    TorrentSetArgs,
    TorrentStatus,
)

__all__ = [
    "AddedTorrent",
    "BlocklistUpdate",
    "ClientConfig",
    "FreeSpace",
    "PortTest",
    "RenamedPath",
    "SessionField",
    "SessionInfo",
    "SessionStats",
    "Stats",
    "Torrent",
    "TorrentAddArgs",
    "TorrentAdded",
    "TorrentField",
    "TorrentGetResult",
    "TorrentSetArgs",
    "TorrentStatus",
]
