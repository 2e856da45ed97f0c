"""
Pydantic models for session-level RPC payloads.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from trpc_cli.exceptions import UnknownFieldError

# Keys reported by session-get that session-set refuses to change
IMMUTABLE_SESSION_FIELDS = frozenset(
    {
        "blocklist-size",
        "config-dir",
        "rpc-version",
        "rpc-version-minimum",
        "rpc-version-semver",
        "session-id",
        "units",
        "version",
    }
)


def _kebab(name: str) -> str:
    return name.replace("_", "-")


class SessionField(str, Enum):
    """Commonly requested session-get fields."""

    ALT_SPEED_DOWN = "alt-speed-down"
    ALT_SPEED_ENABLED = "alt-speed-enabled"
    ALT_SPEED_UP = "alt-speed-up"
    BLOCKLIST_ENABLED = "blocklist-enabled"
    BLOCKLIST_SIZE = "blocklist-size"
    BLOCKLIST_URL = "blocklist-url"
    CONFIG_DIR = "config-dir"
    DHT_ENABLED = "dht-enabled"
    DOWNLOAD_DIR = "download-dir"
    DOWNLOAD_QUEUE_ENABLED = "download-queue-enabled"
    DOWNLOAD_QUEUE_SIZE = "download-queue-size"
    ENCRYPTION = "encryption"
    INCOMPLETE_DIR = "incomplete-dir"
    INCOMPLETE_DIR_ENABLED = "incomplete-dir-enabled"
    PEER_LIMIT_GLOBAL = "peer-limit-global"
    PEER_LIMIT_PER_TORRENT = "peer-limit-per-torrent"
    PEER_PORT = "peer-port"
    PEX_ENABLED = "pex-enabled"
    RPC_VERSION = "rpc-version"
    RPC_VERSION_MINIMUM = "rpc-version-minimum"
    SEED_QUEUE_ENABLED = "seed-queue-enabled"
    SEED_QUEUE_SIZE = "seed-queue-size"
    SEED_RATIO_LIMIT = "seedRatioLimit"
    SEED_RATIO_LIMITED = "seedRatioLimited"
    SESSION_ID = "session-id"
    SPEED_LIMIT_DOWN = "speed-limit-down"
    SPEED_LIMIT_DOWN_ENABLED = "speed-limit-down-enabled"
    SPEED_LIMIT_UP = "speed-limit-up"
    SPEED_LIMIT_UP_ENABLED = "speed-limit-up-enabled"
    START_ADDED_TORRENTS = "start-added-torrents"
    VERSION = "version"

    @classmethod
    def parse(cls, name: str) -> "SessionField":
        key = name.strip().lower().replace("_", "-")
        for item in cls:
            if item.value.lower() == key:
                return item
        raise UnknownFieldError(f"Unknown session field: '{name}'")


class SessionInfo(BaseModel):
    """
    Result of session-get. The commonly used keys are typed, everything else the
    daemon reports is kept as extra attributes under its wire name.
    """

    model_config = ConfigDict(
        alias_generator=_kebab, populate_by_name=True, extra="allow"
    )

    version: Optional[str] = None
    rpc_version: Optional[int] = None
    rpc_version_minimum: Optional[int] = None
    session_id: Optional[str] = None
    config_dir: Optional[str] = None
    download_dir: Optional[str] = None
    incomplete_dir: Optional[str] = None
    incomplete_dir_enabled: Optional[bool] = None
    peer_port: Optional[int] = None
    peer_limit_global: Optional[int] = None
    peer_limit_per_torrent: Optional[int] = None
    speed_limit_down: Optional[int] = None
    speed_limit_down_enabled: Optional[bool] = None
    speed_limit_up: Optional[int] = None
    speed_limit_up_enabled: Optional[bool] = None
    alt_speed_enabled: Optional[bool] = None
    blocklist_enabled: Optional[bool] = None
    blocklist_size: Optional[int] = None
    download_queue_enabled: Optional[bool] = None
    download_queue_size: Optional[int] = None
    encryption: Optional[str] = None
    start_added_torrents: Optional[bool] = None


class Stats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    uploaded_bytes: Optional[int] = None
    downloaded_bytes: Optional[int] = None
    files_added: Optional[int] = None
    session_count: Optional[int] = None
    seconds_active: Optional[int] = None


class SessionStats(BaseModel):
    """Result of session-stats."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    active_torrent_count: Optional[int] = None
    download_speed: Optional[int] = None
    paused_torrent_count: Optional[int] = None
    torrent_count: Optional[int] = None
    upload_speed: Optional[int] = None
    cumulative_stats: Optional[Stats] = Field(default=None, alias="cumulative-stats")
    current_stats: Optional[Stats] = Field(default=None, alias="current-stats")


class PortTest(BaseModel):
    port_is_open: bool = Field(alias="port-is-open")


class BlocklistUpdate(BaseModel):
    blocklist_size: int = Field(alias="blocklist-size")


class FreeSpace(BaseModel):
    path: str
    size_bytes: int = Field(alias="size-bytes")
