"""
Pydantic models for torrent records and torrent request arguments.
Wire names are camelCase, with the protocol's kebab-case exceptions spelled out.
"""

import base64
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from trpc_cli.exceptions import (
    BothSourcesSpecifiedError,
    NoSourceSpecifiedError,
    UnknownFieldError,
)


def _normalize(name: str) -> str:
    return name.strip().lower().replace("-", "").replace("_", "")


class TorrentField(str, Enum):
    """Field names accepted by torrent-get."""

    ACTIVITY_DATE = "activityDate"
    ADDED_DATE = "addedDate"
    BANDWIDTH_PRIORITY = "bandwidthPriority"
    COMMENT = "comment"
    CORRUPT_EVER = "corruptEver"
    CREATOR = "creator"
    DATE_CREATED = "dateCreated"
    DESIRED_AVAILABLE = "desiredAvailable"
    DONE_DATE = "doneDate"
    DOWNLOAD_DIR = "downloadDir"
    DOWNLOADED_EVER = "downloadedEver"
    DOWNLOAD_LIMIT = "downloadLimit"
    DOWNLOAD_LIMITED = "downloadLimited"
    EDIT_DATE = "editDate"
    ERROR = "error"
    ERROR_STRING = "errorString"
    ETA = "eta"
    ETA_IDLE = "etaIdle"
    FILES = "files"
    FILE_STATS = "fileStats"
    HASH_STRING = "hashString"
    HAVE_UNCHECKED = "haveUnchecked"
    HAVE_VALID = "haveValid"
    HONORS_SESSION_LIMITS = "honorsSessionLimits"
    ID = "id"
    IS_FINISHED = "isFinished"
    IS_PRIVATE = "isPrivate"
    IS_STALLED = "isStalled"
    LABELS = "labels"
    LEFT_UNTIL_DONE = "leftUntilDone"
    MAGNET_LINK = "magnetLink"
    MANUAL_ANNOUNCE_TIME = "manualAnnounceTime"
    MAX_CONNECTED_PEERS = "maxConnectedPeers"
    METADATA_PERCENT_COMPLETE = "metadataPercentComplete"
    NAME = "name"
    PEER_LIMIT = "peer-limit"
    PEERS = "peers"
    PEERS_CONNECTED = "peersConnected"
    PEERS_FROM = "peersFrom"
    PEERS_GETTING_FROM_US = "peersGettingFromUs"
    PEERS_SENDING_TO_US = "peersSendingToUs"
    PERCENT_DONE = "percentDone"
    PIECES = "pieces"
    PIECE_COUNT = "pieceCount"
    PIECE_SIZE = "pieceSize"
    PRIORITIES = "priorities"
    QUEUE_POSITION = "queuePosition"
    RATE_DOWNLOAD = "rateDownload"
    RATE_UPLOAD = "rateUpload"
    RECHECK_PROGRESS = "recheckProgress"
    SECONDS_DOWNLOADING = "secondsDownloading"
    SECONDS_SEEDING = "secondsSeeding"
    SEED_IDLE_LIMIT = "seedIdleLimit"
    SEED_IDLE_MODE = "seedIdleMode"
    SEED_RATIO_LIMIT = "seedRatioLimit"
    SEED_RATIO_MODE = "seedRatioMode"
    SIZE_WHEN_DONE = "sizeWhenDone"
    START_DATE = "startDate"
    STATUS = "status"
    TRACKERS = "trackers"
    TRACKER_STATS = "trackerStats"
    TOTAL_SIZE = "totalSize"
    TORRENT_FILE = "torrentFile"
    UPLOADED_EVER = "uploadedEver"
    UPLOAD_LIMIT = "uploadLimit"
    UPLOAD_LIMITED = "uploadLimited"
    UPLOAD_RATIO = "uploadRatio"
    WANTED = "wanted"
    WEBSEEDS = "webseeds"
    WEBSEEDS_SENDING_TO_US = "webseedsSendingToUs"

    @classmethod
    def parse(cls, name: str) -> "TorrentField":
        """Looks up a field by wire name, ignoring case, '-' and '_'."""
        key = _normalize(name)
        for item in cls:
            if _normalize(item.value) == key:
                return item
        raise UnknownFieldError(f"Unknown torrent field: '{name}'")


class TorrentStatus(IntEnum):
    """Activity state reported in a torrent's `status` field."""

    STOPPED = 0
    CHECK_WAIT = 1
    CHECKING = 2
    DOWNLOAD_WAIT = 3
    DOWNLOADING = 4
    SEED_WAIT = 5
    SEEDING = 6

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TorrentFile(_CamelModel):
    bytes_completed: Optional[int] = None
    length: Optional[int] = None
    name: Optional[str] = None


class FileStat(_CamelModel):
    bytes_completed: Optional[int] = None
    wanted: Optional[bool] = None
    priority: Optional[int] = None


class Peer(_CamelModel):
    address: Optional[str] = None
    client_name: Optional[str] = None
    client_is_choked: Optional[bool] = None
    client_is_interested: Optional[bool] = None
    flag_str: Optional[str] = None
    is_downloading_from: Optional[bool] = None
    is_encrypted: Optional[bool] = None
    is_incoming: Optional[bool] = None
    is_uploading_to: Optional[bool] = None
    is_utp: Optional[bool] = Field(default=None, alias="isUTP")
    peer_is_choked: Optional[bool] = None
    peer_is_interested: Optional[bool] = None
    port: Optional[int] = None
    progress: Optional[float] = None
    rate_to_client: Optional[int] = None
    rate_to_peer: Optional[int] = None


class PeersFrom(_CamelModel):
    from_cache: Optional[int] = None
    from_dht: Optional[int] = Field(default=None, alias="fromDht")
    from_incoming: Optional[int] = None
    from_lpd: Optional[int] = None
    from_ltep: Optional[int] = None
    from_pex: Optional[int] = None
    from_tracker: Optional[int] = None


class Tracker(_CamelModel):
    announce: Optional[str] = None
    id: Optional[int] = None
    scrape: Optional[str] = None
    tier: Optional[int] = None


class TrackerStat(_CamelModel):
    announce: Optional[str] = None
    announce_state: Optional[int] = None
    download_count: Optional[int] = None
    has_announced: Optional[bool] = None
    has_scraped: Optional[bool] = None
    host: Optional[str] = None
    id: Optional[int] = None
    is_backup: Optional[bool] = None
    last_announce_peer_count: Optional[int] = None
    last_announce_result: Optional[str] = None
    last_announce_start_time: Optional[int] = None
    last_announce_succeeded: Optional[bool] = None
    last_announce_time: Optional[int] = None
    last_announce_timed_out: Optional[bool] = None
    last_scrape_result: Optional[str] = None
    last_scrape_start_time: Optional[int] = None
    last_scrape_succeeded: Optional[bool] = None
    last_scrape_time: Optional[int] = None
    last_scrape_timed_out: Optional[bool] = None
    leecher_count: Optional[int] = None
    next_announce_time: Optional[int] = None
    next_scrape_time: Optional[int] = None
    scrape: Optional[str] = None
    scrape_state: Optional[int] = None
    seeder_count: Optional[int] = None
    tier: Optional[int] = None


class Torrent(_CamelModel):
    """A torrent record. Only the fields requested in torrent-get are populated."""

    activity_date: Optional[int] = None
    added_date: Optional[int] = None
    bandwidth_priority: Optional[int] = None
    comment: Optional[str] = None
    corrupt_ever: Optional[int] = None
    creator: Optional[str] = None
    date_created: Optional[int] = None
    desired_available: Optional[int] = None
    done_date: Optional[int] = None
    download_dir: Optional[str] = None
    downloaded_ever: Optional[int] = None
    download_limit: Optional[int] = None
    download_limited: Optional[bool] = None
    edit_date: Optional[int] = None
    error: Optional[int] = None
    error_string: Optional[str] = None
    eta: Optional[int] = None
    eta_idle: Optional[int] = None
    files: Optional[list[TorrentFile]] = None
    file_stats: Optional[list[FileStat]] = None
    hash_string: Optional[str] = None
    have_unchecked: Optional[int] = None
    have_valid: Optional[int] = None
    honors_session_limits: Optional[bool] = None
    id: Optional[int] = None
    is_finished: Optional[bool] = None
    is_private: Optional[bool] = None
    is_stalled: Optional[bool] = None
    labels: Optional[list[str]] = None
    left_until_done: Optional[int] = None
    magnet_link: Optional[str] = None
    manual_announce_time: Optional[int] = None
    max_connected_peers: Optional[int] = None
    metadata_percent_complete: Optional[float] = None
    name: Optional[str] = None
    peer_limit: Optional[int] = Field(default=None, alias="peer-limit")
    peers: Optional[list[Peer]] = None
    peers_connected: Optional[int] = None
    peers_from: Optional[PeersFrom] = None
    peers_getting_from_us: Optional[int] = None
    peers_sending_to_us: Optional[int] = None
    percent_done: Optional[float] = None
    pieces: Optional[str] = None
    piece_count: Optional[int] = None
    piece_size: Optional[int] = None
    priorities: Optional[list[int]] = None
    queue_position: Optional[int] = None
    rate_download: Optional[int] = None
    rate_upload: Optional[int] = None
    recheck_progress: Optional[float] = None
    seconds_downloading: Optional[int] = None
    seconds_seeding: Optional[int] = None
    seed_idle_limit: Optional[int] = None
    seed_idle_mode: Optional[int] = None
    seed_ratio_limit: Optional[float] = None
    seed_ratio_mode: Optional[int] = None
    size_when_done: Optional[int] = None
    start_date: Optional[int] = None
    status: Optional[int] = None
    trackers: Optional[list[Tracker]] = None
    tracker_stats: Optional[list[TrackerStat]] = None
    total_size: Optional[int] = None
    torrent_file: Optional[str] = None
    uploaded_ever: Optional[int] = None
    upload_limit: Optional[int] = None
    upload_limited: Optional[bool] = None
    upload_ratio: Optional[float] = None
    wanted: Optional[list[int]] = None
    webseeds: Optional[list[str]] = None
    webseeds_sending_to_us: Optional[int] = None


class TorrentGetResult(BaseModel):
    torrents: list[Torrent] = Field(default_factory=list)
    removed: Optional[list[int]] = None


class AddedTorrent(_CamelModel):
    id: Optional[int] = None
    name: Optional[str] = None
    hash_string: Optional[str] = None


class TorrentAdded(BaseModel):
    """Result of torrent-add: either a new torrent or the duplicate already present."""

    model_config = ConfigDict(populate_by_name=True)

    torrent_added: Optional[AddedTorrent] = Field(default=None, alias="torrent-added")
    torrent_duplicate: Optional[AddedTorrent] = Field(
        default=None, alias="torrent-duplicate"
    )

    @property
    def torrent(self) -> Optional[AddedTorrent]:
        return self.torrent_added or self.torrent_duplicate


class RenamedPath(BaseModel):
    id: Optional[int] = None
    name: Optional[str] = None
    path: Optional[str] = None


class TorrentAddArgs(BaseModel):
    """
    Arguments for torrent-add.

    Exactly one of `filename` (a path on the daemon's host, a URL or a magnet
    link) and `metainfo` (base64 .torrent content) must be set. The check runs
    in `validate_source()` so that arguments can be adjusted after creation.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    filename: Optional[str] = None
    metainfo: Optional[str] = None
    cookies: Optional[str] = None
    download_dir: Optional[str] = Field(default=None, alias="download-dir")
    paused: Optional[bool] = None
    peer_limit: Optional[int] = Field(default=None, alias="peer-limit")
    bandwidth_priority: Optional[int] = Field(default=None, alias="bandwidthPriority")
    labels: Optional[list[str]] = None
    files_wanted: Optional[list[int]] = Field(default=None, alias="files-wanted")
    files_unwanted: Optional[list[int]] = Field(default=None, alias="files-unwanted")
    priority_high: Optional[list[int]] = Field(default=None, alias="priority-high")
    priority_low: Optional[list[int]] = Field(default=None, alias="priority-low")
    priority_normal: Optional[list[int]] = Field(default=None, alias="priority-normal")

    @classmethod
    def from_file(cls, filename: str, **kwargs: Any) -> "TorrentAddArgs":
        """Adds by filename or URL, resolved by the daemon itself."""
        return cls(filename=filename, **kwargs)

    @classmethod
    def from_meta(cls, path: "str | Path", **kwargs: Any) -> "TorrentAddArgs":
        """
        Adds by the content of a local .torrent file, sent as base64 metainfo.

        Raises:
            OSError: If the file cannot be read.
        """
        raw = Path(path).read_bytes()
        return cls(metainfo=base64.b64encode(raw).decode("ascii"), **kwargs)

    def validate_source(self) -> None:
        if self.filename is not None and self.metainfo is not None:
            raise BothSourcesSpecifiedError(
                "torrent-add arguments have both a filename and metainfo."
            )
        if self.filename is None and self.metainfo is None:
            raise NoSourceSpecifiedError(
                "torrent-add arguments have neither a filename nor metainfo."
            )

    def to_arguments(self) -> dict[str, Any]:
        self.validate_source()
        return self.model_dump(by_alias=True, exclude_none=True)


class TorrentSetArgs(_CamelModel):
    """Mutable per-torrent attributes for torrent-set. Unset members are not sent."""

    bandwidth_priority: Optional[int] = None
    download_limit: Optional[int] = None
    download_limited: Optional[bool] = None
    files_wanted: Optional[list[int]] = Field(default=None, alias="files-wanted")
    files_unwanted: Optional[list[int]] = Field(default=None, alias="files-unwanted")
    honors_session_limits: Optional[bool] = None
    labels: Optional[list[str]] = None
    location: Optional[str] = None
    peer_limit: Optional[int] = Field(default=None, alias="peer-limit")
    priority_high: Optional[list[int]] = Field(default=None, alias="priority-high")
    priority_low: Optional[list[int]] = Field(default=None, alias="priority-low")
    priority_normal: Optional[list[int]] = Field(default=None, alias="priority-normal")
    queue_position: Optional[int] = None
    seed_idle_limit: Optional[int] = None
    seed_idle_mode: Optional[int] = None
    seed_ratio_limit: Optional[float] = None
    seed_ratio_mode: Optional[int] = None
    upload_limit: Optional[int] = None
    upload_limited: Optional[bool] = None

    def to_arguments(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
