"""
Helper functions for formatting data into human-readable strings.
"""

from trpc_cli.models.torrent import Torrent, TorrentStatus


def format_size(bytes_size: int | None) -> str:
    """Formats bytes into a human-readable size string (e.g., '145.3 MB')."""
    if not bytes_size or bytes_size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    while bytes_size >= 1024 and i < len(units) - 1:
        bytes_size /= 1024
        i += 1
    return f"{bytes_size:.1f} {units[i]}"


def format_speed(bytes_per_second: int | None) -> str:
    """Formats a transfer rate, e.g. '1.2 MB/s'."""
    return f"{format_size(bytes_per_second)}/s"


def format_duration(seconds: float) -> str:
    """
    Formats a duration in seconds into a human-readable string (e.g., '2h 34m 12s').
    """
    s = int(seconds)
    days, s = divmod(s, 86400)
    hours, remainder = divmod(s, 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def format_eta(eta: int | None) -> str:
    """The daemon reports -1 for "not available" and -2 for "unknown"."""
    if eta is None or eta < 0:
        return "-"
    return format_duration(eta)


def format_percent(fraction: float | None) -> str:
    if fraction is None:
        return "-"
    return f"{fraction * 100:.1f}%"


def get_status_label(torrent: Torrent) -> str:
    """Human label for a torrent's status, flagging errors first."""
    if torrent.error:
        return "Error"
    if torrent.status is None:
        return "Unknown"
    try:
        return TorrentStatus(torrent.status).label
    except ValueError:
        return f"Status {torrent.status}"
