"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from trpc_cli.models.config import ClientConfig
from trpc_cli.models.session import SessionInfo, SessionStats, Stats
from trpc_cli.models.torrent import Torrent, TorrentAdded
from trpc_cli.utils.formatting import (
    format_duration,
    format_eta,
    format_percent,
    format_size,
    format_speed,
    get_status_label,
)

STATUS_COLORS = {
    "Stopped": "dim",
    "Check Wait": "yellow",
    "Checking": "yellow",
    "Download Wait": "cyan",
    "Downloading": "green",
    "Seed Wait": "cyan",
    "Seeding": "magenta",
    "Error": "bold red",
}


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "UnauthorizedError": [
            "• The daemon requires RPC authentication.",
            "• Set `username` and `password` with `trpc-cli init`.",
            "• Check the daemon's rpc-whitelist if connecting from another host.",
        ],
        "TransportError": [
            "• Check that the daemon is running and reachable.",
            "• Verify the RPC url (`trpc-cli --show-config`).",
            "• Increase `timeout` in the configuration for slow hosts.",
        ],
        "DecodeError": [
            "• The endpoint did not answer with an RPC envelope.",
            "• Verify that the url points at the daemon's /transmission/rpc path.",
        ],
        "BadResponseError": [
            "• The daemon refused the request; its message is shown above.",
            "• Run the command with -vv for detailed logs.",
        ],
        "BothSourcesSpecifiedError": [
            "• Pass either a filename/magnet link or --meta, not both.",
        ],
        "NoSourceSpecifiedError": [
            "• Pass a filename/magnet link or a local .torrent file with --meta.",
        ],
        "UnknownFieldError": [
            "• Check the spelling of the field name.",
            "• Field names follow the daemon's wire names, e.g. `hashString`.",
        ],
        "ConfigurationError": [
            "• Fix the configuration file or run `trpc-cli init --force`.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration, hiding sensitive data."""
    console = Console()
    content = ""
    for key, value in config_data.items():
        if key == "password" and value:
            value = "[hidden]"
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: ClientConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    auth_method = f"Basic ({config.username})" if config.username else "None"

    table.add_row("RPC URL:", f"[green]{config.url}[/green]")
    table.add_row("Auth Method:", auth_method)
    table.add_row("Timeout:", f"{config.timeout:g}s")

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )


def print_torrent_table(torrents: list[Torrent]):
    """Displays one row per torrent."""
    console = Console()
    if not torrents:
        console.print("[dim]No torrents.[/dim]")
        return

    table = Table(box=box.SIMPLE_HEAVY)
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Name", style="cyan", overflow="fold")
    table.add_column("Status")
    table.add_column("Done", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Down", justify="right", style="green")
    table.add_column("Up", justify="right", style="magenta")
    table.add_column("ETA", justify="right")
    table.add_column("Ratio", justify="right")

    for t in sorted(torrents, key=lambda t: (t.queue_position or 0, t.id or 0)):
        status = get_status_label(t)
        color = STATUS_COLORS.get(status, "white")
        ratio = "-"
        if t.upload_ratio is not None and t.upload_ratio >= 0:
            ratio = f"{t.upload_ratio:.2f}"
        table.add_row(
            str(t.id) if t.id is not None else "?",
            t.name or "",
            f"[{color}]{status}[/{color}]",
            format_percent(t.percent_done),
            format_size(t.size_when_done or t.total_size),
            format_speed(t.rate_download),
            format_speed(t.rate_upload),
            format_eta(t.eta),
            ratio,
        )

    console.print(table)


def print_torrent_details(torrent: Torrent):
    """Displays every populated attribute of a single torrent."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column()

    table.add_row("Name:", torrent.name or "")
    table.add_row("Hash:", f"[dim]{torrent.hash_string or '-'}[/dim]")
    table.add_row("Status:", get_status_label(torrent))
    if torrent.error_string:
        table.add_row("Error:", f"[red]{torrent.error_string}[/red]")
    table.add_row("Progress:", format_percent(torrent.percent_done))
    table.add_row("Size:", format_size(torrent.total_size))
    table.add_row("Location:", torrent.download_dir or "-")
    table.add_row("Downloaded:", format_size(torrent.downloaded_ever))
    table.add_row("Uploaded:", format_size(torrent.uploaded_ever))
    table.add_row(
        "Peers:",
        f"{torrent.peers_connected or 0} connected, "
        f"{torrent.peers_sending_to_us or 0} sending, "
        f"{torrent.peers_getting_from_us or 0} receiving",
    )
    if torrent.labels:
        table.add_row("Labels:", ", ".join(torrent.labels))
    if torrent.files:
        table.add_row("Files:", str(len(torrent.files)))
    if torrent.trackers:
        table.add_row(
            "Trackers:", "\n".join(tr.announce or "" for tr in torrent.trackers)
        )

    console.print(
        Panel(
            table,
            title=f"[bold]Torrent {torrent.id}[/bold]",
            border_style="cyan",
            expand=False,
        )
    )


def _stats_rows(table: Table, label: str, stats: Stats | None):
    if stats is None:
        return
    table.add_row(f"[bold]{label}[/bold]", "")
    table.add_row("Uploaded:", format_size(stats.uploaded_bytes))
    table.add_row("Downloaded:", format_size(stats.downloaded_bytes))
    table.add_row("Files Added:", str(stats.files_added or 0))
    table.add_row("Active:", format_duration(stats.seconds_active or 0))


def print_session_stats(stats: SessionStats):
    """Displays the daemon's transfer statistics."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan", justify="right", width=20)
    table.add_column(style="white", justify="left")

    table.add_row("Torrents:", f"[bold]{stats.torrent_count or 0}[/bold]")
    table.add_row("Active:", f"[green]{stats.active_torrent_count or 0}[/green]")
    table.add_row("Paused:", f"[yellow]{stats.paused_torrent_count or 0}[/yellow]")
    table.add_row("Download Speed:", format_speed(stats.download_speed))
    table.add_row("Upload Speed:", format_speed(stats.upload_speed))
    table.add_row("", "")
    _stats_rows(table, "Current Session", stats.current_stats)
    _stats_rows(table, "All Time", stats.cumulative_stats)

    console.print(
        Panel(
            table,
            title="[bold]Session Statistics[/bold]",
            border_style="green",
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )


def print_session_info(info: SessionInfo):
    """Displays the daemon's session settings, sorted by wire name."""
    console = Console()
    table = Table(box=box.SIMPLE)
    table.add_column("Setting", style="bold cyan")
    table.add_column("Value")

    for key, value in sorted(info.model_dump(by_alias=True, exclude_none=True).items()):
        table.add_row(key, str(value))

    console.print(table)


def print_added(result: TorrentAdded):
    """Reports the outcome of torrent-add."""
    console = Console()
    if result.torrent_added:
        t = result.torrent_added
        console.print(f"[green]✓ Added[/green] [cyan]{t.name}[/cyan] (id {t.id})")
    elif result.torrent_duplicate:
        t = result.torrent_duplicate
        console.print(
            f"[yellow]○ Already present:[/yellow] [cyan]{t.name}[/cyan] (id {t.id})"
        )
    else:
        console.print("[yellow]The daemon did not report the added torrent.[/yellow]")
