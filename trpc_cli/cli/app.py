"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import json
import logging
import os
from collections.abc import Awaitable, Callable
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from trpc_cli import __version__
from trpc_cli.exceptions import TrpcCliError
from trpc_cli.models.config import DEFAULT_RPC_URL, ClientConfig
from trpc_cli.models.torrent import TorrentAddArgs, TorrentField, TorrentSetArgs
from trpc_cli.rpc.client import TransmissionClient
from trpc_cli.rpc.ids import Ids
from trpc_cli.storage.config_manager import ConfigManager
from trpc_cli.utils.formatting import format_size
from trpc_cli.utils.structured_logger import RpcLogger, create_structured_logger

from .formatters import (
    format_error_with_suggestions,
    print_added,
    print_config,
    print_session_info,
    print_session_stats,
    print_torrent_details,
    print_torrent_table,
    print_validation_table,
)

T = TypeVar("T")

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("trpc_cli")

app = typer.Typer(
    name="trpc-cli",
    help=(
        "Control a Transmission daemon over its JSON RPC interface. Use 'trpc-cli"
        " <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)

LIST_FIELDS = [
    TorrentField.ID,
    TorrentField.NAME,
    TorrentField.STATUS,
    TorrentField.ERROR,
    TorrentField.ERROR_STRING,
    TorrentField.PERCENT_DONE,
    TorrentField.SIZE_WHEN_DONE,
    TorrentField.TOTAL_SIZE,
    TorrentField.RATE_DOWNLOAD,
    TorrentField.RATE_UPLOAD,
    TorrentField.ETA,
    TorrentField.UPLOAD_RATIO,
    TorrentField.QUEUE_POSITION,
]

DETAIL_FIELDS = LIST_FIELDS + [
    TorrentField.HASH_STRING,
    TorrentField.DOWNLOAD_DIR,
    TorrentField.DOWNLOADED_EVER,
    TorrentField.UPLOADED_EVER,
    TorrentField.PEERS_CONNECTED,
    TorrentField.PEERS_SENDING_TO_US,
    TorrentField.PEERS_GETTING_FROM_US,
    TorrentField.LABELS,
    TorrentField.FILES,
    TorrentField.TRACKERS,
]


class QueueDirection(str, Enum):
    TOP = "top"
    UP = "up"
    DOWN = "down"
    BOTTOM = "bottom"


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "trpc-cli"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _create_client(
    config: ClientConfig, rpc_logger: RpcLogger | None
) -> TransmissionClient:
    return TransmissionClient.from_config(config, rpc_logger)


def _parse_ids(text: str) -> Ids:
    try:
        return Ids.parse(text)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


def _run_with_client(
    ctx: typer.Context, action: Callable[[TransmissionClient], Awaitable[T]]
) -> T:
    """Loads the configuration, runs `action` against a fresh client and reports errors."""
    options = ctx.obj or {}
    log_dir: Path | None = options.get("log_dir")
    base_logger, rpc_logger = create_structured_logger(
        log_dir=log_dir, enable_json=log_dir is not None
    )

    async def _runner() -> T:
        config = ConfigManager(CONFIG_FILE).load_config(options.get("cli_options"))
        base_logger.set_session_context(url=config.url)
        async with _create_client(config, rpc_logger) as client:
            return await action(client)

    with base_logger:
        try:
            return asyncio.run(_runner())
        except TrpcCliError as e:
            console.print(format_error_with_suggestions(e))
            raise typer.Exit(code=1) from e


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
    url: str | None = typer.Option(
        None, "--url", help="RPC endpoint to use instead of the configured one."
    ),
    log_dir: Path | None = typer.Option(  # noqa: B008
        None, "--log-dir", help="Write JSON-lines RPC event logs to this directory."
    ),
):
    """Transmission RPC CLI"""
    if version:
        console.print(f"[bold]trpc-cli[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("trpc_cli").setLevel(log_level)

    cli_options: dict[str, Any] = {}
    if url:
        cli_options["url"] = url
    ctx.obj = {"cli_options": cli_options, "log_dir": log_dir}

    if show_config:
        if not CONFIG_FILE.is_file():
            console.print(
                "[red]✗ Config file not found.[/] Run [cyan]trpc-cli init[/cyan]"
                " first."
            )
            raise typer.Exit(code=1)
        try:
            config = ConfigManager(CONFIG_FILE).load_config(cli_options)
        except TrpcCliError as e:
            console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
            raise typer.Exit(code=1) from e
        print_config(CONFIG_FILE, config.model_dump(exclude={"config_path"}))
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    url: str = typer.Option(DEFAULT_RPC_URL, "--url", help="RPC endpoint URL."),
    username: str = typer.Option("", "--username", "-u", help="RPC username."),
    password: str = typer.Option("", "--password", "-p", help="RPC password."),
    timeout: float = typer.Option(30.0, "--timeout", help="Request timeout (s)."),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration."
    ),
):
    """Write the configuration file."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    settings = {
        "url": url,
        "username": username,
        "password": password,
        "timeout": timeout,
    }
    try:
        ConfigManager(CONFIG_FILE).save_new_config(settings)
    except TrpcCliError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e

    console.print(
        f"\n[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]"
    )
    console.print("Try: [cyan]trpc-cli list[/cyan]")


@app.command(name="list")
def list_command(
    ctx: typer.Context,
    ids: str | None = typer.Argument(
        None, help="Torrent ids/hashes (comma separated) or 'recent'."
    ),
):
    """List torrents."""
    selection = _parse_ids(ids) if ids else None
    result = _run_with_client(
        ctx, lambda client: client.torrent_get(LIST_FIELDS, selection)
    )
    print_torrent_table(result.torrents)


@app.command()
def info(
    ctx: typer.Context,
    ids: str = typer.Argument(..., help="Torrent ids/hashes (comma separated)."),
):
    """Show details of one or more torrents."""
    selection = _parse_ids(ids)
    result = _run_with_client(
        ctx, lambda client: client.torrent_get(DETAIL_FIELDS, selection)
    )
    if not result.torrents:
        console.print("[yellow]No matching torrents.[/yellow]")
        raise typer.Exit(code=1)
    for torrent in result.torrents:
        print_torrent_details(torrent)


@app.command()
def add(
    ctx: typer.Context,
    source: str | None = typer.Argument(
        None, help="Magnet link, URL, or a path on the daemon's host."
    ),
    meta: Path | None = typer.Option(  # noqa: B008
        None, "--meta", "-m", help="Local .torrent file to upload."
    ),
    download_dir: str | None = typer.Option(
        None, "--download-dir", "-d", help="Where the daemon stores the data."
    ),
    paused: bool = typer.Option(False, "--paused", help="Add without starting."),
    labels: list[str] | None = typer.Option(  # noqa: B008
        None, "--label", "-l", help="Label to attach (repeatable)."
    ),
):
    """Add a torrent from a link/path or an uploaded .torrent file."""
    options = {
        "download_dir": download_dir,
        "paused": paused or None,
        "labels": labels or None,
    }
    if meta is not None:
        try:
            args = TorrentAddArgs.from_meta(meta, **options)
        except OSError as e:
            console.print(f"[red]✗ Could not read '{meta}': {e}[/red]")
            raise typer.Exit(code=1) from e
        if source is not None:
            args.filename = source
    else:
        args = TorrentAddArgs(filename=source, **options)

    result = _run_with_client(ctx, lambda client: client.torrent_add(args))
    print_added(result)


@app.command()
def remove(
    ctx: typer.Context,
    ids: str = typer.Argument(..., help="Torrent ids/hashes (comma separated)."),
    delete_data: bool = typer.Option(
        False, "--delete-data", help="Also delete the downloaded data."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Bypass the confirmation prompt."
    ),
):
    """Remove torrents."""
    selection = _parse_ids(ids)
    if (
        delete_data
        and not force
        and not typer.confirm("Delete the downloaded data as well? This cannot be undone.")
    ):
        raise typer.Abort()

    _run_with_client(
        ctx, lambda client: client.torrent_remove(selection, delete_data)
    )
    console.print("[green]✓ Removed.[/green]")


@app.command()
def start(
    ctx: typer.Context,
    ids: str = typer.Argument(..., help="Torrent ids/hashes or 'recent'."),
    now: bool = typer.Option(False, "--now", help="Bypass the download queue."),
):
    """Start torrents."""
    selection = _parse_ids(ids)
    if now:
        _run_with_client(ctx, lambda client: client.torrent_start_now(selection))
    else:
        _run_with_client(ctx, lambda client: client.torrent_start(selection))
    console.print("[green]✓ Started.[/green]")


@app.command()
def stop(
    ctx: typer.Context,
    ids: str = typer.Argument(..., help="Torrent ids/hashes or 'recent'."),
):
    """Stop torrents."""
    selection = _parse_ids(ids)
    _run_with_client(ctx, lambda client: client.torrent_stop(selection))
    console.print("[green]✓ Stopped.[/green]")


@app.command()
def verify(
    ctx: typer.Context,
    ids: str = typer.Argument(..., help="Torrent ids/hashes or 'recent'."),
):
    """Verify local data of torrents."""
    selection = _parse_ids(ids)
    _run_with_client(ctx, lambda client: client.torrent_verify(selection))
    console.print("[green]✓ Verification queued.[/green]")


@app.command()
def reannounce(
    ctx: typer.Context,
    ids: str = typer.Argument(..., help="Torrent ids/hashes or 'recent'."),
):
    """Ask trackers for more peers."""
    selection = _parse_ids(ids)
    _run_with_client(ctx, lambda client: client.torrent_reannounce(selection))
    console.print("[green]✓ Reannounced.[/green]")


@app.command(name="set")
def set_command(
    ctx: typer.Context,
    ids: str = typer.Argument(..., help="Torrent ids/hashes or 'recent'."),
    download_limit: int | None = typer.Option(
        None, "--download-limit", help="Download limit in KB/s (0 disables)."
    ),
    upload_limit: int | None = typer.Option(
        None, "--upload-limit", help="Upload limit in KB/s (0 disables)."
    ),
    peer_limit: int | None = typer.Option(None, "--peer-limit", help="Max peers."),
    labels: list[str] | None = typer.Option(  # noqa: B008
        None, "--label", "-l", help="Replace labels (repeatable)."
    ),
):
    """Change per-torrent settings."""
    selection = _parse_ids(ids)
    args = TorrentSetArgs(peer_limit=peer_limit, labels=labels or None)
    if download_limit is not None:
        args.download_limit = download_limit
        args.download_limited = download_limit > 0
    if upload_limit is not None:
        args.upload_limit = upload_limit
        args.upload_limited = upload_limit > 0

    _run_with_client(ctx, lambda client: client.torrent_set(selection, args))
    console.print("[green]✓ Updated.[/green]")


@app.command()
def queue(
    ctx: typer.Context,
    direction: QueueDirection = typer.Argument(..., help="top, up, down or bottom."),
    ids: str = typer.Argument(..., help="Torrent ids/hashes."),
):
    """Reorder torrents in the download queue."""
    selection = _parse_ids(ids)

    async def _move(client: TransmissionClient) -> None:
        operations = {
            QueueDirection.TOP: client.queue_move_top,
            QueueDirection.UP: client.queue_move_up,
            QueueDirection.DOWN: client.queue_move_down,
            QueueDirection.BOTTOM: client.queue_move_bottom,
        }
        await operations[direction](selection)

    _run_with_client(ctx, _move)
    console.print(f"[green]✓ Moved {direction.value}.[/green]")


@app.command()
def move(
    ctx: typer.Context,
    ids: str = typer.Argument(..., help="Torrent ids/hashes."),
    location: str = typer.Argument(..., help="New location on the daemon's host."),
    move_data: bool = typer.Option(
        True, "--move/--no-move", help="Move the data or only look for it there."
    ),
):
    """Set the data location of torrents."""
    selection = _parse_ids(ids)
    _run_with_client(
        ctx,
        lambda client: client.torrent_set_location(selection, location, move_data),
    )
    console.print(f"[green]✓ Location set to[/green] [cyan]{location}[/cyan]")


@app.command()
def rename(
    ctx: typer.Context,
    torrent_id: int = typer.Argument(..., help="Torrent id."),
    path: str = typer.Argument(..., help="Current path inside the torrent."),
    name: str = typer.Argument(..., help="New name for the last path component."),
):
    """Rename a file or folder of a torrent."""
    result = _run_with_client(
        ctx,
        lambda client: client.torrent_rename_path(Ids.single(torrent_id), path, name),
    )
    console.print(
        f"[green]✓ Renamed[/green] [dim]{result.path}[/dim] → [cyan]{result.name}[/cyan]"
    )


@app.command()
def stats(ctx: typer.Context):
    """Show transfer statistics of the daemon."""
    result = _run_with_client(ctx, lambda client: client.session_stats())
    print_session_stats(result)


@app.command()
def session(
    ctx: typer.Context,
    fields: list[str] | None = typer.Option(  # noqa: B008
        None, "--field", "-f", help="Only fetch this session field (repeatable)."
    ),
):
    """Show the daemon's session settings."""
    result = _run_with_client(ctx, lambda client: client.session_get(fields))
    print_session_info(result)


def _parse_setting(item: str) -> tuple[str, Any]:
    key, sep, raw = item.partition("=")
    if not sep or not key:
        raise typer.BadParameter(f"Expected KEY=VALUE, got '{item}'.")
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return key.strip(), value


@app.command(name="session-set")
def session_set(
    ctx: typer.Context,
    settings: list[str] = typer.Argument(  # noqa: B008
        ..., help="KEY=VALUE pairs using wire names, e.g. speed-limit-down=500."
    ),
):
    """Change session settings of the daemon."""
    parsed = dict(_parse_setting(item) for item in settings)
    _run_with_client(ctx, lambda client: client.session_set(parsed))
    console.print(f"[green]✓ Updated {len(parsed)} setting(s).[/green]")


@app.command(name="close-session")
def close_session(ctx: typer.Context):
    """Shut the daemon down."""
    _run_with_client(ctx, lambda client: client.session_close())
    console.print("[green]✓ Daemon is shutting down.[/green]")


@app.command(name="free-space")
def free_space(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Directory on the daemon's host."),
):
    """Show free space in a directory of the daemon's host."""
    result = _run_with_client(ctx, lambda client: client.free_space(path))
    console.print(
        f"[cyan]{result.path}[/cyan]: [bold]{format_size(result.size_bytes)}[/bold] free"
    )


@app.command(name="port-test")
def port_test(ctx: typer.Context):
    """Check whether the daemon's peer port is reachable."""
    result = _run_with_client(ctx, lambda client: client.port_test())
    if result.port_is_open:
        console.print("[green]✓ Peer port is open.[/green]")
    else:
        console.print("[yellow]✗ Peer port is closed.[/yellow]")


@app.command(name="blocklist-update")
def blocklist_update(ctx: typer.Context):
    """Reload the daemon's blocklist."""
    result = _run_with_client(ctx, lambda client: client.blocklist_update())
    console.print(f"[green]✓ Blocklist has {result.blocklist_size} rules.[/green]")


@app.command()
def validate(ctx: typer.Context):
    """Validate the current configuration."""
    options = ctx.obj or {}
    try:
        config = ConfigManager(CONFIG_FILE).load_config(options.get("cli_options"))
        print_validation_table(config)
    except TrpcCliError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def diagnose(ctx: typer.Context):
    """Diagnose common configuration and connectivity issues."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    options = ctx.obj or {}
    if CONFIG_FILE.is_file():
        console.print(f"[green]✓[/] Config file exists at: [dim]{CONFIG_FILE}[/dim]")
    else:
        console.print("[yellow]○[/] No config file, using defaults.")
    try:
        config = ConfigManager(CONFIG_FILE).load_config(options.get("cli_options"))
        console.print("[green]✓[/] Configuration is valid.")
    except TrpcCliError as e:
        console.print(f"[red]✗ Configuration validation failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"\n[dim]Contacting daemon at {config.url}...[/dim]")

    async def test_connection() -> str | None:
        async with _create_client(config, None) as client:
            info = await client.session_get(["version", "rpc-version"])
            return info.version

    try:
        daemon_version = asyncio.run(test_connection())
    except TrpcCliError as e:
        console.print(f"[red]✗ Connection test failed: {e}[/red]")
        console.print(
            "\n[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
        raise typer.Exit(code=1) from e

    console.print(f"[green]✓[/] Connected to daemon version {daemon_version}.")
    console.print(
        "\n[bold green]✓ All checks passed! Your setup looks good.[/bold green]\n"
    )
