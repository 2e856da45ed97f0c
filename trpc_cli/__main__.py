"""
Console entry point for trpc-cli.

Typer handles usage errors, `typer.Exit` and Ctrl-C itself; anything else that
escapes a command is rendered here as an error panel.
"""

import asyncio
import logging
import os
import sys

from rich.console import Console

from trpc_cli.cli.app import app
from trpc_cli.cli.formatters import format_error_with_suggestions
from trpc_cli.exceptions import TrpcCliError

log = logging.getLogger("trpc_cli")


def main() -> None:
    if os.name == "nt":
        try:
            sys.stdout.reconfigure(encoding="utf-8")
            sys.stderr.reconfigure(encoding="utf-8")
        except (TypeError, AttributeError):
            pass

    console = Console()
    try:
        app()
    except asyncio.CancelledError:
        console.print("\n[yellow]⚠️  RPC call cancelled.[/yellow]")
        sys.exit(130)
    except TrpcCliError as e:
        console.print(format_error_with_suggestions(e))
        sys.exit(1)
    except Exception as e:
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
