"""
Structured event logging for RPC exchanges.

Events go to the `trpc_cli` console logger and, when a log directory is
given, to a JSON-lines file that can be analysed after a run.
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class StructuredLogger:
    """
    Writes named events with key/value context.

    Usage:
        with StructuredLogger("trpc_cli", log_dir=Path("logs")) as events:
            events.info("rpc_session_renewed", method="torrent-get")
    """

    def __init__(
        self, name: str, log_dir: Path | None = None, enable_json: bool = True
    ):
        """
        Args:
            name: Name of the console logger events are mirrored to.
            log_dir: Directory for the JSON-lines file (None disables it).
            enable_json: Whether to write the JSON-lines file at all.
        """
        self.name = name
        self.enable_json = enable_json and log_dir is not None
        self._logger = logging.getLogger(name)

        self._json_file = None
        self.json_log_path: Path | None = None
        if self.enable_json:
            log_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.json_log_path = log_dir / f"trpc_cli_{stamp}.jsonl"
            self._json_file = open(self.json_log_path, "a", encoding="utf-8")  # noqa: SIM115

        # Merged into every JSON entry
        self._run_context: dict[str, Any] = {
            "run_id": f"{int(time.time())}_{id(self)}",
            "started": datetime.now().isoformat(),
        }

    def set_session_context(self, **kwargs) -> None:
        """Adds run-level context such as the daemon url to every entry."""
        self._run_context.update(kwargs)

    def _emit(self, level: int, event: str, context: dict[str, Any]) -> None:
        details = " ".join(f"{key}={value}" for key, value in context.items())
        # Context values are plain text, never console markup
        self._logger.log(
            level, f"[{event}] {details}".rstrip(), extra={"markup": False}
        )

        if not self._json_file or self._json_file.closed:
            return
        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": logging.getLevelName(level),
            "event": event,
            **self._run_context,
            **context,
        }
        try:
            self._json_file.write(json.dumps(entry) + "\n")
            self._json_file.flush()
        except (OSError, TypeError, ValueError) as e:
            print(f"JSON logging failed: {e}", file=sys.stderr)

    def debug(self, event: str, **context) -> None:
        self._emit(logging.DEBUG, event, context)

    def info(self, event: str, **context) -> None:
        self._emit(logging.INFO, event, context)

    def warning(self, event: str, **context) -> None:
        self._emit(logging.WARNING, event, context)

    def close(self) -> None:
        """Closes the JSON-lines file."""
        if self._json_file and not self._json_file.closed:
            self._json_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class RpcLogger:
    """Records the lifecycle of RPC calls made by the client."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def request_started(self, method: str, has_arguments: bool, tag: int | None):
        self.logger.debug(
            "rpc_request_started", method=method, has_arguments=has_arguments, tag=tag
        )

    def request_completed(
        self, method: str, status_code: int, duration_ms: float, replayed: bool
    ):
        """One HTTP exchange finished, whatever its status."""
        self.logger.debug(
            "rpc_request_completed",
            method=method,
            status_code=status_code,
            duration_ms=round(duration_ms, 2),
            replayed=replayed,
        )

    def session_renewed(self, method: str):
        """A 409 carried a new session token and the call is replayed."""
        self.logger.info("rpc_session_renewed", method=method)

    def request_failed(self, method: str, error: Exception):
        """The call ended in an error before a response envelope was decoded."""
        self.logger.warning(
            "rpc_request_failed",
            method=method,
            error_type=type(error).__name__,
            error=str(error),
        )


def create_structured_logger(
    log_dir: Path | None = None, enable_json: bool = False
) -> tuple[StructuredLogger, RpcLogger]:
    """
    Creates the base event logger and the RPC logger writing through it.

    Returns:
        Tuple of (base_logger, rpc_logger)
    """
    base = StructuredLogger("trpc_cli", log_dir=log_dir, enable_json=enable_json)
    return base, RpcLogger(base)
