"""
Request and response envelopes of the RPC protocol and their JSON wire codec.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from trpc_cli.exceptions import (
    BadResponseError,
    DecodeError,
    NoArgumentsError,
    UnknownFieldError,
)

from .ids import Ids

SUCCESS = "success"


class Method(str, Enum):
    """The closed set of RPC method names understood by the daemon."""

    SESSION_GET = "session-get"
    SESSION_SET = "session-set"
    SESSION_STATS = "session-stats"
    SESSION_CLOSE = "session-close"
    BLOCKLIST_UPDATE = "blocklist-update"
    PORT_TEST = "port-test"
    FREE_SPACE = "free-space"
    TORRENT_START = "torrent-start"
    TORRENT_START_NOW = "torrent-start-now"
    TORRENT_STOP = "torrent-stop"
    TORRENT_VERIFY = "torrent-verify"
    TORRENT_REANNOUNCE = "torrent-reannounce"
    TORRENT_SET = "torrent-set"
    TORRENT_GET = "torrent-get"
    TORRENT_ADD = "torrent-add"
    TORRENT_REMOVE = "torrent-remove"
    TORRENT_SET_LOCATION = "torrent-set-location"
    TORRENT_RENAME_PATH = "torrent-rename-path"
    QUEUE_MOVE_TOP = "queue-move-top"
    QUEUE_MOVE_UP = "queue-move-up"
    QUEUE_MOVE_DOWN = "queue-move-down"
    QUEUE_MOVE_BOTTOM = "queue-move-bottom"

    @classmethod
    def parse(cls, name: str) -> "Method":
        """Maps a wire name or member name (any case, '_' or '-') to a method."""
        key = name.strip().lower().replace("_", "-")
        for method in cls:
            if method.value == key:
                return method
        raise UnknownFieldError(f"Unknown RPC method: '{name}'")


def _to_wire(obj: Any) -> Any:
    """`json.dumps` hook for the typed values allowed inside request arguments."""
    if isinstance(obj, Ids):
        return obj.to_wire()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, BaseModel):
        return obj.model_dump(by_alias=True, exclude_none=True, mode="json")
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


@dataclass(frozen=True)
class RpcRequest:
    """A request envelope. Absent arguments and tag are left off the wire."""

    method: Method
    arguments: Optional[dict[str, Any]] = None
    tag: Optional[int] = None

    def to_wire(self) -> dict[str, Any]:
        envelope: dict[str, Any] = {"method": Method(self.method).value}
        if self.arguments is not None:
            envelope["arguments"] = self.arguments
        if self.tag is not None:
            envelope["tag"] = self.tag
        return envelope


class RpcResponse(BaseModel):
    """A decoded response envelope."""

    # No coercion: a "7" tag or a numeric result is a malformed envelope
    model_config = ConfigDict(strict=True)

    result: str
    arguments: Optional[dict[str, Any]] = None
    tag: Optional[int] = None

    @property
    def is_success(self) -> bool:
        return self.result == SUCCESS


def encode_request(request: RpcRequest) -> bytes:
    """Encodes a request envelope into its canonical JSON body."""
    return json.dumps(request.to_wire(), default=_to_wire).encode("utf-8")


def decode_response(body: bytes) -> RpcResponse:
    """
    Decodes a response body into an envelope.

    Raises:
        DecodeError: If the body is not JSON or does not have the envelope shape.
    """
    try:
        return RpcResponse.model_validate_json(body)
    except ValidationError as e:
        raise DecodeError(f"Malformed response envelope: {e}") from e


def value_from_response(
    response: RpcResponse, expect_arguments: bool = True
) -> Optional[dict[str, Any]]:
    """
    Classifies a decoded response and returns its arguments.

    Args:
        response: The decoded envelope.
        expect_arguments: Whether a success without arguments is a protocol
            violation for the operation being performed.

    Raises:
        BadResponseError: If the result is anything other than "success".
        NoArgumentsError: If arguments were expected but are absent.
    """
    if not response.is_success:
        raise BadResponseError(response.result)
    if response.arguments is None and expect_arguments:
        raise NoArgumentsError("Response does not contain arguments.")
    return response.arguments
