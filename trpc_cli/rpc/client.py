"""
Async client for the Transmission-style JSON RPC protocol, including the
session token handshake and one method per RPC operation.
"""

import logging
import time
from collections.abc import Iterable, Mapping
from typing import Any, Dict, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from trpc_cli.exceptions import (
    BadResponseError,
    DecodeError,
    ImmutableSessionFieldError,
    TrpcCliError,
    UnauthorizedError,
)
from trpc_cli.models.config import DEFAULT_RPC_URL, ClientConfig
from trpc_cli.models.session import (
    IMMUTABLE_SESSION_FIELDS,
    BlocklistUpdate,
    FreeSpace,
    PortTest,
    SessionField,
    SessionInfo,
    SessionStats,
)
from trpc_cli.models.torrent import (
    RenamedPath,
    TorrentAddArgs,
    TorrentAdded,
    TorrentField,
    TorrentGetResult,
    TorrentSetArgs,
)
from trpc_cli.utils.structured_logger import RpcLogger

from .envelope import (
    Method,
    RpcRequest,
    RpcResponse,
    decode_response,
    encode_request,
    value_from_response,
)
from .ids import Identifier, Ids
from .session import SESSION_ID_HEADER, SessionNegotiator
from .transport import AiohttpTransport, Transport, TransportResponse

log = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
IdsLike = Union[Ids, Identifier, Iterable[Identifier]]

HTTP_UNAUTHORIZED = 401
HTTP_CONFLICT = 409


class TransmissionClient:
    """
    Async client for the daemon's JSON RPC endpoint.

    Every request carries the current session token. When the daemon answers
    409 with a fresh token, the token is stored and the unchanged request body
    is sent once more; there is never a second replay.
    """

    def __init__(
        self,
        url: str = DEFAULT_RPC_URL,
        transport: Optional[Transport] = None,
        rpc_logger: Optional[RpcLogger] = None,
        timeout: float = 30.0,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ):
        """
        Initializes the client.

        Args:
            url: Full URL of the RPC endpoint.
            transport: The HTTP transport; an aiohttp one is created when omitted.
            rpc_logger: Optional structured event logger for exchanges.
            timeout: Per-exchange timeout for the default transport, in seconds.
            username: Optional basic auth user for the default transport.
            password: Optional basic auth password for the default transport.
        """
        self.url = url
        self._transport: Transport = transport or AiohttpTransport(
            timeout=timeout, username=username, password=password
        )
        self._session = SessionNegotiator()
        self._rpc_logger = rpc_logger

    @classmethod
    def from_config(
        cls, config: ClientConfig, rpc_logger: Optional[RpcLogger] = None
    ) -> "TransmissionClient":
        return cls(
            url=config.url,
            rpc_logger=rpc_logger,
            timeout=config.timeout,
            username=config.username or None,
            password=config.password or None,
        )

    @property
    def session(self) -> SessionNegotiator:
        """Provides access to the session token holder."""
        return self._session

    async def close(self) -> None:
        """Releases the underlying transport."""
        await self._transport.close()

    async def __aenter__(self) -> "TransmissionClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _headers(self, token: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            SESSION_ID_HEADER: token,
        }

    async def _exchange(
        self, method: Method, body: bytes, token: str, replayed: bool
    ) -> TransportResponse:
        start_time = time.monotonic()
        response = await self._transport.send(self.url, self._headers(token), body)
        duration_ms = (time.monotonic() - start_time) * 1000

        log.debug(
            f"{method.value} -> HTTP {response.status} in {duration_ms:.1f} ms"
            f"{' (replayed)' if replayed else ''}"
        )
        if self._rpc_logger:
            self._rpc_logger.request_completed(
                method.value, response.status, duration_ms, replayed
            )
        return response

    async def call(
        self,
        method: Union[Method, str],
        arguments: Optional[Dict[str, Any]] = None,
        tag: Optional[int] = None,
    ) -> RpcResponse:
        """
        Sends one logical RPC call and returns the decoded response envelope.

        The result is not classified here; use `value_from_response` to turn a
        non-success result into an error.

        Raises:
            TransportError: If an HTTP exchange fails.
            UnauthorizedError: If the daemon answers 401.
            BadResponseError: If a 409 cannot be resolved by one token renewal.
            DecodeError: If the final response body is not an envelope.
        """
        if not isinstance(method, Method):
            method = Method.parse(method)

        request = RpcRequest(method=method, arguments=arguments, tag=tag)
        body = encode_request(request)
        if self._rpc_logger:
            self._rpc_logger.request_started(method.value, arguments is not None, tag)

        try:
            response = await self._negotiate(method, body)
            return decode_response(response.body)
        except TrpcCliError as e:
            if self._rpc_logger:
                self._rpc_logger.request_failed(method.value, e)
            raise

    async def _negotiate(self, method: Method, body: bytes) -> TransportResponse:
        token = await self._session.current_token()
        response = await self._exchange(method, body, token, replayed=False)

        if response.status == HTTP_UNAUTHORIZED:
            raise UnauthorizedError(f"The daemon rejected {method.value} with 401.")

        if response.status == HTTP_CONFLICT:
            new_token = await self._session.renew_from(response.headers)
            if new_token is None:
                raise BadResponseError(
                    f"HTTP 409 without a {SESSION_ID_HEADER} header; "
                    "the session cannot be renewed."
                )
            if self._rpc_logger:
                self._rpc_logger.session_renewed(method.value)

            response = await self._exchange(method, body, new_token, replayed=True)
            if response.status == HTTP_UNAUTHORIZED:
                raise UnauthorizedError(
                    f"The daemon rejected {method.value} with 401."
                )
            if response.status == HTTP_CONFLICT:
                raise BadResponseError(
                    "HTTP 409 again after renewing the session token."
                )

        return response

    async def _invoke(
        self,
        method: Method,
        arguments: Optional[Dict[str, Any]] = None,
        *,
        expect_arguments: bool,
    ) -> Optional[Dict[str, Any]]:
        response = await self.call(method, arguments)
        return value_from_response(response, expect_arguments=expect_arguments)

    async def _fetch(
        self,
        method: Method,
        model: Type[ModelT],
        arguments: Optional[Dict[str, Any]] = None,
    ) -> ModelT:
        value = await self._invoke(method, arguments, expect_arguments=True)
        try:
            return model.model_validate(value)
        except ValidationError as e:
            raise DecodeError(
                f"Unexpected {method.value} arguments for {model.__name__}: {e}"
            ) from e

    async def _torrent_action(self, method: Method, ids: IdsLike) -> None:
        await self._invoke(method, {"ids": Ids.coerce(ids)}, expect_arguments=False)

    # Session Methods
    async def session_get(
        self, fields: Optional[Iterable[Union[SessionField, str]]] = None
    ) -> SessionInfo:
        arguments = None
        if fields is not None:
            arguments = {
                "fields": [
                    f if isinstance(f, SessionField) else SessionField.parse(f)
                    for f in fields
                ]
            }
        return await self._fetch(Method.SESSION_GET, SessionInfo, arguments)

    async def session_set(self, settings: Mapping[str, Any]) -> None:
        """
        Changes session settings, keyed by their wire names. Underscores in keys
        are sent as dashes.

        Raises:
            ImmutableSessionFieldError: If a read-only key is included.
        """
        wire_settings = {
            key.replace("_", "-"): value for key, value in settings.items()
        }
        immutable = sorted(
            key for key in wire_settings if key.lower() in IMMUTABLE_SESSION_FIELDS
        )
        if immutable:
            raise ImmutableSessionFieldError(
                f"session-set cannot change: {', '.join(immutable)}"
            )
        await self._invoke(Method.SESSION_SET, wire_settings, expect_arguments=False)

    async def session_stats(self) -> SessionStats:
        return await self._fetch(Method.SESSION_STATS, SessionStats)

    async def session_close(self) -> None:
        await self._invoke(Method.SESSION_CLOSE, expect_arguments=False)

    async def blocklist_update(self) -> BlocklistUpdate:
        return await self._fetch(Method.BLOCKLIST_UPDATE, BlocklistUpdate)

    async def port_test(self) -> PortTest:
        return await self._fetch(Method.PORT_TEST, PortTest)

    async def free_space(self, path: str) -> FreeSpace:
        return await self._fetch(Method.FREE_SPACE, FreeSpace, {"path": path})

    # Torrent Methods
    async def torrent_start(self, ids: IdsLike) -> None:
        await self._torrent_action(Method.TORRENT_START, ids)

    async def torrent_start_now(self, ids: IdsLike) -> None:
        await self._torrent_action(Method.TORRENT_START_NOW, ids)

    async def torrent_stop(self, ids: IdsLike) -> None:
        await self._torrent_action(Method.TORRENT_STOP, ids)

    async def torrent_verify(self, ids: IdsLike) -> None:
        await self._torrent_action(Method.TORRENT_VERIFY, ids)

    async def torrent_reannounce(self, ids: IdsLike) -> None:
        await self._torrent_action(Method.TORRENT_REANNOUNCE, ids)

    async def torrent_set(self, ids: IdsLike, args: TorrentSetArgs) -> None:
        arguments = {"ids": Ids.coerce(ids), **args.to_arguments()}
        await self._invoke(Method.TORRENT_SET, arguments, expect_arguments=False)

    async def torrent_get(
        self,
        fields: Iterable[Union[TorrentField, str]],
        ids: Optional[IdsLike] = None,
    ) -> TorrentGetResult:
        """
        Fetches the requested fields of the selected torrents.

        Args:
            fields: Field names or `TorrentField` members.
            ids: Torrents to select; all torrents when omitted.

        Raises:
            UnknownFieldError: If a field name is not part of the protocol.
        """
        arguments: Dict[str, Any] = {
            "fields": [
                f if isinstance(f, TorrentField) else TorrentField.parse(f)
                for f in fields
            ]
        }
        if ids is not None:
            arguments["ids"] = Ids.coerce(ids)
        return await self._fetch(Method.TORRENT_GET, TorrentGetResult, arguments)

    async def torrent_add(self, args: TorrentAddArgs) -> TorrentAdded:
        """
        Adds a torrent from a filename/URL or from base64 metainfo.

        Raises:
            BothSourcesSpecifiedError: If both sources are set.
            NoSourceSpecifiedError: If neither source is set.
        """
        arguments = args.to_arguments()
        return await self._fetch(Method.TORRENT_ADD, TorrentAdded, arguments)

    async def torrent_remove(
        self, ids: IdsLike, delete_local_data: bool = False
    ) -> None:
        arguments = {"ids": Ids.coerce(ids), "delete-local-data": delete_local_data}
        await self._invoke(Method.TORRENT_REMOVE, arguments, expect_arguments=False)

    async def torrent_set_location(
        self, ids: IdsLike, location: str, move: bool = False
    ) -> None:
        arguments = {"ids": Ids.coerce(ids), "location": location, "move": move}
        await self._invoke(
            Method.TORRENT_SET_LOCATION, arguments, expect_arguments=False
        )

    async def torrent_rename_path(
        self, ids: IdsLike, path: str, name: str
    ) -> RenamedPath:
        arguments = {"ids": Ids.coerce(ids), "path": path, "name": name}
        return await self._fetch(Method.TORRENT_RENAME_PATH, RenamedPath, arguments)

    # Queue Methods
    async def queue_move_top(self, ids: IdsLike) -> None:
        await self._torrent_action(Method.QUEUE_MOVE_TOP, ids)

    async def queue_move_up(self, ids: IdsLike) -> None:
        await self._torrent_action(Method.QUEUE_MOVE_UP, ids)

    async def queue_move_down(self, ids: IdsLike) -> None:
        await self._torrent_action(Method.QUEUE_MOVE_DOWN, ids)

    async def queue_move_bottom(self, ids: IdsLike) -> None:
        await self._torrent_action(Method.QUEUE_MOVE_BOTTOM, ids)
