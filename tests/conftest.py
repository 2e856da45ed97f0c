"""Pytest hooks and fixtures."""

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

import pytest
from multidict import CIMultiDict, CIMultiDictProxy

from trpc_cli.rpc.client import TransmissionClient
from trpc_cli.rpc.transport import TransportResponse

URL = "http://daemon.test/transmission/rpc"


def make_response(
    status: int = 200,
    body: Any = None,
    headers: Mapping[str, str] | None = None,
) -> TransportResponse:
    """Builds a transport response; dict bodies are JSON encoded."""
    if isinstance(body, (dict, list)):
        raw = json.dumps(body).encode("utf-8")
    elif isinstance(body, str):
        raw = body.encode("utf-8")
    else:
        raw = body or b""
    return TransportResponse(
        status=status,
        headers=CIMultiDictProxy(CIMultiDict(headers or {})),
        body=raw,
    )


def success(arguments: dict | None = None) -> TransportResponse:
    envelope: dict[str, Any] = {"result": "success"}
    if arguments is not None:
        envelope["arguments"] = arguments
    return make_response(200, envelope)


@dataclass
class SentRequest:
    uri: str
    headers: dict[str, str]
    body: bytes

    @property
    def envelope(self) -> dict[str, Any]:
        return json.loads(self.body)


@dataclass
class StubTransport:
    """Replays queued responses and records every exchange."""

    responses: list[TransportResponse | Exception] = field(default_factory=list)
    sent: list[SentRequest] = field(default_factory=list)
    closed: bool = False

    def queue(self, *responses: TransportResponse | Exception) -> "StubTransport":
        self.responses.extend(responses)
        return self

    async def send(self, uri, headers, body) -> TransportResponse:
        self.sent.append(SentRequest(uri, dict(headers), body))
        if not self.responses:
            raise AssertionError("Unexpected exchange: no response queued.")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def transport() -> StubTransport:
    return StubTransport()


@pytest.fixture
def client(transport: StubTransport) -> TransmissionClient:
    return TransmissionClient(URL, transport=transport)
