import json

import pytest

from trpc_cli.exceptions import (
    BadResponseError,
    DecodeError,
    NoArgumentsError,
    UnknownFieldError,
)
from trpc_cli.models.torrent import TorrentField
from trpc_cli.rpc.envelope import (
    Method,
    RpcRequest,
    RpcResponse,
    decode_response,
    encode_request,
    value_from_response,
)
from trpc_cli.rpc.ids import Ids


def test_absent_arguments_and_tag_are_omitted():
    body = encode_request(RpcRequest(Method.SESSION_STATS))
    assert json.loads(body) == {"method": "session-stats"}
    assert b"null" not in body


def test_arguments_with_typed_values_are_encoded_to_wire_forms():
    request = RpcRequest(
        Method.TORRENT_GET,
        {"fields": [TorrentField.ID, TorrentField.PEER_LIMIT], "ids": Ids.single(3)},
        tag=12,
    )
    assert json.loads(encode_request(request)) == {
        "method": "torrent-get",
        "arguments": {"fields": ["id", "peer-limit"], "ids": 3},
        "tag": 12,
    }


def test_sentinel_ids_encode_as_string():
    request = RpcRequest(Method.TORRENT_START, {"ids": Ids()})
    assert json.loads(encode_request(request))["arguments"]["ids"] == "recently-active"


def test_unserializable_argument_raises_type_error():
    with pytest.raises(TypeError):
        encode_request(RpcRequest(Method.TORRENT_GET, {"fields": object()}))


def test_method_parse():
    assert Method.parse("session-stats") is Method.SESSION_STATS
    assert Method.parse("TORRENT_START_NOW") is Method.TORRENT_START_NOW
    with pytest.raises(UnknownFieldError):
        Method.parse("torrent-explode")


def test_decode_success_envelope():
    response = decode_response(
        b'{"result": "success", "arguments": {"torrentCount": 3}, "tag": 5}'
    )
    assert response.is_success
    assert response.arguments == {"torrentCount": 3}
    assert response.tag == 5


@pytest.mark.parametrize(
    "body",
    [
        b"<html>409: Conflict</html>",
        b"",
        b'{"arguments": {}}',
        b'{"result": "success", "tag": "not-a-number"}',
        b'{"result": "success", "tag": "7"}',
        b'{"result": "success", "tag": 7.5}',
        b'{"result": 0}',
        b"[1, 2]",
    ],
)
def test_decode_rejects_malformed_envelopes(body):
    with pytest.raises(DecodeError):
        decode_response(body)


def test_value_from_response_returns_arguments_on_success():
    response = RpcResponse(result="success", arguments={"path": "/data"})
    assert value_from_response(response) == {"path": "/data"}


def test_value_from_response_passes_failure_message_verbatim():
    response = RpcResponse(result="error: duplicate")
    with pytest.raises(BadResponseError) as exc_info:
        value_from_response(response)
    assert exc_info.value.message == "error: duplicate"


def test_missing_arguments_depend_on_expectation():
    response = RpcResponse(result="success")
    with pytest.raises(NoArgumentsError):
        value_from_response(response)
    assert value_from_response(response, expect_arguments=False) is None


def test_failure_wins_over_missing_arguments():
    with pytest.raises(BadResponseError):
        value_from_response(RpcResponse(result="no such method"), expect_arguments=False)
