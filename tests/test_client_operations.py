import base64

import pytest
from conftest import make_response, success

from trpc_cli.exceptions import (
    BadResponseError,
    BothSourcesSpecifiedError,
    DecodeError,
    ImmutableSessionFieldError,
    NoArgumentsError,
    NoSourceSpecifiedError,
    UnknownFieldError,
)
from trpc_cli.models.torrent import TorrentAddArgs, TorrentField, TorrentSetArgs
from trpc_cli.rpc.ids import Ids

MAGNET = "magnet:?xt=urn:btih:6a0a9282c65fc6a1324e6e1605fe9bb9746c3aa8&dn=test%20dir"


@pytest.mark.asyncio
async def test_session_stats_decodes_partial_payload(client, transport):
    transport.queue(success({"torrentCount": 3}))

    stats = await client.session_stats()

    assert stats.torrent_count == 3
    assert stats.active_torrent_count is None
    assert transport.sent[0].envelope == {"method": "session-stats"}


@pytest.mark.asyncio
async def test_session_stats_decodes_nested_stats(client, transport):
    transport.queue(
        success(
            {
                "activeTorrentCount": 1,
                "downloadSpeed": 2048,
                "pausedTorrentCount": 2,
                "torrentCount": 3,
                "uploadSpeed": 1024,
                "cumulative-stats": {
                    "uploadedBytes": 10,
                    "downloadedBytes": 20,
                    "filesAdded": 4,
                    "sessionCount": 5,
                    "secondsActive": 600,
                },
                "current-stats": {"uploadedBytes": 1, "secondsActive": 60},
            }
        )
    )

    stats = await client.session_stats()

    assert stats.cumulative_stats.files_added == 4
    assert stats.current_stats.seconds_active == 60
    assert stats.download_speed == 2048


@pytest.mark.asyncio
async def test_failure_result_is_passed_through(client, transport):
    transport.queue(make_response(200, {"result": "error: duplicate"}))

    with pytest.raises(BadResponseError) as exc_info:
        await client.session_stats()

    assert exc_info.value.message == "error: duplicate"


@pytest.mark.asyncio
async def test_missing_payload_where_one_is_expected(client, transport):
    transport.queue(success())

    with pytest.raises(NoArgumentsError):
        await client.port_test()


@pytest.mark.asyncio
async def test_operations_without_payload_accept_missing_arguments(client, transport):
    transport.queue(success(), success())

    assert await client.session_close() is None
    assert await client.torrent_stop(Ids.single(1)) is None

    assert transport.sent[0].envelope == {"method": "session-close"}
    assert transport.sent[1].envelope == {
        "method": "torrent-stop",
        "arguments": {"ids": 1},
    }


@pytest.mark.asyncio
async def test_payload_of_wrong_shape_raises_decode_error(client, transport):
    transport.queue(success({"port-is-open": "maybe"}))

    with pytest.raises(DecodeError):
        await client.port_test()


@pytest.mark.asyncio
async def test_port_test_blocklist_and_free_space(client, transport):
    transport.queue(
        success({"port-is-open": True}),
        success({"blocklist-size": 4200}),
        success({"path": "/data", "size-bytes": 1073741824}),
    )

    assert (await client.port_test()).port_is_open is True
    assert (await client.blocklist_update()).blocklist_size == 4200
    free = await client.free_space("/data")

    assert free.size_bytes == 1073741824
    assert transport.sent[2].envelope == {
        "method": "free-space",
        "arguments": {"path": "/data"},
    }


@pytest.mark.asyncio
async def test_torrent_get_sends_fields_and_ids(client, transport):
    transport.queue(
        success(
            {
                "torrents": [
                    {
                        "id": 1,
                        "hashString": "6a0a9282c65fc6a1324e6e1605fe9bb9746c3aa8",
                        "peer-limit": 50,
                    }
                ]
            }
        )
    )

    result = await client.torrent_get(
        [TorrentField.ID, "hashstring", "peer_limit"],
        Ids.of(["6a0a9282c65fc6a1324e6e1605fe9bb9746c3aa8"]),
    )

    assert transport.sent[0].envelope == {
        "method": "torrent-get",
        "arguments": {
            "fields": ["id", "hashString", "peer-limit"],
            "ids": ["6a0a9282c65fc6a1324e6e1605fe9bb9746c3aa8"],
        },
    }
    torrent = result.torrents[0]
    assert torrent.id == 1
    assert torrent.hash_string == "6a0a9282c65fc6a1324e6e1605fe9bb9746c3aa8"
    assert torrent.peer_limit == 50
    assert torrent.name is None


@pytest.mark.asyncio
async def test_torrent_get_without_ids_omits_them(client, transport):
    transport.queue(success({"torrents": []}))

    result = await client.torrent_get([TorrentField.NAME])

    assert "ids" not in transport.sent[0].envelope["arguments"]
    assert result.torrents == []


@pytest.mark.asyncio
async def test_torrent_get_recently_active_reports_removed(client, transport):
    transport.queue(success({"torrents": [], "removed": [4, 5]}))

    result = await client.torrent_get(["id"], Ids.recently_active())

    assert transport.sent[0].envelope["arguments"]["ids"] == "recently-active"
    assert result.removed == [4, 5]


@pytest.mark.asyncio
async def test_unknown_field_fails_before_network(client, transport):
    with pytest.raises(UnknownFieldError):
        await client.torrent_get(["id", "colour"])

    assert transport.sent == []


@pytest.mark.asyncio
async def test_torrent_add_with_both_sources_never_reaches_network(
    client, transport, tmp_path
):
    torrent_file = tmp_path / "test dir.torrent"
    torrent_file.write_bytes(b"d4:infod4:name8:test diree")
    args = TorrentAddArgs.from_meta(torrent_file)
    args.filename = MAGNET

    with pytest.raises(BothSourcesSpecifiedError):
        await client.torrent_add(args)

    assert transport.sent == []


@pytest.mark.asyncio
async def test_torrent_add_without_source_never_reaches_network(client, transport):
    with pytest.raises(NoSourceSpecifiedError):
        await client.torrent_add(TorrentAddArgs(download_dir="/data"))

    assert transport.sent == []


@pytest.mark.asyncio
async def test_torrent_add_from_magnet_reports_duplicate(client, transport):
    transport.queue(
        success(
            {
                "torrent-duplicate": {
                    "id": 1,
                    "name": "test dir",
                    "hashString": "6a0a9282c65fc6a1324e6e1605fe9bb9746c3aa8",
                }
            }
        )
    )

    result = await client.torrent_add(
        TorrentAddArgs.from_file(MAGNET, download_dir="/data", paused=True)
    )

    assert transport.sent[0].envelope == {
        "method": "torrent-add",
        "arguments": {"filename": MAGNET, "download-dir": "/data", "paused": True},
    }
    assert result.torrent_added is None
    assert result.torrent_duplicate.name == "test dir"
    assert result.torrent.id == 1


@pytest.mark.asyncio
async def test_torrent_add_from_metainfo_sends_base64(client, transport, tmp_path):
    raw = b"d8:announce3:url4:infod4:name1:aee"
    torrent_file = tmp_path / "a.torrent"
    torrent_file.write_bytes(raw)
    transport.queue(success({"torrent-added": {"id": 2, "name": "a"}}))

    result = await client.torrent_add(TorrentAddArgs.from_meta(torrent_file))

    sent_arguments = transport.sent[0].envelope["arguments"]
    assert base64.b64decode(sent_arguments["metainfo"]) == raw
    assert "filename" not in sent_arguments
    assert result.torrent_added.id == 2


@pytest.mark.asyncio
async def test_torrent_remove_and_set_location(client, transport):
    transport.queue(success(), success())

    await client.torrent_remove([1, 2], delete_local_data=True)
    await client.torrent_set_location(3, "/new", move=True)

    assert transport.sent[0].envelope["arguments"] == {
        "ids": [1, 2],
        "delete-local-data": True,
    }
    assert transport.sent[1].envelope["arguments"] == {
        "ids": 3,
        "location": "/new",
        "move": True,
    }


@pytest.mark.asyncio
async def test_torrent_set_sends_only_given_attributes(client, transport):
    transport.queue(success())

    await client.torrent_set(
        Ids.single(1),
        TorrentSetArgs(download_limit=100, download_limited=True, peer_limit=20),
    )

    assert transport.sent[0].envelope == {
        "method": "torrent-set",
        "arguments": {
            "ids": 1,
            "downloadLimit": 100,
            "downloadLimited": True,
            "peer-limit": 20,
        },
    }


@pytest.mark.asyncio
async def test_torrent_rename_path(client, transport):
    transport.queue(success({"id": 1, "name": "new", "path": "old"}))

    result = await client.torrent_rename_path(1, "old", "new")

    assert transport.sent[0].envelope["arguments"] == {
        "ids": 1,
        "path": "old",
        "name": "new",
    }
    assert result.name == "new"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "operation, method",
    [
        ("torrent_start", "torrent-start"),
        ("torrent_start_now", "torrent-start-now"),
        ("torrent_verify", "torrent-verify"),
        ("torrent_reannounce", "torrent-reannounce"),
        ("queue_move_top", "queue-move-top"),
        ("queue_move_up", "queue-move-up"),
        ("queue_move_down", "queue-move-down"),
        ("queue_move_bottom", "queue-move-bottom"),
    ],
)
async def test_id_only_operations(client, transport, operation, method):
    transport.queue(success())

    await getattr(client, operation)(Ids.recently_active())

    assert transport.sent[0].envelope == {
        "method": method,
        "arguments": {"ids": "recently-active"},
    }


@pytest.mark.asyncio
async def test_session_get_with_fields(client, transport):
    transport.queue(
        success({"version": "4.0.5", "rpc-version": 17, "alt-speed-time-day": 127})
    )

    info = await client.session_get(["version", "rpc_version"])

    assert transport.sent[0].envelope["arguments"] == {
        "fields": ["version", "rpc-version"]
    }
    assert info.version == "4.0.5"
    assert info.rpc_version == 17
    assert info.model_extra == {"alt-speed-time-day": 127}


@pytest.mark.asyncio
async def test_session_set_sends_settings(client, transport):
    transport.queue(success())

    await client.session_set({"speed-limit-down": 500, "speed-limit-down-enabled": True})

    assert transport.sent[0].envelope == {
        "method": "session-set",
        "arguments": {"speed-limit-down": 500, "speed-limit-down-enabled": True},
    }


@pytest.mark.asyncio
async def test_session_set_rejects_read_only_fields(client, transport):
    with pytest.raises(ImmutableSessionFieldError, match="rpc-version"):
        await client.session_set({"rpc-version": 99, "peer-port": 51413})

    assert transport.sent == []


@pytest.mark.asyncio
async def test_session_set_rejects_read_only_fields_in_any_spelling(client, transport):
    with pytest.raises(ImmutableSessionFieldError, match="rpc-version"):
        await client.session_set({"rpc_version": 3})
    with pytest.raises(ImmutableSessionFieldError, match="Config-Dir"):
        await client.session_set({"Config_Dir": "/etc"})

    assert transport.sent == []


@pytest.mark.asyncio
async def test_session_set_sends_underscored_keys_with_dashes(client, transport):
    transport.queue(success())

    await client.session_set({"speed_limit_up": 80, "seedRatioLimit": 2.0})

    assert transport.sent[0].envelope["arguments"] == {
        "speed-limit-up": 80,
        "seedRatioLimit": 2.0,
    }
