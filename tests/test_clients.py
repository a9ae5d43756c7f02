import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from catalog.clients import DeviceStoreError, ReachabilityClient, RemoteStoreClient, RemoteStoreError
from catalog.clients.remote_store_client import decode_document, decode_value

FIRESTORE_DOCUMENT = {
    "name": "projects/demo/databases/(default)/documents/businesses/bus-a1-1",
    "fields": {
        "name": {"stringValue": "GameTime Arcade"},
        "rating": {"doubleValue": 4.5},
        "reviews": {"integerValue": "120"},
        "open": {"booleanValue": True},
        "website": {"nullValue": None},
        "relatedIdeaIds": {"arrayValue": {"values": [{"stringValue": "a1"}]}},
        "location": {"mapValue": {"fields": {"city": {"stringValue": "New York"}}}},
    },
}


def test_decode_document_flattens_typed_values():
    record = decode_document(FIRESTORE_DOCUMENT)

    assert record == {
        "id": "bus-a1-1",
        "name": "GameTime Arcade",
        "rating": 4.5,
        "reviews": 120,
        "open": True,
        "website": None,
        "relatedIdeaIds": ["a1"],
        "location": {"city": "New York"},
    }


def test_decode_document_keeps_explicit_id_field():
    document = {"name": "projects/p/databases/(default)/documents/products/doc-7",
                "fields": {"id": {"stringValue": "prod-1"}}}

    assert decode_document(document)["id"] == "prod-1"


def test_decode_empty_array():
    assert decode_value({"arrayValue": {}}) == []


def test_decode_rejects_unknown_value_type():
    with pytest.raises(RemoteStoreError):
        decode_value({"geoPointValue": {"latitude": 1, "longitude": 2}})


@pytest.mark.asyncio
async def test_list_documents_decodes_every_document():
    client = RemoteStoreClient(project_id="demo", api_key=None)

    with patch.object(client, "_get_json", AsyncMock(return_value={"documents": [FIRESTORE_DOCUMENT]})) as get_json:
        records = await client.list_documents("businesses")

    assert [r["id"] for r in records] == ["bus-a1-1"]
    url = get_json.await_args.args[0]
    assert url.endswith("/projects/demo/databases/(default)/documents/businesses")


@pytest.mark.asyncio
async def test_list_documents_of_missing_collection_is_empty():
    client = RemoteStoreClient(project_id="demo", api_key=None)

    with patch.object(client, "_get_json", AsyncMock(return_value=None)):
        assert await client.list_documents("products") == []


@pytest.mark.asyncio
async def test_get_document_miss_returns_none():
    client = RemoteStoreClient(project_id="demo", api_key="k")

    with patch.object(client, "_get_json", AsyncMock(return_value=None)) as get_json:
        assert await client.get_document("businesses", "nope") is None

    assert get_json.await_args.args[0].endswith("/documents/businesses/nope")
    assert get_json.await_args.args[1] == {"key": "k"}


@pytest.mark.asyncio
async def test_device_store_round_trip(store):
    assert await store.get("favorites") is None

    await store.set("favorites", "{}")
    await store.set("favorites", '{"date": ["a1"]}')

    assert await store.get("favorites") == '{"date": ["a1"]}'
    assert await store.keys() == ["favorites"]

    await store.remove("favorites")
    await store.remove("favorites")
    assert await store.get("favorites") is None


@pytest.mark.asyncio
async def test_device_store_rejects_non_string_values(store):
    with pytest.raises(TypeError):
        await store.set("favorites", {"date": []})


@pytest.mark.asyncio
async def test_device_store_wraps_sqlite_errors(tmp_path):
    from catalog.clients import DeviceStore

    # A directory cannot be opened as a database file
    broken = DeviceStore(str(tmp_path))

    with pytest.raises(DeviceStoreError):
        await broken.get("favorites")


@pytest.mark.asyncio
async def test_reachability_returns_true_on_first_reachable_host():
    client = ReachabilityClient(hosts=[("10.255.255.1", 53), ("1.1.1.1", 53)])

    with patch.object(client, "_try_connect", AsyncMock(side_effect=[False, True])) as try_connect:
        assert await client.is_connected() is True

    assert try_connect.await_count == 2


@pytest.mark.asyncio
async def test_reachability_without_hosts_is_offline():
    assert await ReachabilityClient(hosts=[]).is_connected() is False


def test_decode_rejects_malformed_integer():
    with pytest.raises(RemoteStoreError, match="integerValue"):
        decode_value({"integerValue": "abc"})


@pytest.mark.parametrize("value", ["plain", {"arrayValue": {"values": "x"}}, {"mapValue": {"fields": []}}])
def test_decode_rejects_malformed_typed_values(value):
    with pytest.raises(RemoteStoreError):
        decode_value(value)


@pytest.mark.asyncio
async def test_list_documents_rejects_non_object_documents():
    client = RemoteStoreClient(project_id="demo", api_key=None)

    with patch.object(client, "_get_json", AsyncMock(return_value={"documents": [["x"]]})):
        with pytest.raises(RemoteStoreError):
            await client.list_documents("businesses")


def fake_session(status=200, body=None, json_error=None):
    """aiohttp-shaped session whose single GET answers with the given body."""
    resp = MagicMock(status=status)
    resp.json = AsyncMock(return_value=body, side_effect=json_error)
    resp.text = AsyncMock(return_value="")
    session = MagicMock(closed=False)
    session.get.return_value.__aenter__ = AsyncMock(return_value=resp)
    session.get.return_value.__aexit__ = AsyncMock(return_value=False)
    return session


@pytest.mark.asyncio
async def test_non_json_body_raises_remote_store_error():
    client = RemoteStoreClient(project_id="demo", api_key=None)
    client._session = fake_session(json_error=json.JSONDecodeError("Expecting value", "<html>", 0))

    with pytest.raises(RemoteStoreError, match="Unreadable"):
        await client.list_documents("businesses")


@pytest.mark.asyncio
async def test_non_object_json_body_raises_remote_store_error():
    client = RemoteStoreClient(project_id="demo", api_key=None)
    client._session = fake_session(body=[{"name": "x"}])

    with pytest.raises(RemoteStoreError, match="JSON object"):
        await client.list_documents("businesses")


@pytest.mark.asyncio
async def test_error_status_raises_remote_store_error():
    client = RemoteStoreClient(project_id="demo", api_key=None)
    client._session = fake_session(status=503)

    with pytest.raises(RemoteStoreError, match="503"):
        await client.get_document("businesses", "bus-a1-1")


@pytest.mark.asyncio
async def test_reachability_ignores_errors_while_closing_the_connection():
    writer = MagicMock()
    writer.wait_closed = AsyncMock(side_effect=ConnectionResetError("reset by peer"))
    client = ReachabilityClient(hosts=[("1.1.1.1", 53)])

    with patch("catalog.clients.reachability.asyncio.open_connection", AsyncMock(return_value=(MagicMock(), writer))):
        assert await client.is_connected() is True

    writer.close.assert_called_once()
