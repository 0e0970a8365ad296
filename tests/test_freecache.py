from datetime import timedelta
from unittest.mock import MagicMock, call

import pytest

from layercache.freecache import FREECACHE_TYPE, FreecacheClientInterface, FreecacheStore
from layercache.store import (
    NotFound,
    Options,
    with_expiration,
    with_invalidate_tags,
    with_tags,
)


class MemoryClient(FreecacheClientInterface):
    def __init__(self) -> None:
        self.data: dict[bytes, tuple[bytes, int]] = {}

    def get(self, key: bytes) -> bytes:
        if key not in self.data:
            raise KeyError(key)
        return self.data[key][0]

    def ttl(self, key: bytes) -> int:
        if key not in self.data:
            raise KeyError(key)
        return self.data[key][1]

    def set(self, key: bytes, value: bytes, expire_seconds: int) -> None:
        self.data[key] = (value, expire_seconds)

    def delete(self, key: bytes) -> bool:
        return self.data.pop(key, None) is not None

    def clear(self) -> None:
        self.data.clear()


@pytest.fixture
def client():
    return MagicMock(spec=FreecacheClientInterface)


def test_new_freecache(client):
    store = FreecacheStore(client, with_expiration(timedelta(seconds=6)))
    assert store.client is client
    assert store.options == Options(expiration=timedelta(seconds=6))


def test_new_freecache_default_options(client):
    store = FreecacheStore(client)
    assert store.client is client
    assert store.options == Options()


def test_get(client):
    client.get.side_effect = {b"key1": b"val1", b"key2": b"val2"}.__getitem__
    store = FreecacheStore(client)

    assert store.get("key1") == b"val1"
    assert store.get("key2") == b"val2"


def test_get_not_found(client):
    client.get.side_effect = RuntimeError("value not found in store")
    store = FreecacheStore(client)

    with pytest.raises(NotFound) as info:
        store.get("key1")
    assert str(info.value) == "value not found in store"


def test_get_with_invalid_key(client):
    store = FreecacheStore(client)

    with pytest.raises(TypeError, match="key type not supported by Freecache store"):
        store.get(b"key1")
    client.get.assert_not_called()


def test_get_with_ttl(client):
    client.get.return_value = b"my-cache-value"
    client.ttl.return_value = 5
    store = FreecacheStore(client, with_expiration(timedelta(seconds=3)))

    value, ttl = store.get_with_ttl("my-key")

    assert value == b"my-cache-value"
    assert ttl == timedelta(seconds=5)
    client.ttl.assert_called_once_with(b"my-key")


def test_get_with_ttl_when_missing_item(client):
    client.get.side_effect = NotFound()
    store = FreecacheStore(client, with_expiration(timedelta(seconds=3)))

    with pytest.raises(NotFound):
        store.get_with_ttl("my-key")
    client.ttl.assert_not_called()


def test_get_with_ttl_when_error_at_ttl(client):
    client.get.return_value = b"my-cache-value"
    client.ttl.side_effect = NotFound()
    store = FreecacheStore(client, with_expiration(timedelta(seconds=3)))

    with pytest.raises(NotFound):
        store.get_with_ttl("my-key")
    client.ttl.assert_called_once_with(b"my-key")


def test_get_with_ttl_when_invalid_key(client):
    store = FreecacheStore(client)

    with pytest.raises(TypeError, match="key type not supported by Freecache store"):
        store.get_with_ttl(b"key1")


def test_set(client):
    store = FreecacheStore(client, with_expiration(timedelta(seconds=6)))
    store.set("my-key", b"my-cache-value", with_expiration(timedelta(seconds=6)))
    client.set.assert_called_once_with(b"my-key", b"my-cache-value", 6)


def test_set_with_default_options(client):
    store = FreecacheStore(client)
    store.set("my-key", b"my-cache-value")
    client.set.assert_called_once_with(b"my-key", b"my-cache-value", 0)


def test_set_uses_store_default_expiration(client):
    store = FreecacheStore(client, with_expiration(timedelta(seconds=6)))
    store.set("my-key", b"my-cache-value")
    client.set.assert_called_once_with(b"my-key", b"my-cache-value", 6)


def test_set_invalid_value(client):
    store = FreecacheStore(client, with_expiration(timedelta(seconds=6)))

    with pytest.raises(TypeError, match="value type not supported by Freecache store"):
        store.set("my-key", "my-cache-value", with_expiration(timedelta(seconds=6)))
    client.set.assert_not_called()


def test_set_invalid_size(client):
    client.set.side_effect = ValueError("")
    store = FreecacheStore(client, with_expiration(timedelta(seconds=6)))

    with pytest.raises(RuntimeError) as info:
        store.set("my-key", b"my-cache-value", with_expiration(timedelta(seconds=6)))
    assert str(info.value) == "size of key: my-key, value: 14, err: "


def test_set_invalid_key(client):
    store = FreecacheStore(client, with_expiration(timedelta(seconds=6)))

    with pytest.raises(TypeError, match="key type not supported by Freecache store"):
        store.set(1, b"my-cache-value", with_expiration(timedelta(seconds=6)))
    client.set.assert_not_called()


def test_delete(client):
    client.delete.return_value = True
    store = FreecacheStore(client)
    store.delete("key")
    client.delete.assert_called_once_with(b"key")


def test_delete_failed(client):
    client.delete.return_value = False
    store = FreecacheStore(client)

    with pytest.raises(LookupError) as info:
        store.delete("key")
    assert str(info.value) == "failed to delete key key"


def test_delete_invalid_key(client):
    store = FreecacheStore(client)

    with pytest.raises(TypeError, match="key type not supported by Freecache store"):
        store.delete(1)


def test_set_with_tags(client):
    client.get.side_effect = RuntimeError("value not found in store")
    store = FreecacheStore(client, with_expiration(timedelta(seconds=6)))

    store.set(
        "my-key",
        b"my-cache-value",
        with_expiration(timedelta(seconds=6)),
        with_tags(["tag1"]),
    )

    client.get.assert_called_once_with(b"freecache_tag_tag1")
    assert client.set.call_args_list == [
        call(b"my-key", b"my-cache-value", 6),
        call(b"freecache_tag_tag1", b"my-key", 2592000),
    ]


def test_invalidate(client):
    client.get.return_value = b"my-key"
    client.delete.return_value = True
    store = FreecacheStore(client, with_expiration(timedelta(seconds=6)))

    store.invalidate(with_invalidate_tags(["tag1"]))

    assert client.delete.call_args_list == [call(b"my-key"), call(b"freecache_tag_tag1")]


def test_tags_already_present(client):
    client.get.return_value = b"key1,key2"
    store = FreecacheStore(client, with_expiration(timedelta(seconds=6)))

    store.set(
        "my-key",
        b"my-cache-value",
        with_expiration(timedelta(seconds=6)),
        with_tags(["tag1"]),
    )

    assert client.set.call_args_list == [
        call(b"my-key", b"my-cache-value", 6),
        call(b"freecache_tag_tag1", b"key1,key2,my-key", 2592000),
    ]


def test_tags_refresh_time(client):
    client.get.return_value = b"my-key"
    store = FreecacheStore(client, with_expiration(timedelta(seconds=6)))

    store.set(
        "my-key",
        b"my-cache-value",
        with_expiration(timedelta(seconds=6)),
        with_tags(["tag1"]),
    )

    assert client.set.call_args_list == [
        call(b"my-key", b"my-cache-value", 6),
        call(b"freecache_tag_tag1", b"my-key", 2592000),
    ]


def test_invalidate_multiple_keys(client):
    client.get.return_value = b"my-key,key1,key2"
    client.delete.return_value = True
    store = FreecacheStore(client, with_expiration(timedelta(seconds=6)))

    store.invalidate(with_invalidate_tags(["tag1"]))

    assert client.delete.call_args_list == [
        call(b"my-key"),
        call(b"key1"),
        call(b"key2"),
        call(b"freecache_tag_tag1"),
    ]


def test_failed_invalidate_multiple_keys(client):
    client.get.return_value = b"my-key,key1,key2"
    client.delete.return_value = False
    store = FreecacheStore(client, with_expiration(timedelta(seconds=6)))

    with pytest.raises(LookupError) as info:
        store.invalidate(with_invalidate_tags(["tag1"]))
    assert str(info.value) == "failed to delete key my-key"
    assert client.delete.call_args_list == [call(b"my-key")]


def test_failed_invalidate_pattern(client):
    client.get.return_value = b"my-key,key1,key2"
    client.delete.side_effect = [True, True, True, False]
    store = FreecacheStore(client, with_expiration(timedelta(seconds=6)))

    with pytest.raises(LookupError) as info:
        store.invalidate(with_invalidate_tags(["tag1"]))
    assert str(info.value) == "failed to delete key freecache_tag_tag1"


def test_clear_all(client):
    store = FreecacheStore(client)
    store.clear()
    client.clear.assert_called_once_with()


def test_get_type(client):
    assert FreecacheStore(client).get_type() == FREECACHE_TYPE == "freecache"


def test_round_trip_with_memory_client():
    memory = MemoryClient()
    store = FreecacheStore(memory, with_expiration(timedelta(seconds=10)))

    store.set("a", b"1", with_tags(["t"]))
    store.set("b", b"2", with_tags(["t"]))
    store.set("c", b"3")

    assert store.get_with_ttl("a") == (b"1", timedelta(seconds=10))
    assert memory.data[b"freecache_tag_t"] == (b"a,b", 2592000)

    store.invalidate(with_invalidate_tags(["t"]))

    with pytest.raises(NotFound):
        store.get("a")
    with pytest.raises(NotFound):
        store.get("freecache_tag_t")
    assert store.get("c") == b"3"