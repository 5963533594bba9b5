from __future__ import annotations

from typing import Dict, Optional

import pytest
import redis

from session.storage import MemoryStorage, RedisStorage, StorageError, default_storage


class FakeRedis:
    """get/set/expire/delete 만 흉내내는 테스트 더블."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.ttl: Dict[str, int] = {}

    def get(self, k: str) -> Optional[str]:
        return self.data.get(k)

    def set(self, k: str, v: str) -> None:
        self.data[k] = v

    def expire(self, k: str, seconds: int) -> None:
        self.ttl[k] = seconds

    def delete(self, k: str) -> None:
        self.data.pop(k, None)


def test_redis_storage_json_round_trip():
    fake = FakeRedis()
    st = RedisStorage(key_prefix="t:", ttl_seconds=60, client=fake)

    st.set("cart", [{"item_id": 1}])
    assert fake.data["t:cart"] == '[{"item_id": 1}]'
    assert fake.ttl["t:cart"] == 60
    assert st.get("cart") == [{"item_id": 1}]

    st.remove("cart")
    assert st.get("cart") is None


def test_redis_storage_corrupt_value_is_none():
    fake = FakeRedis()
    fake.data["t:cart"] = "{not json"
    st = RedisStorage(key_prefix="t:", client=fake)
    assert st.get("cart") is None


def test_redis_storage_requires_key():
    st = RedisStorage(client=FakeRedis())
    with pytest.raises(ValueError):
        st.set("  ", 1)


class DownRedis(FakeRedis):
    def get(self, k):
        raise redis.ConnectionError("connection refused")

    def set(self, k, v):
        raise redis.TimeoutError("timeout")

    def delete(self, k):
        raise redis.ConnectionError("connection refused")


def test_redis_errors_become_storage_error():
    st = RedisStorage(client=DownRedis())
    with pytest.raises(StorageError):
        st.get("cart")
    with pytest.raises(StorageError):
        st.set("cart", [])
    with pytest.raises(StorageError):
        st.remove("cart")


def test_memory_storage():
    st = MemoryStorage()
    assert st.get("x") is None
    st.set("x", {"a": [1, 2]})
    assert st.get("x") == {"a": [1, 2]}
    st.remove("x")
    st.remove("x")
    assert st.get("x") is None


def test_default_storage_without_redis_url(monkeypatch):
    monkeypatch.delenv("CART_REDIS_URL", raising=False)
    assert isinstance(default_storage(), MemoryStorage)


def test_default_storage_with_redis_url(monkeypatch):
    monkeypatch.setenv("CART_REDIS_URL", "redis://localhost:6379/5")
    monkeypatch.setenv("CART_KEY_PREFIX", "x:")
    st = default_storage()
    assert isinstance(st, RedisStorage)
    assert st.key_prefix == "x:"
