from __future__ import annotations

import base64

import redis
import requests

from domain.analytics.reporter import TID_STORAGE_KEY, EventReporter, ItemType, tracking_id
from session.storage import MemoryStorage, RedisStorage, StorageError


class FakeResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code
        self.ok = status_code < 400


class FakeSession:
    def __init__(self, status_code=200, exc=None):
        self.status_code = status_code
        self.exc = exc
        self.calls = []

    def patch(self, url, json=None, timeout=None):
        self.calls.append((url, json))
        if self.exc is not None:
            raise self.exc
        return FakeResponse(self.status_code)


def _reporter(session, enable=True, storage=None):
    return EventReporter(
        enable=enable,
        api_url="https://analytics.example.test",
        api_version="1",
        storage=storage or MemoryStorage(),
        session=session,
    )


def test_report_is_deduplicated_per_kind_and_id():
    session = FakeSession()
    reporter = _reporter(session)

    assert reporter.report(ItemType.OPEN_DISH, 100) is True
    assert reporter.report(ItemType.OPEN_DISH, 100) is False
    assert reporter.report(ItemType.OPEN_DISH_FROM_SEARCH, 100) is True
    assert reporter.report(ItemType.OPEN_DISH, 101) is True

    assert len(session.calls) == 3
    url, body = session.calls[0]
    assert url == "https://analytics.example.test/1/push"
    assert body["ity"] == 400
    assert body["iid"] == 100
    assert "tid" in body


def test_report_alive_is_not_deduplicated():
    session = FakeSession()
    reporter = _reporter(session)
    reporter.report_alive(ItemType.OPEN_MENU, 1)
    reporter.report_alive(ItemType.OPEN_MENU, 1)
    assert [c[0] for c in session.calls] == ["https://analytics.example.test/1/pushAlive"] * 2


def test_disabled_reporter_sends_nothing():
    session = FakeSession()
    reporter = _reporter(session, enable=False)
    assert reporter.report(ItemType.OPEN_CAFE, 1) is False
    assert reporter.report_alive(ItemType.OPEN_CAFE, 1) is False
    assert session.calls == []


def test_failures_never_raise():
    reporter = _reporter(FakeSession(exc=requests.ConnectionError("offline")))
    assert reporter.report(ItemType.OPEN_CATEGORY, 5) is False

    reporter = _reporter(FakeSession(status_code=500))
    assert reporter.report(ItemType.OPEN_CATEGORY, 5) is False


def test_tracking_id_persisted_and_stable():
    storage = MemoryStorage()
    tid = tracking_id(storage)
    assert tracking_id(storage) == tid
    raw = storage.get(TID_STORAGE_KEY)
    assert base64.b64decode(raw).decode() == tid


def test_tracking_id_recreated_when_corrupt():
    storage = MemoryStorage()
    storage.set(TID_STORAGE_KEY, "%%%not-base64")
    tid = tracking_id(storage)
    assert tid != "%%%not-base64"
    assert tracking_id(storage) == tid

    storage.set(TID_STORAGE_KEY, base64.b64encode(b"not-a-uuid").decode())
    assert tracking_id(storage) != "not-a-uuid"


class DownStorage(MemoryStorage):
    def get(self, key):
        raise StorageError("storage down")


class DownRedis:
    def get(self, k):
        raise redis.ConnectionError("connection refused")

    def set(self, k, v):
        raise redis.ConnectionError("connection refused")

    def expire(self, k, seconds):
        raise redis.ConnectionError("connection refused")


def test_storage_failure_never_raises():
    session = FakeSession()
    reporter = _reporter(session, storage=DownStorage())
    assert reporter.report(ItemType.OPEN_DISH, 100) is False
    assert reporter.report_alive(ItemType.OPEN_DISH, 100) is False
    assert session.calls == []


def test_redis_outage_never_raises():
    reporter = _reporter(FakeSession(), storage=RedisStorage(client=DownRedis()))
    assert reporter.report(ItemType.OPEN_CAFE, 1) is False
