# domain/analytics/reporter.py
from __future__ import annotations

import base64
import os
import re
import uuid
from enum import IntEnum
from typing import Any, Dict, Optional, Set, Tuple

import requests

from session.storage import KeyValueStorage, MemoryStorage, StorageError
from utils.logging import log_event

TID_STORAGE_KEY = "__anal_tid"
_TID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE)


class ItemType(IntEnum):
    OPEN_CAFE = 100
    OPEN_INFO = 102

    OPEN_MENU = 200

    OPEN_CATEGORY = 300
    OPEN_CATEGORY_SWIPE = 301

    OPEN_DISH = 400
    OPEN_DISH_FROM_SEARCH = 401


def _encode_tid(tid: str) -> str:
    return base64.b64encode(tid.encode("utf-8")).decode("ascii")


def _decode_tid(raw: Any) -> Optional[str]:
    if not isinstance(raw, str) or not raw:
        return None
    try:
        tid = base64.b64decode(raw.encode("ascii"), validate=True).decode("utf-8")
    except ValueError:
        return None
    return tid if _TID_RE.match(tid) else None


def tracking_id(storage: KeyValueStorage) -> str:
    """
    클라이언트 추적 id. storage에 base64로 보관.
    없거나 깨졌으면 새로 발급해서 덮어쓴다.
    """
    tid = _decode_tid(storage.get(TID_STORAGE_KEY))
    if tid is None:
        tid = str(uuid.uuid4())
        storage.set(TID_STORAGE_KEY, _encode_tid(tid))
    return tid


class EventReporter:
    """
    화면 이벤트(카페/메뉴/카테고리/디시 열람) 리포터.
    - fire-and-forget: 실패해도 예외를 올리지 않는다 (가격 계산/검색은 리포팅 결과에 의존 X)
    - 같은 (kind, id) 는 프로세스 수명 동안 1번만 push
    """

    def __init__(
        self,
        enable: Optional[bool] = None,
        api_url: Optional[str] = None,
        api_version: Optional[str] = None,
        storage: Optional[KeyValueStorage] = None,
        timeout: float = 3.0,
        session: Optional[requests.Session] = None,
    ):
        if enable is None:
            enable = os.getenv("ANALYTICS_ENABLE", "false").lower() == "true"
        self.enable = enable
        self.api_url = (api_url or os.getenv("ANALYTICS_API_URL") or "https://analytics.storinka.menu").rstrip("/")
        self.api_version = str(api_version or os.getenv("ANALYTICS_API_VERSION") or "1")
        self.storage = storage or MemoryStorage()
        self.timeout = timeout
        self.http = session or requests.Session()
        self._seen: Set[Tuple[int, int]] = set()

    def _invoke(self, name: str, params: Dict[str, Any]) -> bool:
        url = f"{self.api_url}/{self.api_version}/{name}"
        try:
            body = {"tid": tracking_id(self.storage), **params}
            r = self.http.patch(url, json=body, timeout=self.timeout)
        except (requests.RequestException, StorageError) as e:
            log_event(None, "analytics_error", {"name": name, "params": params, "error": e})
            return False
        if not r.ok:
            log_event(None, "analytics_error", {"name": name, "params": params, "http_status": r.status_code})
            return False
        return True

    def report(self, kind: ItemType, entity_id: int) -> bool:
        """push. 이미 보낸 (kind, id) 거나 비활성이면 False."""
        if not self.enable:
            return False
        key = (int(kind), int(entity_id))
        if key in self._seen:
            return False
        self._seen.add(key)
        return self._invoke("push", {"ity": int(kind), "iid": int(entity_id)})

    def report_alive(self, kind: ItemType, entity_id: int) -> bool:
        """체류 heartbeat. dedup 없음."""
        if not self.enable:
            return False
        return self._invoke("pushAlive", {"ity": int(kind), "iid": int(entity_id)})
