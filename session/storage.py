# session/storage.py
from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

import redis

from utils.logging import log_event


class StorageError(RuntimeError):
    """storage 백엔드 장애 (redis 연결 끊김 등)."""


class KeyValueStorage:
    """
    카트/언어 상태 영속화용 KV 인터페이스.
    - 값은 JSON 직렬화 가능한 것만
    - 인덱스 캐시 용도로는 쓰지 않는다
    - 백엔드 장애는 StorageError 로 올린다
    """

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    """테스트/개발용 인메모리 storage."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        # redis 구현과 동일하게 JSON 왕복 (직렬화 불가 값은 여기서 바로 실패)
        self._data[key] = json.dumps(value, ensure_ascii=False)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class RedisStorage(KeyValueStorage):
    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        key_prefix: str = "catalog:cart:",
        ttl_seconds: int = 60 * 60 * 6,  # 6시간 (활동 없으면 자동 삭제)
        client: Optional[Any] = None,
    ):
        self.r = client if client is not None else redis.Redis.from_url(redis_url, decode_responses=True)
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds

    def _key(self, key: str) -> str:
        k = (key or "").strip()
        if not k:
            raise ValueError("storage key required")
        return f"{self.key_prefix}{k}"

    def get(self, key: str) -> Optional[Any]:
        k = self._key(key)
        try:
            raw = self.r.get(k)
        except redis.RedisError as e:
            raise StorageError(f"redis get failed: {k}") from e
        if not raw:
            return None
        try:
            value = json.loads(raw)
        except ValueError as e:
            log_event(None, "storage_corrupt", {"redis_key": k, "error": e})
            return None
        # TTL 갱신(슬라이딩: 조회 시 수명 연장)
        try:
            self.r.expire(k, self.ttl_seconds)
        except redis.RedisError as e:
            raise StorageError(f"redis expire failed: {k}") from e
        return value

    def set(self, key: str, value: Any) -> None:
        k = self._key(key)
        raw = json.dumps(value, ensure_ascii=False)
        try:
            self.r.set(k, raw)
            self.r.expire(k, self.ttl_seconds)
        except redis.RedisError as e:
            raise StorageError(f"redis set failed: {k}") from e

    def remove(self, key: str) -> None:
        k = self._key(key)
        try:
            self.r.delete(k)
        except redis.RedisError as e:
            raise StorageError(f"redis delete failed: {k}") from e


def default_storage() -> KeyValueStorage:
    """
    env(CART_REDIS_URL)이 있으면 redis, 없으면 인메모리.
    """
    redis_url = os.getenv("CART_REDIS_URL", "").strip()
    if not redis_url:
        return MemoryStorage()
    return RedisStorage(
        redis_url=redis_url,
        key_prefix=os.getenv("CART_KEY_PREFIX", "catalog:cart:"),
        ttl_seconds=int(os.getenv("CART_TTL_SECONDS", str(60 * 60 * 6))),
    )
