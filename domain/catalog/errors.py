# domain/catalog/errors.py
from __future__ import annotations

from typing import Any, Optional


class CatalogError(Exception):
    """카탈로그 코어에서 발생하는 모든 에러의 베이스."""


class NotFound(CatalogError, LookupError):
    """
    스냅샷에서 엔티티를 찾지 못함.
    - 카트 라인 1개 / 조회 1건에 국한되는 에러 (프로세스 치명적 X)
    - 보통 스냅샷 교체(언어 변경/재조회) 후 id가 사라진 stale 카트에서 발생
    """

    kind = "item"

    def __init__(self, ref: Any, message: Optional[str] = None):
        self.ref = ref
        super().__init__(message or f"{self.kind} {ref!r} not found")


class ItemNotFound(NotFound):
    kind = "item"


class VariantNotFound(NotFound):
    kind = "variant"


class OptionItemNotFound(NotFound):
    kind = "option item"


class InvalidReference(CatalogError, ValueError):
    """
    호출 측 계약 위반 (예: variant id 0 으로 explicit variant 조회).
    stale 데이터가 아니라 caller 버그이므로 NotFound와 구분한다.
    """


class ApiError(CatalogError):
    """Catalog Fetch(원격 API)가 돌려준 구조화 에러."""

    NOT_FOUND_NAMES = frozenset({"cafe_not_found", "zone_not_found", "not_found"})

    def __init__(self, code: int, name: str, message: str):
        self.code = code
        self.name = name
        self.message = message
        super().__init__(f"[{code}] {name}: {message}")

    @property
    def is_not_found(self) -> bool:
        return (self.name or "").lower() in self.NOT_FOUND_NAMES
