# domain/catalog/client.py
from __future__ import annotations

import os
import time
from typing import Any, Dict, Optional, Union

import requests

from domain.catalog.errors import ApiError
from domain.catalog.schema import Cafe
from utils.logging import log_event

DEFAULT_API_URL = "https://api.storinka.menu"
DEFAULT_API_VERSION = "3"


class CatalogFetcher:
    """
    Catalog Fetch 인터페이스.
    - 성공 시 스냅샷 전체(교체용)를 돌려준다
    - 실패 시 ApiError (code, name, message) 또는 transport 예외 그대로
    """

    def fetch(self, cafe_id: Union[int, str], language: Optional[str] = None) -> Cafe:
        raise NotImplementedError


class CatalogClient(CatalogFetcher):
    """`{api_url}/invoke/{api_version}/{name}` RPC 형태의 원격 API 클라이언트."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = (api_url or os.getenv("CATALOG_API_URL") or DEFAULT_API_URL).rstrip("/")
        self.api_version = str(api_version or os.getenv("CATALOG_API_VERSION") or DEFAULT_API_VERSION)
        self.timeout = float(timeout if timeout is not None else os.getenv("CATALOG_HTTP_TIMEOUT", "10"))
        self.http = session or requests.Session()

    def _url(self, name: str) -> str:
        return f"{self.api_url}/invoke/{self.api_version}/{name}"

    def invoke(self, name: str, params: Optional[Dict[str, Any]] = None, trace_id: Optional[str] = None) -> Any:
        url = self._url(name)
        t0 = time.perf_counter()

        r = self.http.post(
            url,
            json=params or {},
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            timeout=self.timeout,
        )
        duration_ms = int((time.perf_counter() - t0) * 1000)

        if not r.ok:
            try:
                body = r.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            err = ApiError(
                r.status_code,
                str(body.get("error") or "http_error"),
                str(body.get("message") or r.text[:800]),
            )
            log_event(trace_id, "api_error", {"name": name, "duration_ms": duration_ms, "error": err})
            raise err

        log_event(trace_id, "api_ok", {"name": name, "duration_ms": duration_ms, "status": r.status_code})
        payload = r.json()
        return payload.get("result") if isinstance(payload, dict) else None

    def fetch(self, cafe_id: Union[int, str], language: Optional[str] = None, trace_id: Optional[str] = None) -> Cafe:
        params: Dict[str, Any] = {"id": cafe_id}
        if language:
            params["language"] = language
        result = self.invoke("getCafe", params, trace_id=trace_id)
        return Cafe.model_validate(result)
