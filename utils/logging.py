# utils/logging.py
from __future__ import annotations

import dataclasses
import json
import logging
import os
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

SENSITIVE_KEYS = {
    "authorization",
    "api_key",
    "password",
    "secret",
    "cookie",
    "tid",
}

MAX_STR = 800          # 문자열 최대 길이
MAX_LIST = 50          # 리스트 최대 길이
MAX_DICT_KEYS = 80     # dict key 최대 개수


def _truncate_str(s: str) -> str:
    if len(s) <= MAX_STR:
        return s
    return s[:MAX_STR] + "...(truncated)"


def _sanitize(obj: Any, depth: int = 0) -> Any:
    """
    JSON 직렬화 가능 + 로그 폭주 방지 + 민감키 마스킹.
    """
    if depth > 6:
        return "...(max_depth)"

    if obj is None:
        return None

    if isinstance(obj, Enum):
        return _sanitize(obj.value, depth)
    if isinstance(obj, (bool, int, float)):
        return obj
    if isinstance(obj, Decimal):
        # 금액은 문자열로 (float 변환 X)
        return str(obj)
    if isinstance(obj, str):
        return _truncate_str(obj)

    if isinstance(obj, (bytes, bytearray)):
        return f"<bytes:{len(obj)}>"

    if isinstance(obj, dict):
        out: Dict[str, Any] = {}
        keys = list(obj.keys())
        if len(keys) > MAX_DICT_KEYS:
            keys = keys[:MAX_DICT_KEYS]
            out["_truncated_keys"] = True

        for k in keys:
            lk = str(k).lower()
            if lk in SENSITIVE_KEYS:
                out[str(k)] = "***"
            else:
                out[str(k)] = _sanitize(obj.get(k), depth + 1)
        return out

    if isinstance(obj, (list, tuple, set, frozenset)):
        lst = list(obj)
        truncated = False
        if len(lst) > MAX_LIST:
            lst = lst[:MAX_LIST]
            truncated = True
        out_list = [_sanitize(x, depth + 1) for x in lst]
        if truncated:
            out_list.append("...(truncated)")
        return out_list

    # pydantic 모델 (스냅샷 엔티티, CartLineInput 등)
    if hasattr(obj, "model_dump"):
        try:
            return _sanitize(obj.model_dump(), depth + 1)
        except Exception:
            return str(obj)

    if isinstance(obj, Exception):
        return {"error_type": type(obj).__name__, "error_message": _truncate_str(str(obj))}

    # 가격 계산 결과 (CartLine, LineFailure 등 frozen dataclass)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: _sanitize(getattr(obj, f.name), depth + 1) for f in dataclasses.fields(obj)}

    return _truncate_str(str(obj))


logger = logging.getLogger("catalog")
_level = os.getenv("CATALOG_LOG_LEVEL", "INFO").strip().upper()
logger.setLevel(_level if isinstance(logging.getLevelName(_level), int) else "INFO")
logger.propagate = False  # ✅ 중복 출력 방지

if not logger.handlers:
    h = logging.StreamHandler()
    h.setLevel(logging.DEBUG)
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
    h.setFormatter(fmt)
    logger.addHandler(h)


def log_event(trace_id: Optional[str], stage: str, payload: Dict[str, Any], level: int = logging.INFO) -> None:
    """
    JSON 구조화 로그. (ELK/CloudWatch friendly)
    - trace_id가 없으면 "-" 로 기록 (백그라운드 작업: 인덱스 재빌드, analytics 등)
    """
    msg = {
        "trace_id": trace_id or "-",
        "stage": stage,
        "payload": _sanitize(payload),
    }
    logger.log(level, json.dumps(msg, ensure_ascii=False))
