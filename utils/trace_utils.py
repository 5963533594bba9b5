# utils/trace_utils.py
from __future__ import annotations

from typing import Any, Dict, List


def snapshot_summary(snapshot: Any) -> Dict[str, Any]:
    """
    스냅샷 로그용 요약. 엔티티 본문은 빼고 식별자/개수만.
    """
    if snapshot is None:
        return {"_snapshot": None}

    out: Dict[str, Any] = {
        "id": getattr(snapshot, "id", None),
        "hash_id": getattr(snapshot, "hash_id", None),
        "update_version": getattr(snapshot, "update_version", None),
    }
    for k in ["menus", "categories", "dishes", "options", "tags", "discounts", "sets", "advertisements"]:
        items = getattr(snapshot, k, None)
        out[f"{k}_count"] = len(items) if isinstance(items, list) else None
    return out


def pricing_summary(pricing: Any, max_failures: int = 20) -> Dict[str, Any]:
    """
    카트 계산 결과 요약.
    - 실패 라인은 (position, item_type, item_id, error_type) 만 최대 max_failures개
    """
    lines = getattr(pricing, "lines", None) or []
    failures = getattr(pricing, "failures", None) or []

    failed: List[Dict[str, Any]] = []
    for f in failures[:max_failures]:
        line = getattr(f, "line", None)
        failed.append({
            "position": getattr(f, "position", None),
            "item_type": getattr(line, "item_type", None),
            "item_id": getattr(line, "item_id", None),
            "error_type": type(getattr(f, "error", None)).__name__,
        })

    out: Dict[str, Any] = {
        "lines": len(lines),
        "failures_count": len(failures),
        "total": getattr(pricing, "total", None),
        "total_after_discounts": getattr(pricing, "total_after_discounts", None),
    }
    if failed:
        out["failures"] = failed
        if len(failures) > max_failures:
            out["failures_truncated"] = True
    return out
