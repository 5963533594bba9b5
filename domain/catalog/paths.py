# domain/catalog/paths.py
from __future__ import annotations

from typing import Any, Iterable, Optional, Union

PLATFORM_DOMAINS = ("storinka.menu", "storinka.delivery")


def proper_id(item: Any) -> str:
    """URL에 쓰는 식별자: slug 우선, 없으면 hash_id."""
    return getattr(item, "slug", None) or getattr(item, "hash_id", "") or str(item.id)


def is_custom_domain(domain: Optional[str], extra_domains: Iterable[str] = ()) -> bool:
    d = (domain or "").strip().lower()
    known = {*PLATFORM_DOMAINS, *(x.strip().lower() for x in extra_domains if x)}
    return d not in known


def app_path(path: str, *, cafe_id: Union[int, str, None], custom_domain: bool) -> str:
    """
    커스텀 도메인: /{path}
    플랫폼 도메인: /{cafe_id}/{path}
    """
    p = (path or "").strip().strip("/")
    if custom_domain:
        return f"/{p}"
    if not p:
        return f"/{cafe_id}"
    return f"/{cafe_id}/{p}"
