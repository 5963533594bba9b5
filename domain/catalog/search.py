# domain/catalog/search.py
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, List, Optional

from domain.catalog.index import CatalogIndex
from domain.catalog.query import CatalogQuery
from domain.catalog.schema import Cafe

_WS = re.compile(r"\s+")


def tokenize(text: Optional[str]) -> List[str]:
    """소문자 + 공백 분리. 빈 문자열은 [""] (-> 모든 이름에 매칭됨)."""
    return _WS.split((text or "").strip().lower())


def tokens_match(query_tokens: List[str], name_tokens: List[str]) -> bool:
    """양방향 부분 문자열 포함 (prefix 매칭보다 관대함)."""
    for q in query_tokens:
        for n in name_tokens:
            if q in n or n in q:
                return True
    return False


@dataclass(frozen=True)
class CategoryMatch:
    category_id: int
    dishes_ids: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class SearchResult:
    query: str
    categories: List[CategoryMatch] = field(default_factory=list)
    categories_count: int = 0
    dishes_count: int = 0


def search(
    snapshot: Optional[Cafe],
    query: str,
    *,
    menu: Any = None,
    index: Optional[CatalogIndex] = None,
) -> SearchResult:
    """
    카테고리/메뉴명 텍스트 검색.
    - 카테고리명이 매칭되면 카테고리 결과에 포함, 그 안의 dish는 같은 규칙으로 필터
    - 카테고리명이 안 맞으면 dish가 맞더라도 결과에 없음
    - menu 지정 시 해당 메뉴의 카테고리만 대상
    """
    q = CatalogQuery(snapshot, index)
    query_tokens = tokenize(query)

    if menu is not None:
        candidates = q.resolve_menu_categories(menu)
    else:
        candidates = list(snapshot.categories) if snapshot is not None else []

    matches: List[CategoryMatch] = []
    dishes_count = 0
    for category in candidates:
        if not tokens_match(query_tokens, tokenize(category.name)):
            continue
        dishes_ids = [
            dish.id
            for dish in q.resolve_category_dishes(category)
            if tokens_match(query_tokens, tokenize(dish.name))
        ]
        matches.append(CategoryMatch(category_id=category.id, dishes_ids=dishes_ids))
        dishes_count += len(dishes_ids)

    return SearchResult(
        query=query or "",
        categories=matches,
        categories_count=len(matches),
        dishes_count=dishes_count,
    )
