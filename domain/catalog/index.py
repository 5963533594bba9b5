# domain/catalog/index.py
"""
스냅샷 인덱스 빌더.

id로만 서로를 참조하는 중첩 카탈로그를 O(1) 조회 구조로 바꾼다.
- 스냅샷이 바뀌면 전체 재빌드 (부분 패치 경로 없음)
- 빌드 결과는 새 CatalogIndex 객체 -> 호출 측에서 참조 1번 교체로 반영
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple, Union

from domain.catalog.schema import Cafe, Category, Discount, Dish, Menu, Option, OptionItem, Variant

EntityRef = Union[int, str]


class Collection(str, Enum):
    """hash_id/slug 로도 주소 지정 가능한 컬렉션."""

    MENUS = "menus"
    CATEGORIES = "categories"
    DISHES = "dishes"
    TAGS = "tags"
    SETS = "sets"
    ADVERTISEMENTS = "advertisements"


class EntityKey(NamedTuple):
    """
    정규화된 조회 키.
    숫자 id("id")와 문자열 참조("ref": hash_id/slug)는 키 공간이 분리되어
    slug "12" 가 다른 엔티티의 id 12 와 충돌하지 않는다.
    """

    space: str
    value: EntityRef

    @classmethod
    def of(cls, ref: Any) -> Optional["EntityKey"]:
        if isinstance(ref, bool):
            return None
        if isinstance(ref, int):
            return cls("id", ref)
        if isinstance(ref, str) and ref:
            return cls("ref", ref)
        return None


def entity_keys(entity: Any) -> Iterator[EntityKey]:
    """엔티티가 응답하는 모든 키 (id, hash_id, slug 순)."""
    yield EntityKey("id", entity.id)
    hash_id = getattr(entity, "hash_id", None)
    if hash_id:
        yield EntityKey("ref", hash_id)
    slug = getattr(entity, "slug", None)
    if slug:
        yield EntityKey("ref", slug)


def collection_items(snapshot: Optional[Cafe], collection: Collection) -> List[Any]:
    if snapshot is None:
        return []
    return getattr(snapshot, Collection(collection).value)


@dataclass(frozen=True)
class CatalogIndex:
    source: Optional[Cafe] = None

    entities: Dict[Collection, Dict[EntityKey, Any]] = field(default_factory=dict)

    variants: Dict[int, Variant] = field(default_factory=dict)
    variant_dishes: Dict[int, Dish] = field(default_factory=dict)

    # menu.id -> (menu, categories) / category.id -> (category, dishes)
    menu_categories: Dict[int, Tuple[Menu, Tuple[Category, ...]]] = field(default_factory=dict)
    category_dishes: Dict[int, Tuple[Category, Tuple[Dish, ...]]] = field(default_factory=dict)

    options: Dict[int, Option] = field(default_factory=dict)
    option_items: Dict[int, OptionItem] = field(default_factory=dict)
    option_by_item: Dict[int, Option] = field(default_factory=dict)
    discounts: Dict[int, Discount] = field(default_factory=dict)

    def is_for(self, snapshot: Optional[Cafe]) -> bool:
        """이 인덱스가 바로 그 스냅샷 객체로부터 만들어졌는가."""
        return snapshot is not None and self.source is snapshot

    def lookup(self, collection: Collection, ref: Any) -> Optional[Any]:
        key = EntityKey.of(ref)
        if key is None:
            return None
        return self.entities.get(Collection(collection), {}).get(key)

    def counts(self) -> Dict[str, int]:
        out = {c.value: len(collection_items(self.source, c)) for c in Collection}
        out["variants"] = len(self.variants)
        out["options"] = len(self.options)
        out["option_items"] = len(self.option_items)
        out["discounts"] = len(self.discounts)
        return out


EMPTY_INDEX = CatalogIndex()


def _key_map(items: List[Any]) -> Dict[EntityKey, Any]:
    out: Dict[EntityKey, Any] = {}
    for it in items:
        for k in entity_keys(it):
            # 먼저 등록된 엔티티 우선 (linear scan의 first-match와 동일한 결과)
            out.setdefault(k, it)
    return out


def _resolve_ids(ids: List[int], table: Dict[EntityKey, Any]) -> Tuple[Any, ...]:
    out = []
    for i in ids:
        key = EntityKey.of(i)
        found = table.get(key) if key is not None else None
        if found is not None:
            out.append(found)
    return tuple(out)


def build_indices(snapshot: Optional[Cafe]) -> CatalogIndex:
    """
    스냅샷 전체를 한 번 훑어 새 인덱스를 만든다. O(E).
    - snapshot None -> 빈 인덱스
    - 같은 스냅샷으로 두 번 호출해도 동일한 조회 결과 (idempotent)
    """
    if snapshot is None:
        return EMPTY_INDEX

    entities = {c: _key_map(collection_items(snapshot, c)) for c in Collection}

    variants: Dict[int, Variant] = {}
    variant_dishes: Dict[int, Dish] = {}
    for dish in snapshot.dishes:
        for variant in dish.variants:
            if variant.id == 0:
                continue
            if variant.id not in variants:
                variants[variant.id] = variant
                variant_dishes[variant.id] = dish

    categories = entities[Collection.CATEGORIES]
    dishes = entities[Collection.DISHES]

    menu_categories: Dict[int, Tuple[Menu, Tuple[Category, ...]]] = {}
    for menu in snapshot.menus:
        menu_categories.setdefault(menu.id, (menu, _resolve_ids(menu.categories_ids, categories)))

    category_dishes: Dict[int, Tuple[Category, Tuple[Dish, ...]]] = {}
    for category in snapshot.categories:
        category_dishes.setdefault(category.id, (category, _resolve_ids(category.dishes_ids, dishes)))

    options: Dict[int, Option] = {}
    option_items: Dict[int, OptionItem] = {}
    option_by_item: Dict[int, Option] = {}
    for option in snapshot.options:
        options.setdefault(option.id, option)
        for item in option.items:
            option_items.setdefault(item.id, item)
            option_by_item.setdefault(item.id, option)

    discounts: Dict[int, Discount] = {}
    for discount in snapshot.discounts:
        discounts.setdefault(discount.id, discount)

    return CatalogIndex(
        source=snapshot,
        entities=entities,
        variants=variants,
        variant_dishes=variant_dishes,
        menu_categories=menu_categories,
        category_dishes=category_dishes,
        options=options,
        option_items=option_items,
        option_by_item=option_by_item,
        discounts=discounts,
    )
