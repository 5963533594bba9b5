# domain/catalog/query.py
from __future__ import annotations

from typing import Any, List, Optional, Union

from domain.catalog.errors import InvalidReference
from domain.catalog.index import CatalogIndex, Collection, EntityKey, collection_items, entity_keys
from domain.catalog.schema import (
    Advertisement,
    Cafe,
    Category,
    Discount,
    Dish,
    Menu,
    MenuSet,
    Option,
    OptionItem,
    Tag,
    Variant,
)


def _reject_zero_variant(variant_id: int) -> None:
    if variant_id == 0:
        raise InvalidReference("Variant id cannot be zero.")


class CatalogQuery:
    """
    엔티티 조회 단일 진입점 (API 레이어 / 가격 계산 공용).

    - 인덱스가 현재 스냅샷으로 만들어진 것이면 O(1) 조회
    - 아니면(stale/없음) linear scan. 결과는 동일해야 한다.
    - 못 찾으면 None / [] 반환. 예외는 variant id 0 (InvalidReference) 뿐.
    """

    def __init__(self, snapshot: Optional[Cafe], index: Optional[CatalogIndex] = None):
        self.snapshot = snapshot
        self._index = index if index is not None and index.is_for(snapshot) else None

    @property
    def indexed(self) -> bool:
        return self._index is not None

    # ----------------------------
    # id / hash_id / slug
    # ----------------------------

    def resolve_by_any_id(self, collection: Union[Collection, str], ref: Any) -> Optional[Any]:
        collection = Collection(collection)
        if self._index is not None:
            return self._index.lookup(collection, ref)

        key = EntityKey.of(ref)
        if key is None:
            return None
        for it in collection_items(self.snapshot, collection):
            if key in entity_keys(it):
                return it
        return None

    def menu(self, ref: Any) -> Optional[Menu]:
        return self.resolve_by_any_id(Collection.MENUS, ref)

    def category(self, ref: Any) -> Optional[Category]:
        return self.resolve_by_any_id(Collection.CATEGORIES, ref)

    def dish(self, ref: Any) -> Optional[Dish]:
        return self.resolve_by_any_id(Collection.DISHES, ref)

    def tag(self, ref: Any) -> Optional[Tag]:
        return self.resolve_by_any_id(Collection.TAGS, ref)

    def set(self, ref: Any) -> Optional[MenuSet]:
        return self.resolve_by_any_id(Collection.SETS, ref)

    def advertisement(self, ref: Any) -> Optional[Advertisement]:
        return self.resolve_by_any_id(Collection.ADVERTISEMENTS, ref)

    # ----------------------------
    # variants
    # ----------------------------

    def resolve_variant(self, variant_id: int) -> Optional[Variant]:
        _reject_zero_variant(variant_id)
        if self._index is not None:
            return self._index.variants.get(variant_id)

        for dish in self._dishes():
            for variant in dish.variants:
                if variant.id == variant_id:
                    return variant
        return None

    def resolve_dish_by_variant(self, variant_id: int) -> Optional[Dish]:
        _reject_zero_variant(variant_id)
        if self._index is not None:
            return self._index.variant_dishes.get(variant_id)

        for dish in self._dishes():
            if any(variant.id == variant_id for variant in dish.variants):
                return dish
        return None

    def resolve_default_variant(self, dish_or_ref: Union[Dish, int, str, None]) -> Optional[Variant]:
        dish = self._as_dish(dish_or_ref)
        if dish is None:
            return None
        for variant in dish.variants:
            if variant.id == 0:
                return variant
        return None

    # ----------------------------
    # options
    # ----------------------------

    def resolve_option(self, option_id: int) -> Optional[Option]:
        if self._index is not None:
            return self._index.options.get(option_id)
        for option in self._options():
            if option.id == option_id:
                return option
        return None

    def resolve_option_by_item(self, option_item_id: int) -> Optional[Option]:
        if self._index is not None:
            return self._index.option_by_item.get(option_item_id)
        for option in self._options():
            if any(item.id == option_item_id for item in option.items):
                return option
        return None

    def resolve_option_item(self, option_item_id: int) -> Optional[OptionItem]:
        if self._index is not None:
            return self._index.option_items.get(option_item_id)
        for option in self._options():
            for item in option.items:
                if item.id == option_item_id:
                    return item
        return None

    # ----------------------------
    # relations
    # ----------------------------

    def resolve_menu_categories(self, menu_or_ref: Union[Menu, int, str, None]) -> List[Category]:
        menu = menu_or_ref if isinstance(menu_or_ref, Menu) else self.menu(menu_or_ref)
        if menu is None:
            return []

        if self._index is not None:
            cached = self._index.menu_categories.get(menu.id)
            if cached is not None and cached[0] is menu:
                return list(cached[1])

        return [c for c in (self.category(i) for i in menu.categories_ids) if c is not None]

    def resolve_category_dishes(self, category_or_ref: Union[Category, int, str, None]) -> List[Dish]:
        category = category_or_ref if isinstance(category_or_ref, Category) else self.category(category_or_ref)
        if category is None:
            return []

        if self._index is not None:
            cached = self._index.category_dishes.get(category.id)
            if cached is not None and cached[0] is category:
                return list(cached[1])

        return [d for d in (self.dish(i) for i in category.dishes_ids) if d is not None]

    def resolve_dish_discount(self, dish_or_ref: Union[Dish, int, str, None]) -> Optional[Discount]:
        """included_dishes_ids에 dish id를 포함하는 첫 번째 할인 (스냅샷 순서)."""
        dish_id = self._dish_id(dish_or_ref)
        if dish_id is None or self.snapshot is None:
            return None
        for discount in self.snapshot.discounts:
            if dish_id in discount.included_dishes_ids:
                return discount
        return None

    def resolve_dish_tags(self, dish_or_ref: Union[Dish, int, str, None]) -> List[Tag]:
        dish_id = self._dish_id(dish_or_ref)
        if dish_id is None or self.snapshot is None:
            return []
        return [tag for tag in self.snapshot.tags if dish_id in tag.dishes_ids]

    def resolve_discount(self, discount_id: int) -> Optional[Discount]:
        if self._index is not None:
            return self._index.discounts.get(discount_id)
        if self.snapshot is None:
            return None
        for discount in self.snapshot.discounts:
            if discount.id == discount_id:
                return discount
        return None

    # ----------------------------
    # helpers
    # ----------------------------

    def _dishes(self) -> List[Dish]:
        return self.snapshot.dishes if self.snapshot is not None else []

    def _options(self) -> List[Option]:
        return self.snapshot.options if self.snapshot is not None else []

    def _as_dish(self, dish_or_ref: Union[Dish, int, str, None]) -> Optional[Dish]:
        if isinstance(dish_or_ref, Dish):
            return dish_or_ref
        return self.dish(dish_or_ref)

    def _dish_id(self, dish_or_ref: Union[Dish, int, str, None]) -> Optional[int]:
        # 숫자 id는 스냅샷에 없어도 그대로 비교에 사용 (태그/할인은 id 목록 비교)
        if isinstance(dish_or_ref, Dish):
            return dish_or_ref.id
        if isinstance(dish_or_ref, int) and not isinstance(dish_or_ref, bool):
            return dish_or_ref
        dish = self.dish(dish_or_ref)
        return dish.id if dish is not None else None
