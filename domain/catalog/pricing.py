# domain/catalog/pricing.py
"""
카트 라인 가격 계산.

CartLineInput(dish/variant + option item 선택 + 수량) -> CartLine
- 할인 전/후 합계를 모두 들고 있음 (취소선 가격 표시용)
- 라인 단위 에러: 한 라인이 실패해도 나머지 라인은 계산된다
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal
from typing import Iterable, List, Optional, Union

from domain.catalog.cart import CartLineInput
from domain.catalog.errors import CatalogError, ItemNotFound, OptionItemNotFound, VariantNotFound
from domain.catalog.query import CatalogQuery
from domain.catalog.schema import (
    DISCOUNT_ABSOLUTE,
    DISCOUNT_DIFF,
    DISCOUNT_PERCENTAGE,
    DISCOUNT_VALUE,
    ROUND_LARGE,
    ROUND_SMALL,
    Discount,
    Dish,
    Option,
    OptionItem,
    Variant,
)
from utils.logging import log_event


@dataclass(frozen=True)
class CartSubitem:
    option: Option
    option_item: OptionItem
    total: Decimal


@dataclass(frozen=True)
class CartLine:
    dish: Dish
    variant: Variant
    quantity: int
    subitems: List[CartSubitem]
    total: Decimal
    total_after_discount: Decimal
    discount: Optional[Discount] = None

    @property
    def discounted(self) -> bool:
        return self.discount is not None and self.total_after_discount != self.total


@dataclass(frozen=True)
class LineFailure:
    position: int
    line: CartLineInput
    error: CatalogError


@dataclass(frozen=True)
class CartPricing:
    lines: List[CartLine] = field(default_factory=list)
    failures: List[LineFailure] = field(default_factory=list)
    total: Decimal = Decimal(0)
    total_after_discounts: Decimal = Decimal(0)

    @property
    def ok(self) -> bool:
        return not self.failures


def _money(v: Union[Decimal, int, float, str]) -> Decimal:
    return v if isinstance(v, Decimal) else Decimal(str(v))


def apply_discount(total: Union[Decimal, int, float], discount: Optional[Discount]) -> Decimal:
    """
    할인 전 합계 + 할인 규칙 -> 할인 후 합계 (순수 함수).
    모르는 type/round 는 적용하지 않음 (합계 그대로 / 반올림 없음).
    """
    total = _money(total)
    if discount is None:
        return total

    if discount.type == DISCOUNT_PERCENTAGE:
        result = total - total * discount.value / 100
    elif discount.type in (DISCOUNT_ABSOLUTE, DISCOUNT_DIFF):
        result = total - discount.value
    elif discount.type == DISCOUNT_VALUE:
        result = discount.value
    else:
        result = total

    if discount.round == ROUND_SMALL:
        return result.to_integral_value(rounding=ROUND_FLOOR)
    if discount.round == ROUND_LARGE:
        return result.to_integral_value(rounding=ROUND_CEILING)
    return result


def price_cart_line(line: CartLineInput, query: CatalogQuery) -> CartLine:
    """
    raises:
      - ItemNotFound / VariantNotFound / OptionItemNotFound (NotFound)
      - InvalidReference: item_type=variant 인데 item_id 0
    """
    if line.item_type == "dish":
        dish = query.dish(line.item_id)
    else:
        dish = query.resolve_dish_by_variant(line.item_id)
    if dish is None:
        raise ItemNotFound(line.item_id)

    if line.item_type == "dish":
        variant = query.resolve_default_variant(dish)
    else:
        variant = query.resolve_variant(line.item_id)
    if variant is None:
        raise VariantNotFound(line.item_id)

    subitems: List[CartSubitem] = []
    for sub in line.subitems:
        option = query.resolve_option_by_item(sub.item_id)
        option_item = query.resolve_option_item(sub.item_id)
        if option is None or option_item is None:
            raise OptionItemNotFound(sub.item_id)
        subitems.append(CartSubitem(option=option, option_item=option_item, total=option_item.price))

    subitems_total = sum((s.total for s in subitems), Decimal(0))
    total = (subitems_total + variant.price) * line.quantity

    discount = query.resolve_dish_discount(dish)

    return CartLine(
        dish=dish,
        variant=variant,
        quantity=line.quantity,
        subitems=subitems,
        total=total,
        total_after_discount=apply_discount(total, discount),
        discount=discount,
    )


def price_cart(lines: Iterable[CartLineInput], query: CatalogQuery, trace_id: Optional[str] = None) -> CartPricing:
    """라인별로 독립 계산. 실패 라인은 failures로 모으고 합계에서 제외."""
    priced: List[CartLine] = []
    failures: List[LineFailure] = []

    for pos, line in enumerate(lines):
        try:
            priced.append(price_cart_line(line, query))
        except CatalogError as e:
            failures.append(LineFailure(position=pos, line=line, error=e))
            log_event(trace_id, "cart_line_unresolved", {"position": pos, "line": line, "error": e})

    return CartPricing(
        lines=priced,
        failures=failures,
        total=sum((p.total for p in priced), Decimal(0)),
        total_after_discounts=sum((p.total_after_discount for p in priced), Decimal(0)),
    )
