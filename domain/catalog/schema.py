# domain/catalog/schema.py
"""
카탈로그 스냅샷 모델.

원격 Catalog Fetch가 돌려주는 JSON 트리를 그대로 받는다.
- 검증은 "필드가 구조적으로 존재하는가" 수준까지만 (extra 필드는 무시)
- 스냅샷은 교체되기 전까지 불변 (frozen)
"""
from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator

# 금액은 Decimal (0.1 + 0.2 같은 값도 정확히 합산). JSON으로 내보낼 때만 숫자로
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class _Entity(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


# ----------------------------
# extension / settings (tagged variant)
# ----------------------------

class ParsedExtension(_Entity):
    """object 형태로 내려온 확장 설정. enabled 외 나머지 키는 options로 보존."""

    kind: Literal["parsed"] = "parsed"
    enabled: bool = True
    options: Dict[str, Any] = Field(default_factory=dict)


class UnparsedExtension(_Entity):
    """object가 아닌 값(list, 문자열 등). 하위호환을 위해 원본 그대로 보존."""

    kind: Literal["unparsed"] = "unparsed"
    raw: Any = None


Extension = Annotated[Union[ParsedExtension, UnparsedExtension], Field(discriminator="kind")]

_PARSED_KEYS = {"kind", "enabled", "options"}
_UNPARSED_KEYS = {"kind", "raw"}


def wrap_extension(v: Any) -> Any:
    """raw JSON -> Extension 입력 형태로 변환 (None이면 확장 없음)."""
    if v is None or isinstance(v, (ParsedExtension, UnparsedExtension)):
        return v

    if isinstance(v, dict):
        # model_dump() 결과를 다시 넣는 경우
        kind = v.get("kind")
        if kind == "parsed" and set(v) <= _PARSED_KEYS:
            return v
        if kind == "unparsed" and set(v) <= _UNPARSED_KEYS:
            return v

        enabled = v.get("enabled")
        if isinstance(enabled, bool):
            options = {k: val for k, val in v.items() if k != "enabled"}
            return {"kind": "parsed", "enabled": enabled, "options": options}
        return {"kind": "parsed", "enabled": True, "options": dict(v)}

    return {"kind": "unparsed", "raw": v}


class CafeSettings(_Entity):
    default_language: str = "en"
    currency: str = ""
    skin: str = ""


class CafeExtensions(_Entity):
    orders: Optional[Extension] = None
    cart: Optional[Extension] = None
    feedback: Optional[Extension] = None

    @field_validator("orders", "cart", "feedback", mode="before")
    @classmethod
    def _wrap(cls, v):
        return wrap_extension(v)


# ----------------------------
# catalog entities
# ----------------------------

class Menu(_Entity):
    id: int
    hash_id: str = ""
    slug: Optional[str] = None
    name: str
    description: Optional[str] = None
    categories_ids: List[int] = Field(default_factory=list)


class Category(_Entity):
    id: int
    hash_id: str = ""
    slug: Optional[str] = None
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    dishes_ids: List[int] = Field(default_factory=list)


class Variant(_Entity):
    id: int
    name: str = ""
    price: Money = Decimal(0)

    @property
    def is_placeholder(self) -> bool:
        return self.id == 0


class DishOption(_Entity):
    """dish ↔ option 링크 + 선택 개수 제약."""

    id: int
    option_id: int
    type: str = ""
    min_items: Optional[int] = None
    max_items: Optional[int] = None


class Dish(_Entity):
    id: int
    hash_id: str = ""
    slug: Optional[str] = None
    name: str
    description: Optional[str] = None
    ingredients: Optional[str] = None
    image: Optional[str] = None
    preparing_time: Optional[int] = None
    variants: List[Variant] = Field(default_factory=list)
    options: List[DishOption] = Field(default_factory=list)
    settings: Optional[Extension] = None

    @field_validator("settings", mode="before")
    @classmethod
    def _wrap_settings(cls, v):
        return wrap_extension(v)


class OptionItem(_Entity):
    id: int
    name: str = ""
    price: Money = Decimal(0)


class Option(_Entity):
    id: int
    name: str
    items: List[OptionItem] = Field(default_factory=list)


class Tag(_Entity):
    id: int
    hash_id: str = ""
    slug: Optional[str] = None
    label: str
    color: str = ""
    dishes_ids: List[int] = Field(default_factory=list)


# 알려진 값. 모르는 type/round 도 스냅샷 로딩은 통과시키고 가격 계산에서 무시
DISCOUNT_PERCENTAGE = "percentage"
DISCOUNT_ABSOLUTE = "absolute"
DISCOUNT_DIFF = "diff"
DISCOUNT_VALUE = "value"
DISCOUNT_TYPES = (DISCOUNT_PERCENTAGE, DISCOUNT_ABSOLUTE, DISCOUNT_DIFF, DISCOUNT_VALUE)

ROUND_SMALL = "small"
ROUND_LARGE = "large"


class Discount(_Entity):
    id: int
    type: str
    value: Money
    round: Optional[str] = None
    tag_id: Optional[int] = None
    included_dishes_ids: List[int] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def _lower_type(cls, v):
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("round", mode="before")
    @classmethod
    def _lower_round(cls, v):
        if isinstance(v, str):
            return v.lower().strip() or None
        return v

    @property
    def is_known(self) -> bool:
        return self.type in DISCOUNT_TYPES


class MenuSet(_Entity):
    """묶음 상품. 자체 가격을 가진다 (카트 가격 계산에는 참여하지 않음)."""

    id: int
    hash_id: str = ""
    slug: Optional[str] = None
    name: str
    description: Optional[str] = None
    price: Optional[Money] = None
    dishes_ids: List[int] = Field(default_factory=list)
    categories_ids: List[int] = Field(default_factory=list)


class Advertisement(_Entity):
    id: int
    hash_id: str = ""
    slug: Optional[str] = None
    title: str
    short: str = ""
    full: Optional[str] = None
    color: str = ""


class Cafe(_Entity):
    """스냅샷 루트. 한 매장/한 언어의 전체 카탈로그."""

    id: int
    hash_id: str = ""
    update_version: int = 0
    name: str
    logo: Optional[str] = None
    cover: Optional[str] = None
    description: Optional[str] = None
    slug: Optional[str] = None
    domain: Optional[str] = None
    settings: CafeSettings = Field(default_factory=CafeSettings)
    extensions: CafeExtensions = Field(default_factory=CafeExtensions)

    menus: List[Menu] = Field(default_factory=list)
    categories: List[Category] = Field(default_factory=list)
    dishes: List[Dish] = Field(default_factory=list)
    sets: List[MenuSet] = Field(default_factory=list)
    options: List[Option] = Field(default_factory=list)
    tags: List[Tag] = Field(default_factory=list)
    discounts: List[Discount] = Field(default_factory=list)
    advertisements: List[Advertisement] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)

    @field_validator("extensions", mode="before")
    @classmethod
    def _extensions_default(cls, v):
        # API가 [] 나 null을 내려주는 경우가 있음
        return v if isinstance(v, (dict, CafeExtensions)) else {}


Snapshot = Cafe
