# models/api_models.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from domain.catalog.cart import CartLineInput
from domain.catalog.schema import Money


class LoadCafeRequest(BaseModel):
    cafe_id: Union[int, str] = Field(..., description="numeric id / hash_id / slug")
    language: Optional[str] = None

    @field_validator("language", mode="before")
    @classmethod
    def normalize_language(cls, v):
        """언어 코드는 소문자로 (예: "EN " -> "en")"""
        if isinstance(v, str):
            return v.lower().strip() or None
        return v


class LoadCafeResponse(BaseModel):
    trace_id: str
    found: bool
    cafe: Dict[str, Any]


class PriceCartRequest(BaseModel):
    lines: List[CartLineInput] = Field(default_factory=list)


class CartSubitemOut(BaseModel):
    option_id: int
    option_name: str
    item_id: int
    item_name: str
    total: Money


class CartLineOut(BaseModel):
    dish_id: int
    dish_name: str
    variant_id: int
    variant_name: str
    quantity: int
    subitems: List[CartSubitemOut]
    total: Money
    total_after_discount: Money
    discount_id: Optional[int] = None


class LineFailureOut(BaseModel):
    position: int
    item_type: str
    item_id: int
    error_type: str
    message: str


class CartResponse(BaseModel):
    trace_id: str
    lines: List[CartLineOut]
    failures: List[LineFailureOut]
    total: Money
    total_after_discounts: Money


class CategoryMatchOut(BaseModel):
    category_id: int
    dishes_ids: List[int]


class SearchResponse(BaseModel):
    trace_id: str
    query: str
    categories: List[CategoryMatchOut]
    categories_count: int
    dishes_count: int
