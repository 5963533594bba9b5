# api/catalog.py
from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException

from domain.analytics.reporter import EventReporter, ItemType
from domain.catalog.cart import CartLineInput, CartStore
from domain.catalog.errors import ApiError, InvalidReference, NotFound
from domain.catalog.pricing import CartPricing, price_cart
from domain.catalog.storefront import Storefront
from models.api_models import (
    CartLineOut,
    CartResponse,
    CartSubitemOut,
    CategoryMatchOut,
    LineFailureOut,
    LoadCafeRequest,
    LoadCafeResponse,
    PriceCartRequest,
    SearchResponse,
)
from session.storage import KeyValueStorage, StorageError, default_storage
from utils.logging import log_event
from utils.trace_utils import pricing_summary, snapshot_summary

router = APIRouter()

# ---- 기본 인스턴스 (프로세스 단위) ----
# 테스트: app.dependency_overrides 로 교체
_storage: KeyValueStorage = default_storage()
_storefront = Storefront(storage=None)
_reporter = EventReporter(storage=_storage)


def get_storefront() -> Storefront:
    return _storefront


def get_storage() -> KeyValueStorage:
    return _storage


def get_reporter() -> EventReporter:
    return _reporter


# ----------------------------
# helpers
# ----------------------------

def _trace_id() -> str:
    return uuid.uuid4().hex[:12]


def _coerce_ref(ref: str) -> Union[int, str]:
    """path 파라미터: 숫자만 있으면 numeric id, 아니면 hash_id/slug."""
    s = (ref or "").strip()
    return int(s) if s.isdigit() else s


def _cart_key(session_id: str) -> str:
    sid = (session_id or "").strip()
    if not sid:
        raise HTTPException(status_code=400, detail="session_id is required")
    return f"{sid}:lines"


def _http_error(trace_id: str, stage: str, e: Exception) -> HTTPException:
    log_event(trace_id, "error", {"stage": stage, "error": e})
    if isinstance(e, NotFound):
        return HTTPException(status_code=404, detail={"message": str(e), "trace_id": trace_id})
    if isinstance(e, InvalidReference):
        return HTTPException(status_code=400, detail={"message": str(e), "trace_id": trace_id})
    if isinstance(e, ApiError):
        status = e.code if 400 <= e.code < 500 else 502
        return HTTPException(status_code=status, detail={"message": e.message, "error": e.name, "trace_id": trace_id})
    if isinstance(e, StorageError):
        return HTTPException(status_code=503, detail={"message": "storage_unavailable", "trace_id": trace_id})
    return HTTPException(status_code=500, detail={"message": "internal_error", "trace_id": trace_id})


def _require_snapshot(sf: Storefront, trace_id: str) -> None:
    if sf.snapshot is None:
        raise HTTPException(status_code=409, detail={"message": "catalog_not_loaded", "trace_id": trace_id})


def _cart_response(trace_id: str, pricing: CartPricing) -> CartResponse:
    lines: List[CartLineOut] = []
    for line in pricing.lines:
        lines.append(CartLineOut(
            dish_id=line.dish.id,
            dish_name=line.dish.name,
            variant_id=line.variant.id,
            variant_name=line.variant.name,
            quantity=line.quantity,
            subitems=[
                CartSubitemOut(
                    option_id=s.option.id,
                    option_name=s.option.name,
                    item_id=s.option_item.id,
                    item_name=s.option_item.name,
                    total=s.total,
                )
                for s in line.subitems
            ],
            total=line.total,
            total_after_discount=line.total_after_discount,
            discount_id=line.discount.id if line.discount is not None else None,
        ))

    failures = [
        LineFailureOut(
            position=f.position,
            item_type=f.line.item_type,
            item_id=f.line.item_id,
            error_type=type(f.error).__name__,
            message=str(f.error),
        )
        for f in pricing.failures
    ]

    return CartResponse(
        trace_id=trace_id,
        lines=lines,
        failures=failures,
        total=pricing.total,
        total_after_discounts=pricing.total_after_discounts,
    )


def _load_cart(storage: KeyValueStorage, key: str, trace_id: str) -> CartStore:
    try:
        return CartStore.load(storage, key, trace_id=trace_id)
    except StorageError as e:
        raise _http_error(trace_id, "cart_load", e)


def _save_cart(cart: CartStore, storage: KeyValueStorage, key: str, trace_id: str) -> None:
    try:
        _save_cart(cart, storage, key, trace_id)
    except StorageError as e:
        raise _http_error(trace_id, "cart_save", e)


def _price(sf: Storefront, cart: CartStore, trace_id: str) -> CartResponse:
    pricing = price_cart(cart.lines, sf.query, trace_id=trace_id)
    log_event(trace_id, "cart_priced", pricing_summary(pricing))
    return _cart_response(trace_id, pricing)


# ----------------------------
# catalog
# ----------------------------

@router.post("/catalog/load", response_model=LoadCafeResponse)
def load_cafe(req: LoadCafeRequest, sf: Storefront = Depends(get_storefront)):
    trace_id = _trace_id()
    try:
        snapshot = sf.set_cafe(req.cafe_id, req.language, trace_id=trace_id)
    except Exception as e:
        raise _http_error(trace_id, "snapshot_fetch", e)

    return LoadCafeResponse(trace_id=trace_id, found=snapshot is not None, cafe=snapshot_summary(snapshot))


@router.get("/catalog/menus/{menu_ref}/categories")
def menu_categories(menu_ref: str, sf: Storefront = Depends(get_storefront)) -> Dict[str, Any]:
    trace_id = _trace_id()
    _require_snapshot(sf, trace_id)
    q = sf.query
    menu = q.menu(_coerce_ref(menu_ref))
    if menu is None:
        raise HTTPException(status_code=404, detail={"message": f"menu {menu_ref!r} not found", "trace_id": trace_id})
    return {
        "trace_id": trace_id,
        "menu": menu.model_dump(mode="json"),
        "path": sf.menu_path(menu),
        "categories": [c.model_dump(mode="json") for c in q.resolve_menu_categories(menu)],
    }


@router.get("/catalog/categories/{category_ref}/dishes")
def category_dishes(category_ref: str, sf: Storefront = Depends(get_storefront)) -> Dict[str, Any]:
    trace_id = _trace_id()
    _require_snapshot(sf, trace_id)
    q = sf.query
    category = q.category(_coerce_ref(category_ref))
    if category is None:
        raise HTTPException(status_code=404, detail={"message": f"category {category_ref!r} not found", "trace_id": trace_id})
    return {
        "trace_id": trace_id,
        "category": category.model_dump(mode="json"),
        "dishes": [d.model_dump(mode="json") for d in q.resolve_category_dishes(category)],
    }


@router.get("/catalog/dishes/{dish_ref}")
def dish_detail(
    dish_ref: str,
    sf: Storefront = Depends(get_storefront),
    reporter: EventReporter = Depends(get_reporter),
) -> Dict[str, Any]:
    trace_id = _trace_id()
    _require_snapshot(sf, trace_id)
    q = sf.query
    dish = q.dish(_coerce_ref(dish_ref))
    if dish is None:
        raise HTTPException(status_code=404, detail={"message": f"dish {dish_ref!r} not found", "trace_id": trace_id})

    reporter.report(ItemType.OPEN_DISH, dish.id)

    discount = q.resolve_dish_discount(dish)
    default_variant = q.resolve_default_variant(dish)
    return {
        "trace_id": trace_id,
        "dish": dish.model_dump(mode="json"),
        "default_variant": default_variant.model_dump(mode="json") if default_variant is not None else None,
        "tags": [t.model_dump(mode="json") for t in q.resolve_dish_tags(dish)],
        "discount": discount.model_dump(mode="json") if discount is not None else None,
    }


@router.get("/catalog/search", response_model=SearchResponse)
def search_catalog(q: str = "", menu: Optional[str] = None, sf: Storefront = Depends(get_storefront)):
    trace_id = _trace_id()
    _require_snapshot(sf, trace_id)
    result = sf.search(q, menu=_coerce_ref(menu) if menu else None)
    log_event(trace_id, "search", {
        "query_preview": q[:200],
        "categories_count": result.categories_count,
        "dishes_count": result.dishes_count,
    })
    return SearchResponse(
        trace_id=trace_id,
        query=result.query,
        categories=[
            CategoryMatchOut(category_id=m.category_id, dishes_ids=m.dishes_ids)
            for m in result.categories
        ],
        categories_count=result.categories_count,
        dishes_count=result.dishes_count,
    )


# ----------------------------
# cart
# ----------------------------

@router.post("/cart/price", response_model=CartResponse)
def price_lines(req: PriceCartRequest, sf: Storefront = Depends(get_storefront)):
    trace_id = _trace_id()
    return _price(sf, CartStore(req.lines), trace_id)


@router.get("/cart/{session_id}", response_model=CartResponse)
def get_cart(
    session_id: str,
    sf: Storefront = Depends(get_storefront),
    storage: KeyValueStorage = Depends(get_storage),
):
    trace_id = _trace_id()
    cart = _load_cart(storage, _cart_key(session_id), trace_id)
    return _price(sf, cart, trace_id)


@router.post("/cart/{session_id}/lines", response_model=CartResponse)
def add_cart_line(
    session_id: str,
    line: CartLineInput,
    sf: Storefront = Depends(get_storefront),
    storage: KeyValueStorage = Depends(get_storage),
):
    trace_id = _trace_id()
    key = _cart_key(session_id)
    cart = _load_cart(storage, key, trace_id)
    cart.add(line)
    _save_cart(cart, storage, key, trace_id)
    return _price(sf, cart, trace_id)


@router.delete("/cart/{session_id}/lines/{position}", response_model=CartResponse)
def remove_cart_line(
    session_id: str,
    position: int,
    sf: Storefront = Depends(get_storefront),
    storage: KeyValueStorage = Depends(get_storage),
):
    trace_id = _trace_id()
    key = _cart_key(session_id)
    cart = _load_cart(storage, key, trace_id)
    try:
        cart.remove(position)
    except IndexError:
        raise HTTPException(status_code=404, detail={"message": f"cart line {position} not found", "trace_id": trace_id})
    _save_cart(cart, storage, key, trace_id)
    return _price(sf, cart, trace_id)
