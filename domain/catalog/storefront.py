# domain/catalog/storefront.py
"""
스냅샷 + 인덱스 + 카트를 소유하는 컨트롤러.

- 스냅샷과 인덱스는 CatalogState 하나로 묶어서 참조 1번 교체로 반영
  (읽는 쪽이 구 스냅샷 엔티티 + 신 인덱스 조합을 보는 일이 없음)
- 변경은 subscribe() 로 등록한 리스너에 명시적으로 통지
"""
from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, List, Optional, Union

from domain.catalog import paths
from domain.catalog.cart import CartLineInput, CartStore
from domain.catalog.client import CatalogClient, CatalogFetcher
from domain.catalog.errors import ApiError
from domain.catalog.index import EMPTY_INDEX, CatalogIndex, build_indices
from domain.catalog.pricing import CartLine, CartPricing, price_cart
from domain.catalog.query import CatalogQuery
from domain.catalog.schema import Cafe, Category, Dish, Menu
from domain.catalog.search import SearchResult, search
from session.storage import KeyValueStorage
from utils.logging import log_event
from utils.trace_utils import pricing_summary, snapshot_summary

Listener = Callable[[str, "Storefront"], None]

EVENT_CATALOG = "catalog"
EVENT_CART = "cart"
EVENT_LOADING = "loading"


@dataclass(frozen=True)
class CatalogState:
    cafe_id: Union[int, str, None] = None
    language: Optional[str] = None
    snapshot: Optional[Cafe] = None
    index: CatalogIndex = EMPTY_INDEX


@dataclass
class StorefrontOptions:
    api_url: Optional[str] = None
    api_version: Optional[str] = None
    domain: str = "localhost"
    domains: List[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "StorefrontOptions":
        raw_domains = os.getenv("CATALOG_DOMAINS", "")
        return cls(
            api_url=os.getenv("CATALOG_API_URL") or None,
            api_version=os.getenv("CATALOG_API_VERSION") or None,
            domain=os.getenv("CATALOG_DOMAIN", "localhost"),
            domains=[d.strip() for d in raw_domains.split(",") if d.strip()],
        )


class Storefront:
    def __init__(
        self,
        options: Optional[StorefrontOptions] = None,
        fetcher: Optional[CatalogFetcher] = None,
        storage: Optional[KeyValueStorage] = None,
        cart_key: str = "cart",
    ):
        self.options = options or StorefrontOptions.from_env()
        self.fetcher = fetcher or CatalogClient(api_url=self.options.api_url, api_version=self.options.api_version)
        self.storage = storage
        self.cart_key = cart_key
        self.cart = CartStore.load(storage, cart_key) if storage is not None else CartStore()
        self.is_loading = False

        self._state = CatalogState()
        self._listeners: List[Listener] = []

    # ----------------------------
    # state / notifications
    # ----------------------------

    @property
    def state(self) -> CatalogState:
        return self._state

    @property
    def snapshot(self) -> Optional[Cafe]:
        return self._state.snapshot

    @property
    def query(self) -> CatalogQuery:
        st = self._state
        return CatalogQuery(st.snapshot, st.index)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, self)
            except Exception as e:
                # 리스너 하나가 깨져도 상태 교체/다른 리스너에는 영향 없음
                log_event(None, "listener_error", {"event": event, "error": e})

    def _set_loading(self, value: bool) -> None:
        self.is_loading = value
        self._notify(EVENT_LOADING)

    # ----------------------------
    # snapshot lifecycle
    # ----------------------------

    def load_snapshot(
        self,
        snapshot: Optional[Cafe],
        *,
        cafe_id: Union[int, str, None] = None,
        language: Optional[str] = None,
        trace_id: Optional[str] = None,
    ) -> CatalogState:
        """이미 받아온 스냅샷을 설치: 인덱스 전체 재빌드 후 한 번에 교체."""
        t0 = time.perf_counter()
        index = build_indices(snapshot)
        new_state = CatalogState(
            cafe_id=cafe_id if cafe_id is not None else self._state.cafe_id,
            language=language if language is not None else self._state.language,
            snapshot=snapshot,
            index=index,
        )
        self._state = new_state

        log_event(trace_id, "index_rebuilt", {
            "snapshot": snapshot_summary(snapshot),
            "counts": index.counts(),
            "duration_ms": int((time.perf_counter() - t0) * 1000),
        })
        self._notify(EVENT_CATALOG)
        return new_state

    def set_cafe(self, cafe_id: Union[int, str], language: Optional[str] = None, trace_id: Optional[str] = None) -> Optional[Cafe]:
        """
        원격에서 스냅샷을 받아 교체.
        - ApiError는 그대로 전파
        - 단, 매장/존 not found 계열은 빈 상태로 두고 None 반환
        """
        self._set_loading(True)
        try:
            log_event(trace_id, "snapshot_fetch", {"cafe_id": cafe_id, "language": language})
            try:
                snapshot = self.fetcher.fetch(cafe_id, language)
            except ApiError as e:
                if not e.is_not_found:
                    log_event(trace_id, "snapshot_fetch_error", {"cafe_id": cafe_id, "error": e})
                    raise
                log_event(trace_id, "snapshot_not_found", {"cafe_id": cafe_id, "error": e})
                self.load_snapshot(None, cafe_id=cafe_id, language=language, trace_id=trace_id)
                return None

            self.load_snapshot(snapshot, cafe_id=cafe_id, language=language, trace_id=trace_id)
            return snapshot
        finally:
            self._set_loading(False)

    def set_language(self, language: str, trace_id: Optional[str] = None) -> Optional[Cafe]:
        if self._state.cafe_id is None:
            raise ValueError("set_cafe() must be called before set_language()")
        return self.set_cafe(self._state.cafe_id, language, trace_id=trace_id)

    # ----------------------------
    # cart
    # ----------------------------

    def _cart_changed(self) -> None:
        if self.storage is not None:
            self.cart.save(self.storage, self.cart_key)
        self._notify(EVENT_CART)

    def add_to_cart(self, line: CartLineInput) -> int:
        pos = self.cart.add(line)
        self._cart_changed()
        return pos

    def remove_from_cart(self, position: int) -> CartLineInput:
        line = self.cart.remove(position)
        self._cart_changed()
        return line

    def set_cart_quantity(self, position: int, quantity: int) -> Optional[CartLineInput]:
        line = self.cart.set_quantity(position, quantity)
        self._cart_changed()
        return line

    def clear_cart(self) -> None:
        self.cart.clear()
        self._cart_changed()

    def cart_pricing(self, trace_id: Optional[str] = None) -> CartPricing:
        pricing = price_cart(self.cart.lines, self.query, trace_id=trace_id)
        log_event(trace_id, "cart_priced", pricing_summary(pricing))
        return pricing

    def cart_items(self) -> List[CartLine]:
        return self.cart_pricing().lines

    def cart_total(self) -> Decimal:
        return self.cart_pricing().total

    def cart_total_after_discounts(self) -> Decimal:
        return self.cart_pricing().total_after_discounts

    # ----------------------------
    # search
    # ----------------------------

    def search(self, query: str, menu: Any = None) -> SearchResult:
        st = self._state
        return search(st.snapshot, query, menu=menu, index=st.index)

    # ----------------------------
    # paths
    # ----------------------------

    def is_custom_domain(self, domain: Optional[str] = None) -> bool:
        return paths.is_custom_domain(domain or self.options.domain, self.options.domains)

    def app_path(self, path: str) -> str:
        return paths.app_path(path, cafe_id=self._state.cafe_id, custom_domain=self.is_custom_domain())

    def menu_path(self, menu: Menu) -> str:
        return self.app_path(paths.proper_id(menu))

    def category_path(self, menu: Menu, category: Category) -> str:
        return self.app_path(f"{paths.proper_id(menu)}/{paths.proper_id(category)}")

    def dish_path(self, menu: Menu, category: Category, dish: Dish) -> str:
        return self.app_path(f"{paths.proper_id(menu)}/{paths.proper_id(category)}/{paths.proper_id(dish)}")
