from domain.catalog.index import build_indices
from domain.catalog.pricing import apply_discount, price_cart, price_cart_line
from domain.catalog.query import CatalogQuery
from domain.catalog.search import search
from domain.catalog.storefront import Storefront

# 외부(API/임베딩 앱)에서 호출하는 진입점
__all__ = [
    "build_indices",
    "apply_discount",
    "price_cart",
    "price_cart_line",
    "CatalogQuery",
    "search",
    "Storefront",
]
