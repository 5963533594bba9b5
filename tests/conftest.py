from __future__ import annotations

import copy
from typing import Any, Dict

import pytest

from domain.catalog.index import build_indices
from domain.catalog.query import CatalogQuery
from domain.catalog.schema import Cafe

CAFE_PAYLOAD: Dict[str, Any] = {
    "id": 1,
    "hash_id": "cafe1h",
    "update_version": 7,
    "name": "Trattoria",
    "slug": "trattoria",
    "settings": {"default_language": "en", "currency": "UAH", "skin": "light"},
    "extensions": {"orders": {"enabled": False, "min_total": 200}, "cart": {"enabled": True}, "feedback": "legacy"},
    "menus": [
        {"id": 1, "hash_id": "m1h", "slug": "main", "name": "Main", "categories_ids": [10, 11, 999]},
        {"id": 2, "hash_id": "m2h", "name": "Desserts", "categories_ids": [12]},
    ],
    "categories": [
        {"id": 10, "hash_id": "c10h", "slug": "pasta", "name": "Pasta", "dishes_ids": [100, 101, 998]},
        {"id": 11, "hash_id": "c11h", "name": "Cold Drinks", "dishes_ids": [102]},
        # slug "10" 은 category id 10 과 다른 키 공간
        {"id": 12, "hash_id": "c12h", "slug": "10", "name": "Sweets", "dishes_ids": [103]},
    ],
    "dishes": [
        {
            "id": 100,
            "hash_id": "d100h",
            "slug": "carbonara",
            "name": "Pasta Carbonara",
            "variants": [{"id": 0, "name": "", "price": 1000}, {"id": 1001, "name": "Large", "price": 1400}],
            "options": [{"id": 1, "option_id": 50, "type": "multiple", "min_items": 0, "max_items": 2}],
            "settings": {"enabled": True, "spicy": 1},
        },
        {
            "id": 101,
            "hash_id": "d101h",
            "name": "Pasta Pesto",
            "variants": [{"id": 0, "name": "", "price": 900}],
            "options": [],
            "settings": None,
        },
        {
            "id": 102,
            "hash_id": "d102h",
            "name": "Lemonade",
            "variants": [{"id": 0, "name": "", "price": 300}, {"id": 1021, "name": "1L", "price": 500}],
            "options": [{"id": 2, "option_id": 51, "type": "single"}],
            "settings": [],
        },
        {
            "id": 103,
            "hash_id": "d103h",
            "name": "Tiramisu",
            "variants": [{"id": 1031, "name": "Slice", "price": 450}],
            "options": [],
            "settings": {},
        },
    ],
    "options": [
        {"id": 50, "name": "Extras", "items": [{"id": 501, "name": "Bacon", "price": 150}, {"id": 502, "name": "Cheese", "price": 50}]},
        {"id": 51, "name": "Ice", "items": [{"id": 511, "name": "Extra ice", "price": 0}]},
    ],
    "tags": [
        {"id": 1, "hash_id": "t1h", "label": "Spicy", "color": "red", "dishes_ids": [100, 102]},
        {"id": 2, "hash_id": "t2h", "label": "Vegan", "color": "green", "dishes_ids": [101]},
    ],
    "discounts": [
        {"id": 1, "type": "percentage", "value": 10, "included_dishes_ids": [100]},
        {"id": 2, "type": "absolute", "value": 50, "round": None, "included_dishes_ids": [100, 102]},
        {"id": 3, "type": "value", "value": 500, "included_dishes_ids": [102]},
    ],
    "sets": [
        {"id": 1, "hash_id": "s1h", "name": "Lunch", "price": 1500, "dishes_ids": [100, 102], "categories_ids": [10]},
    ],
    "advertisements": [
        {"id": 1, "hash_id": "ad1h", "title": "Happy hour", "short": "2 for 1", "color": "blue"},
    ],
    "languages": ["en", "uk"],
}


@pytest.fixture
def cafe_payload() -> Dict[str, Any]:
    return copy.deepcopy(CAFE_PAYLOAD)


@pytest.fixture
def cafe(cafe_payload) -> Cafe:
    return Cafe.model_validate(cafe_payload)


@pytest.fixture
def index(cafe):
    return build_indices(cafe)


@pytest.fixture(params=["indexed", "linear"])
def query(request, cafe, index) -> CatalogQuery:
    """같은 테스트를 인덱스 조회 / linear scan 양쪽으로 돌린다."""
    if request.param == "indexed":
        return CatalogQuery(cafe, index)
    return CatalogQuery(cafe)
