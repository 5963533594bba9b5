from __future__ import annotations

import json
from decimal import Decimal

from domain.analytics.reporter import ItemType
from domain.catalog.cart import CartLineInput
from domain.catalog.errors import ItemNotFound
from domain.catalog.pricing import LineFailure
from utils.logging import _sanitize


def test_amounts_and_enums():
    out = _sanitize({"total": Decimal("0.9"), "kind": ItemType.OPEN_DISH, "tid": "abc"})
    assert out == {"total": "0.9", "kind": 400, "tid": "***"}
    json.dumps(out)


def test_line_failure_is_structured():
    failure = LineFailure(position=1, line=CartLineInput(item_type="dish", item_id=404), error=ItemNotFound(404))
    out = _sanitize({"failure": failure})["failure"]
    assert out["position"] == 1
    assert out["line"]["item_id"] == 404
    assert out["error"]["error_type"] == "ItemNotFound"
    json.dumps(out)
