# domain/catalog/cart.py
from __future__ import annotations

from typing import Any, Dict, Iterator, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from session.storage import KeyValueStorage
from utils.logging import log_event


class CartSubitemInput(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    item_id: int  # option item id


class CartLineInput(BaseModel):
    """카트 라인 입력. 가격은 갖지 않는다 (pricing 에서 계산)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    item_type: Literal["dish", "variant"]
    item_id: int
    quantity: int = Field(1, ge=1)
    subitems: List[CartSubitemInput] = Field(default_factory=list)

    def same_item(self, other: "CartLineInput") -> bool:
        return (
            self.item_type == other.item_type
            and self.item_id == other.item_id
            and sorted(s.item_id for s in self.subitems) == sorted(s.item_id for s in other.subitems)
        )


class CartStore:
    """
    순서가 있는 카트 라인 모음.
    - 가격 계산은 하지 않는다 (참조만 보관)
    - 스냅샷이 교체돼도 라인은 그대로 남음 -> pricing 단계에서 resolve 실패할 수 있음
    """

    def __init__(self, lines: Optional[List[CartLineInput]] = None):
        self._lines: List[CartLineInput] = list(lines or [])

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLineInput]:
        return iter(list(self._lines))

    @property
    def lines(self) -> List[CartLineInput]:
        return list(self._lines)

    def add(self, line: CartLineInput) -> int:
        """같은 아이템+옵션 조합이 이미 있으면 수량만 합친다. 라인 위치를 반환."""
        for pos, existing in enumerate(self._lines):
            if existing.same_item(line):
                self._lines[pos] = existing.model_copy(update={"quantity": existing.quantity + line.quantity})
                return pos
        self._lines.append(line)
        return len(self._lines) - 1

    def remove(self, position: int) -> CartLineInput:
        if position < 0 or position >= len(self._lines):
            raise IndexError(f"cart line {position} out of range")
        return self._lines.pop(position)

    def set_quantity(self, position: int, quantity: int) -> Optional[CartLineInput]:
        """quantity <= 0 이면 라인 삭제 후 None."""
        if position < 0 or position >= len(self._lines):
            raise IndexError(f"cart line {position} out of range")
        if quantity <= 0:
            self._lines.pop(position)
            return None
        self._lines[position] = self._lines[position].model_copy(update={"quantity": int(quantity)})
        return self._lines[position]

    def clear(self) -> None:
        self._lines = []

    # ----------------------------
    # persistence (KV storage 경유)
    # ----------------------------

    def to_payload(self) -> List[Dict[str, Any]]:
        return [line.model_dump() for line in self._lines]

    @classmethod
    def from_payload(cls, payload: Any) -> "CartStore":
        """저장된 JSON에서 복원. 깨진 라인은 버린다."""
        lines: List[CartLineInput] = []
        if isinstance(payload, list):
            for raw in payload:
                try:
                    lines.append(CartLineInput.model_validate(raw))
                except ValidationError as e:
                    log_event(None, "cart_line_dropped", {"raw": raw, "error": str(e)})
        return cls(lines)

    @classmethod
    def load(cls, storage: KeyValueStorage, key: str, trace_id: Optional[str] = None) -> "CartStore":
        cart = cls.from_payload(storage.get(key))
        log_event(trace_id, "cart_loaded", {"key": key, "lines": len(cart)})
        return cart

    def save(self, storage: KeyValueStorage, key: str, trace_id: Optional[str] = None) -> None:
        if self._lines:
            storage.set(key, self.to_payload())
        else:
            storage.remove(key)
        log_event(trace_id, "cart_saved", {"key": key, "lines": len(self._lines)})
