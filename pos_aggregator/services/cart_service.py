"""
Cart Service: a single-shop cart with line merging, pricing and undo.

Mutations are synchronous and owned by one session. Rejections come back as
a CartResult instead of an exception so callers can show the reason.
"""
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Mapping, Optional, Sequence
from pos_aggregator.models.menu_models import MenuCategory, MenuItem, find_menu_item
from pos_aggregator.models.order_models import CartItem
from pos_aggregator.models.shop_models import Shop
from pos_aggregator.services.business_hours_service import BusinessHoursService, business_hours_service
from pos_aggregator.services.customization import (
    build_customization_description,
    normalize_selections,
    resolve_unit_price,
)
from pos_aggregator.utils.config import settings
import logging

logger = logging.getLogger(__name__)


class CartRejection(str, Enum):
    DIFFERENT_SHOP = "DIFFERENT_SHOP"
    SHOP_CLOSED = "SHOP_CLOSED"
    INVALID_SELECTION = "INVALID_SELECTION"
    QUANTITY_LIMIT = "QUANTITY_LIMIT"
    NOT_FOUND = "NOT_FOUND"


@dataclass
class CartResult:
    ok: bool
    reason: Optional[CartRejection] = None
    line: Optional[CartItem] = None

    def __bool__(self) -> bool:
        return self.ok


@dataclass
class CartSummary:
    shop_id: Optional[str]
    line_count: int
    item_count: int
    subtotal: Decimal


class CartService:
    def __init__(
        self,
        hours: BusinessHoursService = None,
        max_quantity: int = None,
        undo_limit: int = None,
    ):
        self.hours = hours or business_hours_service
        self.max_quantity = max_quantity or settings.CART_MAX_QUANTITY
        self._items: List[CartItem] = []
        self._history = deque(maxlen=undo_limit or settings.CART_UNDO_HISTORY)

    @property
    def items(self) -> List[CartItem]:
        return list(self._items)

    @property
    def shop(self) -> Optional[Shop]:
        return self._items[0].shop if self._items else None

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def total_price(self) -> Decimal:
        return sum((line.total_price for line in self._items), Decimal("0.00"))

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self._items)

    def _snapshot(self):
        self._history.append(list(self._items))

    def _find_line(self, line_id: str) -> Optional[int]:
        return next((i for i, line in enumerate(self._items) if line.id == line_id), None)

    def add_item(
        self,
        shop: Shop,
        item: MenuItem,
        variation_id: Optional[str] = None,
        modifier_selections: Optional[Mapping[str, Sequence[str]]] = None,
        category: str = "",
        quantity: int = 1,
        customization_description: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CartResult:
        """Add ``quantity`` of ``item``, merging into an identical line when one exists."""
        if self._items and self._items[0].shop.id != shop.id:
            return CartResult(ok=False, reason=CartRejection.DIFFERENT_SHOP)

        # Unknown hours never block an add
        if self.hours.is_shop_open(shop, now) is False:
            return CartResult(ok=False, reason=CartRejection.SHOP_CLOSED)

        if variation_id is None and item.default_variation is not None:
            variation_id = item.default_variation.id
        elif variation_id is not None and item.find_variation(variation_id) is None:
            return CartResult(ok=False, reason=CartRejection.INVALID_SELECTION)
        if quantity < 1:
            return CartResult(ok=False, reason=CartRejection.INVALID_SELECTION)

        selections = normalize_selections(modifier_selections)

        for index, line in enumerate(self._items):
            if (
                line.shop.id == shop.id
                and line.menu_item_id == item.id
                and line.selected_variation_id == variation_id
                and normalize_selections(line.selected_modifier_ids_by_list) == selections
            ):
                new_quantity = line.quantity + quantity
                if new_quantity > self.max_quantity:
                    return CartResult(ok=False, reason=CartRejection.QUANTITY_LIMIT)
                self._snapshot()
                merged = line.model_copy(update={"quantity": new_quantity})
                self._items[index] = merged
                return CartResult(ok=True, line=merged)

        if quantity > self.max_quantity:
            return CartResult(ok=False, reason=CartRejection.QUANTITY_LIMIT)

        line = CartItem(
            shop=shop,
            menu_item=item,
            category=category,
            quantity=quantity,
            selected_variation_id=variation_id,
            selected_modifier_ids_by_list=selections,
            unit_price=resolve_unit_price(item, variation_id, selections),
            customization_description=customization_description
            or build_customization_description(item, variation_id, selections),
        )
        self._snapshot()
        self._items.append(line)
        logger.debug(f"Added {item.name} x{quantity} to cart for shop {shop.id}")
        return CartResult(ok=True, line=line)

    def update_quantity(self, line_id: str, quantity: int) -> CartResult:
        """Set a line's quantity. Zero or less removes the line."""
        index = self._find_line(line_id)
        if index is None:
            return CartResult(ok=False, reason=CartRejection.NOT_FOUND)
        if quantity <= 0:
            return self.remove_item(line_id)
        if quantity > self.max_quantity:
            return CartResult(ok=False, reason=CartRejection.QUANTITY_LIMIT)

        self._snapshot()
        updated = self._items[index].model_copy(update={"quantity": quantity})
        self._items[index] = updated
        return CartResult(ok=True, line=updated)

    def remove_item(self, line_id: str) -> CartResult:
        index = self._find_line(line_id)
        if index is None:
            return CartResult(ok=False, reason=CartRejection.NOT_FOUND)
        self._snapshot()
        removed = self._items.pop(index)
        return CartResult(ok=True, line=removed)

    def clear_cart(self):
        """Empty the cart and drop the cached business hours of its shop."""
        shop = self.shop
        if self._items:
            self._snapshot()
        self._items.clear()
        if shop is not None:
            self.hours.clear_cache(shop.id)

    def undo(self) -> bool:
        """Restore the cart as it was before the last mutation."""
        if not self._history:
            return False
        self._items = self._history.pop()
        return True

    def summary(self) -> CartSummary:
        return CartSummary(
            shop_id=self.shop.id if self.shop else None,
            line_count=len(self._items),
            item_count=self.total_quantity,
            subtotal=self.total_price,
        )

    def validate_for_checkout(self, now: Optional[datetime] = None) -> List[str]:
        """Problems that block checkout. Empty list means the cart can be paid."""
        if not self._items:
            return ["Cart is empty"]

        problems = []
        if len({line.shop.id for line in self._items}) > 1:
            problems.append("Cart contains items from more than one shop")
        if self.hours.is_shop_open(self.shop, now) is False:
            problems.append(f"{self.shop.name} is currently closed")
        for line in self._items:
            if line.quantity > self.max_quantity:
                problems.append(f"{line.menu_item.name}: quantity above {self.max_quantity}")
        if self.total_price <= 0:
            problems.append("Cart total must be greater than zero")
        return problems

    def reprice_against_catalog(self, categories: List[MenuCategory]) -> List[str]:
        """Re-resolve every line against a refreshed menu.

        Lines whose item or size no longer exists are dropped. Returns the
        ids of dropped lines.
        """
        dropped = []
        repriced = []
        for line in self._items:
            found = find_menu_item(categories, line.menu_item_id)
            if found is None:
                dropped.append(line.id)
                continue
            category, item = found
            variation_id = line.selected_variation_id
            if variation_id is not None and item.find_variation(variation_id) is None:
                dropped.append(line.id)
                continue
            selections = _known_selections(item, line.selected_modifier_ids_by_list)
            repriced.append(
                line.model_copy(
                    update={
                        "menu_item": item,
                        "category": line.category or category,
                        "selected_modifier_ids_by_list": selections,
                        "unit_price": resolve_unit_price(item, variation_id, selections),
                        "customization_description": build_customization_description(item, variation_id, selections),
                    }
                )
            )

        if repriced != self._items:
            self._snapshot()
            self._items = repriced
        if dropped:
            logger.info(f"Dropped {len(dropped)} cart lines no longer on the menu")
        return dropped


def _known_selections(item: MenuItem, selections: Mapping[str, Sequence[str]]) -> dict:
    """Drop modifier ids (and whole lists) the item no longer offers."""
    known = {}
    for list_id, modifier_ids in selections.items():
        modifier_list = item.find_modifier_list(list_id)
        if modifier_list is None:
            continue
        known[list_id] = [m for m in modifier_ids if modifier_list.find_modifier(m) is not None]
    return normalize_selections(known)
