"""Unified menu models.

Vendor catalogs (Square, Clover) are normalized into these models so the cart
and pricing code never sees a vendor payload. Prices are decimal currency
units; vendor minor units are converted with ``money_from_cents``.
"""
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# max_selections value meaning "no upper limit"
UNBOUNDED = -1

CENTS = Decimal("0.01")


def money_from_cents(amount: Optional[int]) -> Decimal:
    """Convert integer minor units (cents) to a 2dp Decimal. Missing amounts are 0."""
    if amount is None:
        return Decimal("0.00")
    return (Decimal(amount) / 100).quantize(CENTS, rounding=ROUND_HALF_UP)


class SelectionType(str, Enum):
    SINGLE = "SINGLE"
    MULTIPLE = "MULTIPLE"


class MenuItemModifier(BaseModel):
    """A selectable add-on; ``price`` is a signed delta on top of the item price."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: Decimal = Decimal("0.00")
    is_default: bool = False


class MenuItemVariation(BaseModel):
    """A size option. ``price`` is absolute, not a delta."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: Decimal = Field(default=Decimal("0.00"), ge=0)
    ordinal: int = 0


class MenuItemModifierList(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    selection_type: SelectionType = SelectionType.SINGLE
    min_selections: int = 0
    max_selections: int = 1
    modifiers: List[MenuItemModifier] = []

    @property
    def is_single_selection(self) -> bool:
        return self.selection_type == SelectionType.SINGLE

    @property
    def is_unbounded(self) -> bool:
        return self.max_selections == UNBOUNDED

    @property
    def default_modifiers(self) -> List[MenuItemModifier]:
        return [m for m in self.modifiers if m.is_default]

    def allows_more(self, count: int) -> bool:
        """True when ``count`` selections can grow by one without exceeding the max."""
        return self.is_unbounded or count < self.max_selections

    def find_modifier(self, modifier_id: str) -> Optional[MenuItemModifier]:
        return next((m for m in self.modifiers if m.id == modifier_id), None)


class MenuItem(BaseModel):
    """A sellable item.

    When ``variations`` is present, ``price`` equals the price of the
    lowest-ordinal variation. Items without size options carry ``None``.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: Optional[str] = None
    price: Decimal = Field(default=Decimal("0.00"), ge=0)
    variations: Optional[List[MenuItemVariation]] = None
    modifier_lists: List[MenuItemModifierList] = []
    image_url: Optional[str] = None

    @property
    def sorted_variations(self) -> List[MenuItemVariation]:
        return sorted(self.variations or [], key=lambda v: v.ordinal)

    @property
    def default_variation(self) -> Optional[MenuItemVariation]:
        variations = self.sorted_variations
        return variations[0] if variations else None

    @property
    def base_price(self) -> Decimal:
        variation = self.default_variation
        return variation.price if variation else self.price

    @property
    def has_size_variations(self) -> bool:
        return bool(self.variations) and len(self.variations) > 1

    @property
    def has_modifiers(self) -> bool:
        return bool(self.modifier_lists)

    def find_variation(self, variation_id: str) -> Optional[MenuItemVariation]:
        return next((v for v in self.variations or [] if v.id == variation_id), None)

    def find_modifier_list(self, list_id: str) -> Optional[MenuItemModifierList]:
        return next((ml for ml in self.modifier_lists if ml.id == list_id), None)


class MenuCategory(BaseModel):
    """Category identity is its name."""

    model_config = ConfigDict(frozen=True)

    name: str
    items: List[MenuItem] = []

    @property
    def id(self) -> str:
        return self.name

    def find_item(self, item_id: str) -> Optional[MenuItem]:
        return next((i for i in self.items if i.id == item_id), None)


def find_menu_item(categories: List[MenuCategory], item_id: str) -> Optional[tuple]:
    """Locate an item across categories. Returns ``(category_name, item)`` or ``None``."""
    for category in categories:
        item = category.find_item(item_id)
        if item is not None:
            return category.name, item
    return None
