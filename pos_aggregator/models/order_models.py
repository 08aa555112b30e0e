"""Cart line and order models."""
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pos_aggregator.models.menu_models import MenuItem, money_from_cents
from pos_aggregator.models.shop_models import PosType, Shop


class OrderStatus(str, Enum):
    AUTHORIZED = "AUTHORIZED"    # Payment authorized, awaiting confirmation
    SUBMITTED = "SUBMITTED"      # Placed, waiting for merchant
    IN_PROGRESS = "IN_PROGRESS"  # Merchant is preparing
    READY = "READY"              # Ready for pickup
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    DRAFT = "DRAFT"
    PENDING = "PENDING"          # legacy
    ACTIVE = "active"            # legacy

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

    @classmethod
    def parse(cls, value: Optional[str]) -> "OrderStatus":
        """Decode a stored status; missing or unknown values read as AUTHORIZED."""
        try:
            return cls(value)
        except ValueError:
            return cls.AUTHORIZED


class CartItem(BaseModel):
    """One cart line: an item snapshot plus its size and modifier choices."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    shop: Shop
    menu_item: MenuItem
    category: str = ""
    quantity: int = Field(default=1, ge=1)
    selected_variation_id: Optional[str] = None
    selected_modifier_ids_by_list: Dict[str, List[str]] = Field(default_factory=dict)
    unit_price: Decimal = Decimal("0.00")
    customization_description: Optional[str] = None

    @property
    def menu_item_id(self) -> str:
        return self.menu_item.id

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity


class Order(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    shop: Shop
    items: List[CartItem] = []
    total_amount: Decimal = Decimal("0.00")
    transaction_id: str
    vendor_order_id: Optional[str] = None
    status: OrderStatus = OrderStatus.AUTHORIZED
    receipt_url: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "Order":
        """Decode a stored order, accepting the legacy camelCase record shape.

        Legacy records keep amounts in cents, the vendor order id under
        ``orderId`` and may lack the shop snapshot or the line items.
        """
        if "transactionId" not in data:
            return cls.model_validate(data)

        shop_data = data.get("coffeeShopData")
        if shop_data:
            # Legacy shops predate vendor tags
            shop = Shop.model_validate(
                {**shop_data, "id": str(shop_data.get("id", "unknown")), "posType": PosType.SQUARE.value}
            )
        else:
            shop = Shop(
                id="unknown",
                name="Unknown Shop",
                address="Unknown Address",
                merchant_id=data.get("merchantId") or "unknown",
            )

        items = [_legacy_cart_item(shop, raw) for raw in data.get("items") or []]
        if not items:
            items = [
                CartItem(
                    shop=shop,
                    menu_item=MenuItem(id="unknown_item", name="Unknown Item"),
                    category="Unknown",
                )
            ]

        try:
            amount = int(Decimal(str(data.get("amount") or 0)))
        except (ArithmeticError, ValueError):
            amount = 0

        return cls(
            id=data["transactionId"],
            created_at=data.get("createdAt") or datetime.now(timezone.utc),
            shop=shop,
            items=items,
            total_amount=money_from_cents(amount),
            transaction_id=data["transactionId"],
            vendor_order_id=data.get("orderId"),
            status=OrderStatus.parse(data.get("status")),
            receipt_url=data.get("receiptUrl"),
        )


def _legacy_cart_item(shop: Shop, raw: Dict[str, Any]) -> CartItem:
    price = money_from_cents(raw.get("price") or 0)
    menu_item = MenuItem(id=raw.get("id") or raw["name"], name=raw["name"], price=price)
    return CartItem(
        shop=shop,
        menu_item=menu_item,
        category="Unknown",
        quantity=max(int(raw.get("quantity") or 1), 1),
        selected_variation_id=raw.get("selectedSizeId"),
        selected_modifier_ids_by_list=raw.get("selectedModifierIdsByList") or {},
        unit_price=price,
        customization_description=raw.get("customizations"),
    )
