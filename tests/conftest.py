import json
import pytest
from decimal import Decimal
from pos_aggregator.models.menu_models import (
    UNBOUNDED,
    MenuCategory,
    MenuItem,
    MenuItemModifier,
    MenuItemModifierList,
    MenuItemVariation,
    SelectionType,
)
from pos_aggregator.models.shop_models import Shop
from pos_aggregator.services.business_hours_service import BusinessHoursService
from pos_aggregator.utils.config import settings


class InMemoryStore:
    """Stands in for the Redis-backed CacheService in unit tests."""

    def __init__(self):
        self.data = {}
        self.ttls = {}

    async def get_json(self, key):
        raw = self.data.get(key)
        return json.loads(raw) if raw else None

    async def set_json(self, key, value, ttl=None):
        self.data[key] = json.dumps(value, default=str)
        self.ttls[key] = ttl
        return True

    async def delete(self, key):
        self.data.pop(key, None)
        return True


@pytest.fixture
def mock_settings(mocker):
    mocker.patch.object(settings, "TOKEN_SERVICE_URL", "https://tokens.test")
    mocker.patch.object(settings, "SQUARE_API_BASE_URL", "https://square.test/v2")
    mocker.patch.object(settings, "CLOVER_API_BASE_URL", "https://clover.test")
    mocker.patch.object(settings, "DEFAULT_TIMEZONE", "UTC")
    return settings


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def square_shop():
    return Shop(
        id="shop-sq",
        name="Qisa Coffee",
        address="1 Main St",
        phone="5555550100",
        merchant_id="SQ-MERCHANT",
        pos_type="square",
        timezone="UTC",
    )


@pytest.fixture
def clover_shop():
    return Shop(
        id="shop-cl",
        name="Harbor Roasters",
        address="2 Wharf Rd",
        phone="5555550111",
        merchant_id="CL-MERCHANT",
        pos_type="clover",
        timezone="UTC",
    )


@pytest.fixture
def milk_list():
    return MenuItemModifierList(
        id="milk",
        name="Milk",
        selection_type=SelectionType.SINGLE,
        min_selections=1,
        max_selections=1,
        modifiers=[
            MenuItemModifier(id="whole", name="Whole Milk", price=Decimal("0.00"), is_default=True),
            MenuItemModifier(id="oat", name="Oat Milk", price=Decimal("0.50")),
        ],
    )


@pytest.fixture
def syrup_list():
    return MenuItemModifierList(
        id="syrup",
        name="Syrup",
        selection_type=SelectionType.MULTIPLE,
        min_selections=0,
        max_selections=UNBOUNDED,
        modifiers=[
            MenuItemModifier(id="vanilla", name="Vanilla", price=Decimal("0.75")),
            MenuItemModifier(id="caramel", name="Caramel", price=Decimal("0.75")),
        ],
    )


@pytest.fixture
def latte(milk_list, syrup_list):
    return MenuItem(
        id="latte",
        name="Latte",
        price=Decimal("3.50"),
        variations=[
            MenuItemVariation(id="large", name="Large", price=Decimal("4.25"), ordinal=1),
            MenuItemVariation(id="small", name="Small", price=Decimal("3.50"), ordinal=0),
        ],
        modifier_lists=[milk_list, syrup_list],
    )


@pytest.fixture
def cookie():
    return MenuItem(id="cookie", name="Cookie", price=Decimal("2.00"))


@pytest.fixture
def menu(latte, cookie):
    return [
        MenuCategory(name="Bakery", items=[cookie]),
        MenuCategory(name="Coffee", items=[latte]),
    ]


@pytest.fixture
def hours_service(mocker):
    """Hours service with no cached schedules; vendor calls are never made."""
    return BusinessHoursService(adapter_resolver=mocker.Mock(side_effect=AssertionError("no vendor calls")))
