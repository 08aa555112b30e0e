import httpx
import pytest
import respx
from decimal import Decimal
from pos_aggregator.models.order_models import OrderStatus
from pos_aggregator.services.pos.clover_adapter import CloverAdapter
from pos_aggregator.services.pos.errors import DecodeError, VendorAPIError
from pos_aggregator.services.token_service import CloverCredentials

BASE_URL = "https://clover.test/v3/merchants/CL-MERCHANT"


@pytest.fixture
def tokens(mocker):
    tokens = mocker.AsyncMock()
    tokens.get_clover_credentials.return_value = CloverCredentials(access_token="cl-token", merchant_id="CL-MERCHANT")
    return tokens


@pytest.fixture
def adapter(tokens, mock_settings):
    return CloverAdapter(tokens=tokens, timeout=5, base_url="https://clover.test")


@pytest.mark.asyncio
async def test_fetch_catalog(adapter, clover_shop):
    with respx.mock(base_url=BASE_URL) as respx_mock:
        respx_mock.get("/categories").mock(
            return_value=httpx.Response(200, json={"elements": [{"id": "c-1", "name": "Drinks"}]})
        )
        items = respx_mock.get("/items").mock(
            return_value=httpx.Response(
                200,
                json={
                    "elements": [
                        {
                            "id": "i-1",
                            "name": "Cold Brew",
                            "price": 500,
                            "categories": {"elements": [{"id": "c-1"}]},
                            "modifierGroups": {"elements": [{"id": "g-1"}]},
                        }
                    ]
                },
            )
        )
        respx_mock.get("/modifier_groups").mock(
            return_value=httpx.Response(
                200,
                json={"elements": [{"id": "g-1", "name": "Ice", "modifiers": {"elements": [{"id": "m-1", "name": "Light Ice", "price": 0}]}}]},
            )
        )

        menu = await adapter.fetch_catalog(clover_shop)

    assert items.calls[0].request.url.params["expand"] == "categories,modifierGroups"
    assert items.calls[0].request.headers["Authorization"] == "Bearer cl-token"
    assert menu[0].name == "Drinks"
    assert menu[0].items[0].price == Decimal("5.00")
    assert menu[0].items[0].modifier_lists[0].name == "Ice"


@pytest.mark.asyncio
async def test_fetch_catalog_fails_when_one_listing_fails(adapter, clover_shop):
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as respx_mock:
        respx_mock.get("/categories").mock(return_value=httpx.Response(200, json={"elements": []}))
        respx_mock.get("/items").mock(return_value=httpx.Response(401, json={"message": "401 Unauthorized"}))
        respx_mock.get("/modifier_groups").mock(return_value=httpx.Response(200, json={"elements": []}))

        with pytest.raises(VendorAPIError, match="401 Unauthorized"):
            await adapter.fetch_catalog(clover_shop)


@pytest.mark.asyncio
async def test_fetch_order_status(adapter):
    with respx.mock(base_url=BASE_URL) as respx_mock:
        respx_mock.get("/orders/cl-1").mock(
            return_value=httpx.Response(200, json={"id": "cl-1", "state": "paid", "paymentState": "PAID"})
        )

        assert await adapter.fetch_order_status("cl-1", "CL-MERCHANT") == OrderStatus.COMPLETED


@pytest.mark.asyncio
async def test_fetch_business_hours(adapter, clover_shop):
    with respx.mock(base_url=BASE_URL) as respx_mock:
        respx_mock.get("/opening_hours").mock(
            return_value=httpx.Response(
                200, json={"elements": [{"id": "h-1", "monday": {"elements": [{"start": 420, "end": 1020}]}}]}
            )
        )

        info = await adapter.fetch_business_hours(clover_shop)

    assert info.weekly_hours["MON"][0].start_time == "07:00"
    assert info.weekly_hours["MON"][0].end_time == "17:00"


@pytest.mark.asyncio
async def test_no_opening_hours(adapter, clover_shop):
    with respx.mock(base_url=BASE_URL) as respx_mock:
        respx_mock.get("/opening_hours").mock(return_value=httpx.Response(200, json={"elements": []}))

        assert await adapter.fetch_business_hours(clover_shop) is None


@pytest.mark.asyncio
async def test_unnormalizable_catalog_raises_decode_error(adapter, clover_shop):
    with respx.mock(base_url=BASE_URL) as respx_mock:
        respx_mock.get("/categories").mock(return_value=httpx.Response(200, json={"elements": []}))
        respx_mock.get("/items").mock(
            return_value=httpx.Response(200, json={"elements": [{"id": "i-1", "name": "Refund", "price": -100}]})
        )
        respx_mock.get("/modifier_groups").mock(return_value=httpx.Response(200, json={"elements": []}))

        with pytest.raises(DecodeError):
            await adapter.fetch_catalog(clover_shop)
