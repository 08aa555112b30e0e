import pytest
from pos_aggregator.services.pos.clover_adapter import CloverAdapter
from pos_aggregator.services.pos.errors import POSConfigurationError
from pos_aggregator.services.pos.factory import get_adapter_for_vendor, get_pos_adapter
from pos_aggregator.services.pos.square_adapter import SquareAdapter


def test_adapter_by_vendor_tag(square_shop, clover_shop):
    assert isinstance(get_pos_adapter(square_shop), SquareAdapter)
    assert isinstance(get_pos_adapter(clover_shop), CloverAdapter)
    assert get_adapter_for_vendor("SQUARE") is get_adapter_for_vendor("square")


def test_unknown_vendor(square_shop):
    toast_shop = square_shop.model_copy(update={"pos_type": "toast"})

    with pytest.raises(POSConfigurationError, match="toast"):
        get_pos_adapter(toast_shop)
