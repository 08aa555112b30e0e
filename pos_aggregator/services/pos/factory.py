"""
Adapter selection by vendor tag.
"""
from typing import Dict, Type
from pos_aggregator.models.shop_models import PosType, Shop
from pos_aggregator.services.pos.base import POSAdapter
from pos_aggregator.services.pos.clover_adapter import CloverAdapter
from pos_aggregator.services.pos.errors import POSConfigurationError
from pos_aggregator.services.pos.square_adapter import SquareAdapter

ADAPTERS: Dict[str, Type[POSAdapter]] = {
    PosType.SQUARE.value: SquareAdapter,
    PosType.CLOVER.value: CloverAdapter,
}

_instances: Dict[str, POSAdapter] = {}


def get_adapter_for_vendor(vendor: str) -> POSAdapter:
    """Return the shared adapter for ``vendor``.

    Raises:
        POSConfigurationError: no adapter is registered for the tag.
    """
    key = (vendor or "").lower()
    adapter_class = ADAPTERS.get(key)
    if adapter_class is None:
        raise POSConfigurationError(f"Unsupported POS vendor: {vendor!r}")
    if key not in _instances:
        _instances[key] = adapter_class()
    return _instances[key]


def get_pos_adapter(shop: Shop) -> POSAdapter:
    return get_adapter_for_vendor(shop.pos_type)
