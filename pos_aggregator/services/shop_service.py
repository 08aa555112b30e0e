"""
Shop Service: loads the shop directory from a JSON file.
"""
import json
from pathlib import Path
from typing import Dict, List, Optional
from pydantic import ValidationError
from pos_aggregator.models.shop_models import Shop
from pos_aggregator.utils.config import settings
import logging

logger = logging.getLogger(__name__)


class ShopService:
    def __init__(self, path: str = None):
        self.path = Path(path or settings.SHOPS_FILE)
        self._shops: Optional[Dict[str, Shop]] = None

    def _load(self) -> Dict[str, Shop]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.error(f"Shop directory not found at {self.path}")
            return {}
        except ValueError as e:
            logger.error(f"Shop directory {self.path} is not valid JSON: {e}")
            return {}

        shops: Dict[str, Shop] = {}
        skipped = 0
        for record in raw if isinstance(raw, list) else []:
            try:
                shop = Shop.model_validate(record)
            except ValidationError as e:
                logger.warning(f"Skipping undecodable shop record: {e.error_count()} errors")
                skipped += 1
                continue
            if not shop.is_valid:
                skipped += 1
                continue
            shops[shop.id] = shop

        if skipped:
            logger.warning(f"Filtered out {skipped} invalid shops")
        logger.info(f"Loaded {len(shops)} valid shops from {self.path}")
        return shops

    def list_shops(self) -> List[Shop]:
        if self._shops is None:
            self._shops = self._load()
        return list(self._shops.values())

    def get_shop(self, shop_id: str) -> Optional[Shop]:
        if self._shops is None:
            self._shops = self._load()
        return self._shops.get(shop_id)

    def reload(self):
        self._shops = None


shop_service = ShopService()
