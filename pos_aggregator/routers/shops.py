"""
Shops Router: shop directory, normalized menus and business hours.
"""
from dataclasses import asdict
from fastapi import APIRouter, HTTPException, status
from pos_aggregator.models.shop_models import Shop
from pos_aggregator.services.business_hours_service import business_hours_service
from pos_aggregator.services.menu_service import menu_service
from pos_aggregator.services.shop_service import shop_service

router = APIRouter()


def _require_shop(shop_id: str) -> Shop:
    shop = shop_service.get_shop(shop_id)
    if shop is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Shop {shop_id} not found")
    return shop


@router.get("/shops")
async def list_shops():
    shops = shop_service.list_shops()
    return {"shops": [s.model_dump(mode="json") for s in shops], "count": len(shops)}


@router.get("/shops/{shop_id}/menu")
async def get_menu(shop_id: str, refresh: bool = False):
    shop = _require_shop(shop_id)
    if refresh:
        categories = await menu_service.refresh_menu(shop)
    else:
        categories = await menu_service.prime_menu(shop)

    error = menu_service.errors.get(shop.id)
    if error and not categories:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=error)

    return {
        "shop_id": shop.id,
        "categories": [c.model_dump(mode="json") for c in categories],
        "stale_error": error,
    }


@router.get("/shops/{shop_id}/hours")
async def get_hours(shop_id: str, refresh: bool = False):
    shop = _require_shop(shop_id)
    info = await business_hours_service.get_business_hours(shop, force_refresh=refresh)
    summary = business_hours_service.summary(shop)
    return {
        "shop_id": shop.id,
        "weekly_hours": info.model_dump(mode="json")["weekly_hours"] if info else None,
        "summary": asdict(summary),
        "error": business_hours_service.errors.get(shop.id),
    }
