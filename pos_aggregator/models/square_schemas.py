from pydantic import BaseModel
from typing import List, Optional

# --- Shared ---

class SquareMoney(BaseModel):
    amount: Optional[int] = None
    currency: Optional[str] = None

class SquareError(BaseModel):
    category: Optional[str] = None
    code: Optional[str] = None
    detail: Optional[str] = None
    field: Optional[str] = None

class SquareErrorResponse(BaseModel):
    errors: Optional[List[SquareError]] = []


# --- Catalog Schemas ---

class SquareCategoryData(BaseModel):
    name: Optional[str] = None

class SquareItemCategory(BaseModel):
    id: str
    ordinal: Optional[int] = None

class SquareItemVariationData(BaseModel):
    name: Optional[str] = None
    pricing_type: Optional[str] = None
    price_money: Optional[SquareMoney] = None
    ordinal: Optional[int] = None

class SquareItemVariation(BaseModel):
    id: str
    type: Optional[str] = None
    is_deleted: Optional[bool] = False
    item_variation_data: Optional[SquareItemVariationData] = None

class SquareModifierListInfo(BaseModel):
    modifier_list_id: str
    min_selected_modifiers: Optional[int] = None
    max_selected_modifiers: Optional[int] = None
    enabled: Optional[bool] = None
    hidden_from_customer: Optional[bool] = None

class SquareItemData(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[str] = None  # pre-2023 single category field
    categories: Optional[List[SquareItemCategory]] = []
    variations: Optional[List[SquareItemVariation]] = []
    image_ids: Optional[List[str]] = []
    modifier_list_info: Optional[List[SquareModifierListInfo]] = []
    is_archived: Optional[bool] = False

    def category_ids(self) -> List[str]:
        ids = [c.id for c in self.categories or []]
        if self.category_id and self.category_id not in ids:
            ids.append(self.category_id)
        return ids

class SquareImageData(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None
    caption: Optional[str] = None

class SquareModifierData(BaseModel):
    name: Optional[str] = None
    price_money: Optional[SquareMoney] = None
    ordinal: Optional[int] = None
    modifier_list_id: Optional[str] = None
    on_by_default: Optional[bool] = False
    hidden_online: Optional[bool] = False

class SquareModifier(BaseModel):
    id: str
    type: Optional[str] = None
    is_deleted: Optional[bool] = False
    modifier_data: Optional[SquareModifierData] = None

class SquareModifierListData(BaseModel):
    name: Optional[str] = None
    ordinal: Optional[int] = None
    selection_type: Optional[str] = None
    min_selected_modifiers: Optional[int] = None
    max_selected_modifiers: Optional[int] = None
    modifiers: Optional[List[SquareModifier]] = []

class SquareCatalogObject(BaseModel):
    id: str
    type: str
    is_deleted: Optional[bool] = False
    category_data: Optional[SquareCategoryData] = None
    item_data: Optional[SquareItemData] = None
    image_data: Optional[SquareImageData] = None
    modifier_list_data: Optional[SquareModifierListData] = None
    present_at_all_locations: Optional[bool] = None
    present_at_location_ids: Optional[List[str]] = None

class SquareCatalogSearchResponse(BaseModel):
    objects: Optional[List[SquareCatalogObject]] = []
    related_objects: Optional[List[SquareCatalogObject]] = []
    cursor: Optional[str] = None


# --- Order Schemas ---

class SquareOrderFulfillment(BaseModel):
    uid: Optional[str] = None
    type: Optional[str] = None
    state: Optional[str] = None

class SquareOrder(BaseModel):
    id: str
    location_id: Optional[str] = None
    state: Optional[str] = None
    fulfillments: Optional[List[SquareOrderFulfillment]] = []
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

class SquareOrderResponse(BaseModel):
    order: Optional[SquareOrder] = None
    errors: Optional[List[SquareError]] = []


# --- Location / Business Hours Schemas ---

class SquareBusinessHoursPeriod(BaseModel):
    day_of_week: str
    start_local_time: Optional[str] = None
    end_local_time: Optional[str] = None

class SquareBusinessHours(BaseModel):
    periods: Optional[List[SquareBusinessHoursPeriod]] = []

class SquareLocation(BaseModel):
    id: str
    name: Optional[str] = None
    timezone: Optional[str] = None
    business_hours: Optional[SquareBusinessHours] = None

class SquareLocationsResponse(BaseModel):
    locations: Optional[List[SquareLocation]] = []

class SquareLocationResponse(BaseModel):
    location: Optional[SquareLocation] = None
