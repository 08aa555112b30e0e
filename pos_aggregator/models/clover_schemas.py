from pydantic import BaseModel
from typing import List, Optional

# --- Catalog Schemas ---

class CloverCategory(BaseModel):
    id: str
    name: Optional[str] = None
    sortOrder: Optional[int] = None

class CloverModifier(BaseModel):
    id: str
    name: Optional[str] = None
    price: Optional[int] = None  # cents
    available: Optional[bool] = None

class CloverModifiers(BaseModel):
    elements: Optional[List[CloverModifier]] = []

class CloverModifierGroup(BaseModel):
    id: str
    name: Optional[str] = None
    showByDefault: Optional[bool] = None
    alternateName: Optional[str] = None
    minRequired: Optional[int] = None
    maxAllowed: Optional[int] = None
    modifiers: Optional[CloverModifiers] = None

class CloverRef(BaseModel):
    id: str

class CloverRefs(BaseModel):
    elements: Optional[List[CloverRef]] = []

class CloverItem(BaseModel):
    id: str
    name: Optional[str] = None
    price: Optional[int] = None  # cents
    priceType: Optional[str] = None
    hidden: Optional[bool] = None
    available: Optional[bool] = None
    categories: Optional[CloverRefs] = None
    modifierGroups: Optional[CloverRefs] = None

    def category_ids(self) -> List[str]:
        return [ref.id for ref in (self.categories.elements or [])] if self.categories else []

    def modifier_group_ids(self) -> List[str]:
        return [ref.id for ref in (self.modifierGroups.elements or [])] if self.modifierGroups else []

class CloverCategoriesResponse(BaseModel):
    elements: Optional[List[CloverCategory]] = []

class CloverItemsResponse(BaseModel):
    elements: Optional[List[CloverItem]] = []

class CloverModifierGroupsResponse(BaseModel):
    elements: Optional[List[CloverModifierGroup]] = []


# --- Order Schemas ---

class CloverOrder(BaseModel):
    id: str
    currency: Optional[str] = None
    total: Optional[int] = None  # cents
    state: Optional[str] = None  # open, locked, paid
    paymentState: Optional[str] = None  # OPEN, PAID, PARTIALLY_PAID, REFUNDED, PARTIALLY_REFUNDED
    createdTime: Optional[int] = None
    modifiedTime: Optional[int] = None


# --- Opening Hours Schemas ---

class CloverTimeSlot(BaseModel):
    start: int  # minutes since midnight
    end: int

class CloverDayHours(BaseModel):
    elements: Optional[List[CloverTimeSlot]] = []

class CloverOpeningHours(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    sunday: Optional[CloverDayHours] = None
    monday: Optional[CloverDayHours] = None
    tuesday: Optional[CloverDayHours] = None
    wednesday: Optional[CloverDayHours] = None
    thursday: Optional[CloverDayHours] = None
    friday: Optional[CloverDayHours] = None
    saturday: Optional[CloverDayHours] = None

class CloverOpeningHoursResponse(BaseModel):
    elements: Optional[List[CloverOpeningHours]] = []


# --- Errors ---

class CloverErrorResponse(BaseModel):
    message: Optional[str] = None
    type: Optional[str] = None
