"""Shop and business-hours models."""
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Day codes in weekday order starting Sunday
DAY_CODES = ("SUN", "MON", "TUE", "WED", "THU", "FRI", "SAT")


class PosType(str, Enum):
    SQUARE = "square"
    CLOVER = "clover"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class Shop(BaseModel):
    """A merchant location. Loaded once from the shop directory, never mutated.

    ``pos_type`` is kept as a plain string so an unsupported vendor tag
    surfaces as a configuration error at adapter selection rather than
    a decode failure.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    address: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    phone: str = ""
    website: str = ""
    description: str = ""
    image_name: str = ""
    stamp_name: str = ""
    merchant_id: str
    pos_type: str = PosType.SQUARE.value
    timezone: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return (
            bool(self.id and self.name and self.address and self.phone and self.merchant_id)
            and -90 <= self.latitude <= 90
            and -180 <= self.longitude <= 180
        )


class BusinessHoursPeriod(BaseModel):
    """An opening window in the shop's local time, ``HH:MM`` strings."""

    model_config = ConfigDict(frozen=True)

    start_time: str
    end_time: str

    @property
    def spans_midnight(self) -> bool:
        return self.start_time > self.end_time


class BusinessHoursInfo(BaseModel):
    weekly_hours: Dict[str, List[BusinessHoursPeriod]] = Field(default_factory=dict)
    is_currently_open: bool = False

    def periods_for(self, day_code: str) -> List[BusinessHoursPeriod]:
        return self.weekly_hours.get(day_code, [])

    @property
    def has_schedule(self) -> bool:
        return any(self.weekly_hours.values())
