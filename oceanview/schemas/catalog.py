from datetime import date
from typing import List, Optional

from pydantic import Field

from oceanview.schemas.common import ApiModel, Entity


class DestinationCreate(ApiModel):
    name: str
    description: str
    image_url: str
    price_from: int = Field(ge=0)
    rating: float = Field(ge=0, le=5)
    cruise_count: int = Field(ge=0)
    duration_range: str


class Destination(Entity, DestinationCreate):
    id: int


class CruiseCreate(ApiModel):
    title: str
    description: str
    destination_id: int
    image_url: str
    departure_from: str
    duration: int = Field(ge=1)  # nights
    price_per_person: int = Field(ge=0)
    original_price: Optional[int] = Field(default=None, ge=0)
    cabin_type: str
    inclusions: str
    is_best_seller: bool = False
    is_new_itinerary: bool = False
    rating: float = Field(ge=0, le=5)
    available_packages: List[str] = Field(default_factory=list)
    available_dates: Optional[List[date]] = None


class Cruise(Entity, CruiseCreate):
    id: int


class CabinTypeCreate(ApiModel):
    cruise_id: int
    name: str
    description: str
    price_modifier: int = 0
    capacity: int = Field(ge=1)
    amenities: Optional[List[str]] = None
    image_url: Optional[str] = None


class CabinType(Entity, CabinTypeCreate):
    id: int


class AmenityCreate(ApiModel):
    name: str
    description: str
    image_url: str
    category: Optional[str] = None


class Amenity(Entity, AmenityCreate):
    id: int


ANY_DESTINATION = "Any Destination"
ANY_LENGTH = "Any Length"

# label -> (min nights, max nights or None)
DURATION_BUCKETS = {
    "2-5 Days": (2, 5),
    "6-9 Days": (6, 9),
    "10+ Days": (10, None),
}


class CruiseSearch(ApiModel):
    destination: Optional[str] = None
    departure_date: Optional[str] = None
    duration: Optional[str] = None
    travelers: Optional[str] = None

    def matches_duration(self, nights: int) -> bool:
        bucket = DURATION_BUCKETS.get(self.duration or "")
        if bucket is None:
            return True
        low, high = bucket
        return nights >= low and (high is None or nights <= high)

    @property
    def destination_name(self) -> Optional[str]:
        if not self.destination or self.destination == ANY_DESTINATION:
            return None
        return self.destination
