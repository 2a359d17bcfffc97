from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional
from decimal import Decimal
from enum import Enum

SEAT_LABEL_PATTERN = r"^[A-Z]{1,3}[1-9][0-9]{0,2}$"

class SeatType(str, Enum):
    """Seat type enumeration"""
    STANDARD = "STANDARD"
    PREMIUM = "PREMIUM"
    VIP = "VIP"
    ACCESSIBLE = "ACCESSIBLE"

# Multiplier applied when a seat type is set without an explicit one
DEFAULT_PRICE_MULTIPLIERS = {
    SeatType.STANDARD: Decimal("1.00"),
    SeatType.PREMIUM: Decimal("1.20"),
    SeatType.VIP: Decimal("1.50"),
    SeatType.ACCESSIBLE: Decimal("1.00"),
}

class Seat(BaseModel):
    id: int
    theatre_id: int
    screen_number: int
    row_name: str
    seat_number: int
    label: str
    seat_type: SeatType
    price_multiplier: Decimal

    class Config:
        from_attributes = True

class SeatInitializeRequest(BaseModel):
    rows: int = Field(..., ge=1, le=52, description="Number of rows (A, B, ...)")
    seats_per_row: int = Field(..., ge=1, le=100)

class SeatInitializeResponse(BaseModel):
    theatre_id: int
    screen_number: int
    seats_created: int

class SeatUpdate(BaseModel):
    seat_type: SeatType
    price_multiplier: Optional[Decimal] = Field(None, gt=0, max_digits=4, decimal_places=2)

class SeatRowUpdate(SeatUpdate):
    theatre_id: int
    screen_number: int = Field(..., ge=1)
    row_name: str = Field(..., pattern=r"^[A-Z]{1,3}$")

class SeatBulkUpdate(SeatUpdate):
    theatre_id: int
    screen_number: int = Field(..., ge=1)
    seat_labels: List[str] = Field(..., min_length=1)

    @field_validator("seat_labels")
    @classmethod
    def normalize_labels(cls, v):
        return [label.strip().upper() for label in v]

class ScreenSummary(BaseModel):
    screen_number: int
    seat_count: int

class TheatreScreens(BaseModel):
    theatre_id: int
    total_screens: Optional[int] = None
    screens: List[ScreenSummary]

class ScreenSeatMap(BaseModel):
    theatre_id: int
    screen_number: int
    total_seats: int
    rows: Dict[str, List[Seat]]
