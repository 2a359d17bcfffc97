from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

class ScreeningFormat(str, Enum):
    """Projection format of a screening"""
    STANDARD = "STANDARD"
    IMAX = "IMAX"
    DOLBY_ATMOS = "DOLBY_ATMOS"
    THREE_D = "3D"
    FOUR_D = "4D"

def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Screening times are stored as naive local time"""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value

class ScreeningCreate(BaseModel):
    movie_id: int
    theatre_id: int
    screen_number: int = Field(..., ge=1)
    start_time: datetime
    format: ScreeningFormat = ScreeningFormat.STANDARD
    base_price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)

    @field_validator("start_time")
    @classmethod
    def normalize_start_time(cls, v):
        return to_local_naive(v)

class ScreeningUpdate(BaseModel):
    # Movie and theatre are fixed once a screening exists
    start_time: Optional[datetime] = None
    screen_number: Optional[int] = Field(None, ge=1)
    format: Optional[ScreeningFormat] = None
    base_price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)

    @field_validator("start_time")
    @classmethod
    def normalize_start_time(cls, v):
        return to_local_naive(v)

class Screening(BaseModel):
    id: int
    movie_id: int
    movie_title: Optional[str] = None
    theatre_id: int
    theatre_name: Optional[str] = None
    screen_number: int
    start_time: datetime
    end_time: datetime
    format: ScreeningFormat
    base_price: Decimal

    class Config:
        from_attributes = True

class ScreeningList(BaseModel):
    screenings: List[Screening]
    total: int
    page: int
    per_page: int

class LayoutSeat(BaseModel):
    label: str
    seat_number: int
    seat_type: str
    price_multiplier: Decimal
    price: Decimal
    booked: bool

class LayoutRow(BaseModel):
    name: str
    seats: List[LayoutSeat]

class SeatingLayout(BaseModel):
    screening_id: int
    theatre_id: int
    screen_number: int
    base_price: Decimal
    total_seats: int
    booked_seats: int
    rows: List[LayoutRow]
