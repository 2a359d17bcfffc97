from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Dict
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
import re

from src.config import settings
from src.seats.schemas import SEAT_LABEL_PATTERN

_SEAT_LABEL_RE = re.compile(SEAT_LABEL_PATTERN)

class PaymentStatus(str, Enum):
    """Payment status enumeration"""
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"

def normalize_seat_labels(labels: List[str]) -> List[str]:
    """Upper-case and validate seat labels such as 'C7'; duplicates are rejected"""
    normalized = [label.strip().upper() for label in labels]

    invalid = [label for label in normalized if not _SEAT_LABEL_RE.match(label)]
    if invalid:
        raise ValueError(f"Invalid seat label(s): {', '.join(invalid)}")

    duplicates = sorted({label for label in normalized if normalized.count(label) > 1})
    if duplicates:
        raise ValueError(f"Duplicate seat label(s): {', '.join(duplicates)}")

    return normalized

# Request Models
class BookingCreateRequest(BaseModel):
    """Request to book seats for a screening"""
    screening_id: int
    seat_labels: List[str] = Field(..., min_length=1, max_length=20)
    payment_method: str = Field("CARD", min_length=1, max_length=50)

    @field_validator("seat_labels")
    @classmethod
    def validate_seat_labels(cls, v):
        return normalize_seat_labels(v)

class PriceRequest(BaseModel):
    screening_id: int
    seat_labels: List[str] = Field(..., min_length=1, max_length=20)

    @field_validator("seat_labels")
    @classmethod
    def validate_seat_labels(cls, v):
        return normalize_seat_labels(v)

class BookingStatusUpdate(BaseModel):
    status: PaymentStatus

class BookingSearchFilters(BaseModel):
    """Filters for admin booking search"""
    status: Optional[PaymentStatus] = None
    movie_id: Optional[int] = None
    theatre_id: Optional[int] = None
    screening_id: Optional[int] = None
    user_id: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

# Response Models
class SeatPrice(BaseModel):
    label: str
    seat_type: Optional[str] = None  # None when the label is not in the seat inventory
    price_multiplier: Decimal
    price: Decimal

class PriceQuote(BaseModel):
    screening_id: int
    base_price: Decimal
    seat_count: int
    total_amount: Decimal
    currency: str
    breakdown: List[SeatPrice]

class Booking(BaseModel):
    """Booking details"""
    id: int
    booking_number: str
    user_id: int
    username: Optional[str] = None
    user_email: Optional[str] = None
    screening_id: int
    movie_id: Optional[int] = None
    movie_title: Optional[str] = None
    theatre_id: Optional[int] = None
    theatre_name: Optional[str] = None
    screen_number: Optional[int] = None
    screening_time: Optional[datetime] = None
    booking_time: datetime
    total_amount: Decimal
    currency: str
    payment_status: PaymentStatus
    payment_method: Optional[str] = None
    booked_seats: List[str]

class BookingStatistics(BaseModel):
    total_bookings: int
    bookings_by_status: Dict[str, int]
    total_revenue: Decimal
    refunded_amount: Decimal
    seats_sold: int
    currency: str
    last_updated: datetime = Field(default_factory=datetime.now)

def to_booking_schema(booking) -> Booking:
    screening = booking.screening
    return Booking(
        id=booking.id,
        booking_number=booking.booking_number,
        user_id=booking.user_id,
        username=booking.user.username if booking.user else None,
        user_email=booking.user.email if booking.user else None,
        screening_id=booking.screening_id,
        movie_id=screening.movie_id if screening else None,
        movie_title=screening.movie.title if screening and screening.movie else None,
        theatre_id=screening.theatre_id if screening else None,
        theatre_name=screening.theatre.name if screening and screening.theatre else None,
        screen_number=screening.screen_number if screening else None,
        screening_time=screening.start_time if screening else None,
        booking_time=booking.booking_time,
        total_amount=booking.total_amount,
        currency=settings.CURRENCY,
        payment_status=booking.payment_status,
        payment_method=booking.payment_method,
        booked_seats=list(booking.booked_seats or [])
    )
