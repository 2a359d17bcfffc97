"""
Booking & Ticketing Module

Seat booking for screenings with tiered pricing and ticket QR codes.

Key Components:
- booking_service.py: Booking lifecycle (book, cancel, refund, status changes)
- pricing.py: Seat price resolution from base price and seat multipliers
- ticket_service.py: QR code tickets rendered as PNG
- router.py: FastAPI endpoints for customers and staff
- schemas.py: Pydantic models for bookings, price quotes and statistics

Booking rules:
- A booking claims all of its seats or none of them
- A seat is held by at most one non-cancelled booking per screening
- Cancelling releases the seats and is only possible before the screening starts
"""

from .router import router
from .booking_service import BookingService
from .pricing import SeatPriceResolver
from .ticket_service import TicketService
from .schemas import (
    BookingCreateRequest, PriceRequest, PriceQuote, PaymentStatus,
    BookingStatusUpdate, BookingStatistics
)

__all__ = [
    "router",
    "BookingService",
    "SeatPriceResolver",
    "TicketService",
    "BookingCreateRequest",
    "PriceRequest",
    "PriceQuote",
    "PaymentStatus",
    "BookingStatusUpdate",
    "BookingStatistics"
]
