from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from src.database import get_db
from src.auth.dependencies import get_current_user, require_staff, require_admin
from src.auth.service import UserService
from src.bookings.schemas import (
    Booking, BookingCreateRequest, BookingSearchFilters, BookingStatistics,
    BookingStatusUpdate, PaymentStatus, PriceQuote, PriceRequest, to_booking_schema
)
from src.bookings.booking_service import BookingService
from src.bookings.ticket_service import TicketService
from src.exceptions import ForbiddenError

router = APIRouter()

def _ensure_can_view(db: Session, booking, current_user) -> None:
    if booking.user_id != current_user.id and not UserService.is_staff(db, current_user.id):
        raise ForbiddenError("You do not have access to this booking")

# Customer Endpoints
@router.post("/", response_model=Booking, status_code=status.HTTP_201_CREATED)
def create_booking(
    request: BookingCreateRequest,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Book seats for a screening"""
    booking = BookingService(db).create_booking(
        screening_id=request.screening_id,
        username=current_user.username,
        seat_labels=request.seat_labels,
        payment_method=request.payment_method
    )
    return to_booking_schema(booking)

@router.post("/price", response_model=PriceQuote)
def calculate_price(request: PriceRequest, db: Session = Depends(get_db)):
    """Price a seat selection without booking it"""
    return BookingService(db).quote_price(request.screening_id, request.seat_labels)

@router.get("/me", response_model=List[Booking])
def get_my_bookings(
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    bookings = BookingService(db).get_user_bookings(current_user.id)
    return [to_booking_schema(b) for b in bookings]

# Admin Endpoints
@router.get("/", response_model=List[Booking])
def search_bookings(
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    movie_id: Optional[int] = Query(None),
    theatre_id: Optional[int] = Query(None),
    screening_id: Optional[int] = Query(None),
    user_id: Optional[int] = Query(None),
    date_from: Optional[date] = Query(None, description="Booked on or after (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, description="Booked on or before (YYYY-MM-DD)"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    current_user = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """Search bookings across all users"""
    filters = BookingSearchFilters(
        status=status_filter,
        movie_id=movie_id,
        theatre_id=theatre_id,
        screening_id=screening_id,
        user_id=user_id,
        date_from=date_from,
        date_to=date_to
    )
    bookings = BookingService(db).search_bookings(filters, skip=skip, limit=limit)
    return [to_booking_schema(b) for b in bookings]

@router.get("/statistics", response_model=BookingStatistics)
def get_booking_statistics(
    current_user = Depends(require_staff),
    db: Session = Depends(get_db)
):
    return BookingService(db).get_statistics()

@router.get("/number/{booking_number}", response_model=Booking)
def get_booking_by_number(
    booking_number: str,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    booking = BookingService(db).get_booking_by_number(booking_number)
    _ensure_can_view(db, booking, current_user)
    return to_booking_schema(booking)

@router.get("/{booking_id}", response_model=Booking)
def get_booking(
    booking_id: int,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    booking = BookingService(db).get_booking(booking_id)
    _ensure_can_view(db, booking, current_user)
    return to_booking_schema(booking)

@router.get("/{booking_id}/qr", response_class=Response)
def get_booking_qr_code(
    booking_id: int,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Ticket QR code as a PNG image"""
    booking = BookingService(db).get_booking(booking_id)
    _ensure_can_view(db, booking, current_user)

    png = TicketService().generate_qr_png(booking)
    return Response(
        content=png,
        media_type="image/png",
        headers={"Content-Disposition": f'inline; filename="{booking.booking_number}.png"'}
    )

@router.delete("/{booking_id}", response_model=Booking)
def cancel_booking(
    booking_id: int,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Cancel a booking before its screening starts"""
    booking_service = BookingService(db)
    booking = booking_service.get_booking(booking_id)
    _ensure_can_view(db, booking, current_user)

    return to_booking_schema(booking_service.cancel_booking(booking_id))

@router.put("/{booking_id}/status", response_model=Booking)
def update_booking_status(
    booking_id: int,
    request: BookingStatusUpdate,
    force: bool = Query(False, description="Skip transition rules (admin override)"),
    current_user = Depends(require_staff),
    db: Session = Depends(get_db)
):
    if force:
        # Overrides are reserved for admins
        require_admin(current_user, db)
    booking = BookingService(db).update_booking_status(booking_id, request.status, force=force)
    return to_booking_schema(booking)

@router.post("/{booking_id}/refund", response_model=Booking)
def refund_booking(
    booking_id: int,
    current_user = Depends(require_staff),
    db: Session = Depends(get_db)
):
    return to_booking_schema(BookingService(db).refund_booking(booking_id))

@router.delete("/{booking_id}/admin", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(
    booking_id: int,
    current_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Remove a booking record entirely"""
    BookingService(db).delete_booking(booking_id)
