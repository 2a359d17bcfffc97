from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from datetime import date

from src.database import get_db
from src.auth.dependencies import require_staff
from src.screenings.schemas import (
    Screening, ScreeningCreate, ScreeningUpdate, ScreeningFormat, ScreeningList, SeatingLayout
)
from src.screenings.service import ScreeningService, to_screening_schema
from src.bookings.schemas import Booking, to_booking_schema
from src.exceptions import ValidationError

router = APIRouter()

@router.get("/", response_model=ScreeningList)
def get_screenings(
    movie_id: Optional[int] = Query(None, description="Filter by movie"),
    theatre_id: Optional[int] = Query(None, description="Filter by theatre"),
    screening_date: Optional[date] = Query(None, alias="date", description="Filter by day (YYYY-MM-DD)"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """List screenings; without filters only upcoming screenings are returned"""
    screenings, total = ScreeningService(db).get_screenings(
        movie_id=movie_id,
        theatre_id=theatre_id,
        target_date=screening_date,
        skip=skip,
        limit=limit
    )
    return ScreeningList(
        screenings=[to_screening_schema(s) for s in screenings],
        total=total,
        page=(skip // limit) + 1,
        per_page=limit
    )

@router.get("/formats", response_model=List[str])
def get_screening_formats():
    return [f.value for f in ScreeningFormat]

@router.get("/upcoming", response_model=Dict[str, List[Screening]])
def get_upcoming_screenings(
    days: int = Query(7, ge=1, le=60, description="How many days ahead"),
    db: Session = Depends(get_db)
):
    """Upcoming screenings grouped by day"""
    grouped = ScreeningService(db).get_upcoming_screenings(days)
    return {day: [to_screening_schema(s) for s in screenings] for day, screenings in grouped.items()}

@router.get("/date-range", response_model=List[Screening])
def get_screenings_by_date_range(
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: Session = Depends(get_db)
):
    if end_date < start_date:
        raise ValidationError("end_date must not be before start_date")
    screenings = ScreeningService(db).get_screenings_by_date_range(start_date, end_date)
    return [to_screening_schema(s) for s in screenings]

@router.get("/{screening_id}", response_model=Screening)
def get_screening(screening_id: int, db: Session = Depends(get_db)):
    return to_screening_schema(ScreeningService(db).get_screening(screening_id))

@router.get("/{screening_id}/booked-seats", response_model=List[str])
def get_booked_seats(screening_id: int, db: Session = Depends(get_db)):
    """Seat labels already taken for the screening"""
    screening_service = ScreeningService(db)
    screening_service.get_screening(screening_id)
    return sorted(screening_service.get_booked_seats(screening_id))

@router.get("/{screening_id}/seats", response_model=List[str])
def get_available_seats(screening_id: int, db: Session = Depends(get_db)):
    """Seat labels still free for the screening"""
    return ScreeningService(db).get_available_seats(screening_id)

@router.get("/{screening_id}/layout", response_model=SeatingLayout)
def get_seating_layout(screening_id: int, db: Session = Depends(get_db)):
    return ScreeningService(db).get_seating_layout(screening_id)

@router.post("/", response_model=Screening, status_code=status.HTTP_201_CREATED)
def create_screening(
    request: ScreeningCreate,
    current_user = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """Schedule a screening; overlapping screenings on the same screen are rejected"""
    screening_service = ScreeningService(db)
    screening = screening_service.create_screening(request)
    return to_screening_schema(screening_service.get_screening(screening.id))

@router.put("/{screening_id}", response_model=Screening)
def update_screening(
    screening_id: int,
    request: ScreeningUpdate,
    current_user = Depends(require_staff),
    db: Session = Depends(get_db)
):
    screening_service = ScreeningService(db)
    screening = screening_service.update_screening(screening_id, request)
    return to_screening_schema(screening)

@router.delete("/{screening_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_screening(
    screening_id: int,
    current_user = Depends(require_staff),
    db: Session = Depends(get_db)
):
    ScreeningService(db).delete_screening(screening_id)

@router.get("/{screening_id}/bookings", response_model=List[Booking])
def get_screening_bookings(
    screening_id: int,
    current_user = Depends(require_staff),
    db: Session = Depends(get_db)
):
    bookings = ScreeningService(db).get_screening_bookings(screening_id)
    return [to_booking_schema(b) for b in bookings]
