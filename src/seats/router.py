from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from src.database import get_db
from src.auth.dependencies import require_staff, require_admin
from src.seats.schemas import (
    Seat, SeatInitializeRequest, SeatInitializeResponse, SeatUpdate, SeatRowUpdate,
    SeatBulkUpdate, TheatreScreens, ScreenSummary, ScreenSeatMap
)
from src.seats.service import SeatService
from src.theatres.service import TheatreService

router = APIRouter()

@router.get("/theatre/{theatre_id}/screens", response_model=TheatreScreens)
def get_theatre_screens(
    theatre_id: int,
    current_user = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """List the screens of a theatre that have a seat inventory"""
    seat_service = SeatService(db)
    screens = seat_service.get_screens(theatre_id)
    theatre = TheatreService.get_theatre_by_id(db, theatre_id)

    return TheatreScreens(
        theatre_id=theatre_id,
        total_screens=theatre.total_screens,
        screens=[ScreenSummary(screen_number=n, seat_count=c) for n, c in screens]
    )

@router.get("/theatre/{theatre_id}/screen/{screen_number}", response_model=ScreenSeatMap)
def get_screen_seats(
    theatre_id: int,
    screen_number: int,
    current_user = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """Get the seat map of a screen grouped by row"""
    seat_map = SeatService(db).get_seat_map(theatre_id, screen_number)

    return ScreenSeatMap(
        theatre_id=theatre_id,
        screen_number=screen_number,
        total_seats=sum(len(seats) for seats in seat_map.values()),
        rows={row: [Seat.model_validate(seat) for seat in seats] for row, seats in seat_map.items()}
    )

@router.post(
    "/theatre/{theatre_id}/screen/{screen_number}/initialize",
    response_model=SeatInitializeResponse,
    status_code=status.HTTP_201_CREATED
)
def initialize_seats(
    theatre_id: int,
    screen_number: int,
    request: SeatInitializeRequest,
    current_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Generate the seat grid of a screen"""
    created = SeatService(db).initialize_seats(
        theatre_id, screen_number, request.rows, request.seats_per_row
    )
    return SeatInitializeResponse(
        theatre_id=theatre_id,
        screen_number=screen_number,
        seats_created=created
    )

@router.put("/row")
def update_seat_row(
    request: SeatRowUpdate,
    current_user = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """Change the type of every seat in a row"""
    updated = SeatService(db).update_row(
        request.theatre_id, request.screen_number, request.row_name,
        request.seat_type, request.price_multiplier
    )
    return {"message": f"Row {request.row_name} updated", "seats_updated": updated}

@router.put("/bulk")
def bulk_update_seats(
    request: SeatBulkUpdate,
    current_user = Depends(require_staff),
    db: Session = Depends(get_db)
):
    updated = SeatService(db).bulk_update(
        request.theatre_id, request.screen_number, request.seat_labels,
        request.seat_type, request.price_multiplier
    )
    return {"message": f"{updated} seats updated", "seats_updated": updated}

@router.put("/{seat_id}", response_model=Seat)
def update_seat(
    seat_id: int,
    request: SeatUpdate,
    current_user = Depends(require_staff),
    db: Session = Depends(get_db)
):
    return SeatService(db).update_seat(seat_id, request.seat_type, request.price_multiplier)

@router.delete("/theatre/{theatre_id}/screen/{screen_number}")
def delete_screen_seats(
    theatre_id: int,
    screen_number: int,
    current_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete the whole seat inventory of a screen"""
    deleted = SeatService(db).delete_screen_seats(theatre_id, screen_number)
    return {"message": f"{deleted} seats deleted", "seats_deleted": deleted}
