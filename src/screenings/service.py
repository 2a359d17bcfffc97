from typing import List, Dict, Optional, Set, Tuple
from datetime import datetime, timedelta, date, time
from collections import defaultdict
from decimal import Decimal
from sqlalchemy.orm import Session, joinedload

from src.models import Screening, Movie, Theatre, Seat, Booking, SeatClaim
from src.screenings.schemas import (
    ScreeningCreate, ScreeningUpdate, ScreeningFormat,
    Screening as ScreeningSchema, SeatingLayout, LayoutRow, LayoutSeat
)
from src.seats.service import row_sort_key, label_sort_key
from src.theatres.service import TheatreService
from src.exceptions import ConflictError, NotFoundError
from src.logger_config import logger

CANCELLED_STATUS = "CANCELLED"
CENTS = Decimal("0.01")

def find_overlapping_screening(
    db: Session,
    theatre_id: int,
    screen_number: int,
    start_time: datetime,
    end_time: datetime,
    exclude_id: Optional[int] = None
) -> Optional[Screening]:
    """First screening on the same theatre screen whose interval intersects [start_time, end_time)

    Intervals are half-open, so a screening may start exactly when the previous one ends.
    """
    query = db.query(Screening).filter(
        Screening.theatre_id == theatre_id,
        Screening.screen_number == screen_number,
        Screening.start_time < end_time,
        Screening.end_time > start_time
    )
    if exclude_id is not None:
        query = query.filter(Screening.id != exclude_id)
    return query.order_by(Screening.start_time).first()

def to_screening_schema(screening: Screening) -> ScreeningSchema:
    return ScreeningSchema(
        id=screening.id,
        movie_id=screening.movie_id,
        movie_title=screening.movie.title if screening.movie else None,
        theatre_id=screening.theatre_id,
        theatre_name=screening.theatre.name if screening.theatre else None,
        screen_number=screening.screen_number,
        start_time=screening.start_time,
        end_time=screening.end_time,
        format=screening.format,
        base_price=screening.base_price
    )

def _day_bounds(target_date: date) -> Tuple[datetime, datetime]:
    return datetime.combine(target_date, time.min), datetime.combine(target_date, time.max)

class ScreeningService:
    """Schedules screenings and answers seat-availability questions about them"""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------
    def create_screening(self, request: ScreeningCreate) -> Screening:
        """Schedule a screening; rejects overlaps on the same theatre screen"""

        movie = self.db.query(Movie).filter(Movie.id == request.movie_id).first()
        if not movie:
            raise NotFoundError(f"Movie not found with id: {request.movie_id}")

        theatre = self._lock_theatre(request.theatre_id)
        TheatreService.validate_screen_number(theatre, request.screen_number)

        end_time = request.start_time + timedelta(minutes=movie.duration_minutes)
        self._ensure_no_overlap(theatre.id, request.screen_number, request.start_time, end_time)

        screening = Screening(
            movie_id=movie.id,
            theatre_id=theatre.id,
            screen_number=request.screen_number,
            start_time=request.start_time,
            end_time=end_time,
            format=ScreeningFormat(request.format).value,
            base_price=request.base_price
        )
        self.db.add(screening)
        self.db.commit()
        self.db.refresh(screening)

        logger.info(
            f"Scheduled screening {screening.id}: movie {movie.id} in theatre {theatre.id} "
            f"screen {screening.screen_number} {screening.start_time:%Y-%m-%d %H:%M}-{screening.end_time:%H:%M}"
        )
        return screening

    def update_screening(self, screening_id: int, request: ScreeningUpdate) -> Screening:
        """Change time, screen, format or price; the overlap check is re-run excluding this screening"""

        screening = self.get_screening(screening_id)
        theatre = self._lock_theatre(screening.theatre_id)

        update_data = request.model_dump(exclude_unset=True)
        start_time = update_data.get("start_time") or screening.start_time
        screen_number = update_data.get("screen_number") or screening.screen_number

        if screen_number != screening.screen_number:
            TheatreService.validate_screen_number(theatre, screen_number)

        end_time = start_time + timedelta(minutes=screening.movie.duration_minutes)
        self._ensure_no_overlap(
            theatre.id, screen_number, start_time, end_time, exclude_id=screening.id
        )

        screening.start_time = start_time
        screening.end_time = end_time
        screening.screen_number = screen_number
        if update_data.get("format") is not None:
            screening.format = ScreeningFormat(update_data["format"]).value
        if update_data.get("base_price") is not None:
            screening.base_price = update_data["base_price"]

        self.db.commit()
        self.db.refresh(screening)
        logger.info(f"Updated screening {screening.id}")
        return screening

    def delete_screening(self, screening_id: int) -> None:
        screening = self.get_screening(screening_id)

        active = self.db.query(Booking).filter(
            Booking.screening_id == screening_id,
            Booking.payment_status != CANCELLED_STATUS
        ).count()
        if active:
            raise ConflictError(f"Screening has {active} active booking(s) and cannot be deleted")

        for booking in screening.bookings:
            self.db.delete(booking)
        self.db.delete(screening)
        self.db.commit()
        logger.info(f"Deleted screening {screening_id}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_screening(self, screening_id: int) -> Screening:
        screening = self.db.query(Screening).options(
            joinedload(Screening.movie),
            joinedload(Screening.theatre)
        ).filter(Screening.id == screening_id).first()
        if not screening:
            raise NotFoundError(f"Screening not found with id: {screening_id}")
        return screening

    def get_screenings(
        self,
        movie_id: Optional[int] = None,
        theatre_id: Optional[int] = None,
        target_date: Optional[date] = None,
        skip: int = 0,
        limit: int = 50
    ) -> Tuple[List[Screening], int]:
        """Filter by movie, theatre and day; without filters only upcoming screenings are listed"""
        query = self._base_query()

        if movie_id is not None:
            query = query.filter(Screening.movie_id == movie_id)
        if theatre_id is not None:
            query = query.filter(Screening.theatre_id == theatre_id)
        if target_date is not None:
            day_start, day_end = _day_bounds(target_date)
            query = query.filter(Screening.start_time.between(day_start, day_end))
        if movie_id is None and theatre_id is None and target_date is None:
            query = query.filter(Screening.start_time > datetime.now())

        total = query.count()
        screenings = query.order_by(Screening.start_time).offset(skip).limit(limit).all()
        return screenings, total

    def get_upcoming_screenings(self, days: int = 7) -> Dict[str, List[Screening]]:
        """Screenings in the next `days` days keyed by YYYY-MM-DD"""
        now = datetime.now()
        screenings = self._base_query().filter(
            Screening.start_time.between(now, now + timedelta(days=days))
        ).order_by(Screening.start_time).all()

        grouped: Dict[str, List[Screening]] = defaultdict(list)
        for screening in screenings:
            grouped[screening.start_time.strftime("%Y-%m-%d")].append(screening)
        return dict(grouped)

    def get_screenings_by_date_range(self, start_date: date, end_date: date) -> List[Screening]:
        range_start, _ = _day_bounds(start_date)
        _, range_end = _day_bounds(end_date)
        return self._base_query().filter(
            Screening.start_time.between(range_start, range_end)
        ).order_by(Screening.start_time).all()

    def get_screening_bookings(self, screening_id: int) -> List[Booking]:
        self.get_screening(screening_id)
        return self.db.query(Booking).filter(
            Booking.screening_id == screening_id
        ).order_by(Booking.booking_time).all()

    # ------------------------------------------------------------------
    # Seat availability
    # ------------------------------------------------------------------
    def get_booked_seats(self, screening_id: int) -> Set[str]:
        """Labels claimed by non-cancelled bookings of the screening"""
        rows = self.db.query(SeatClaim.seat_label).filter(
            SeatClaim.screening_id == screening_id
        ).all()
        return {label for (label,) in rows}

    def get_screen_seats(self, screening: Screening) -> List[Seat]:
        return self.db.query(Seat).filter(
            Seat.theatre_id == screening.theatre_id,
            Seat.screen_number == screening.screen_number
        ).all()

    def get_available_seats(self, screening_id: int) -> List[str]:
        screening = self.get_screening(screening_id)
        booked = self.get_booked_seats(screening_id)
        available = [seat.label for seat in self.get_screen_seats(screening) if seat.label not in booked]
        return sorted(available, key=label_sort_key)

    def get_seating_layout(self, screening_id: int) -> SeatingLayout:
        screening = self.get_screening(screening_id)
        booked = self.get_booked_seats(screening_id)

        rows: Dict[str, List[LayoutSeat]] = defaultdict(list)
        for seat in self.get_screen_seats(screening):
            rows[seat.row_name].append(LayoutSeat(
                label=seat.label,
                seat_number=seat.seat_number,
                seat_type=seat.seat_type,
                price_multiplier=seat.price_multiplier,
                price=(screening.base_price * seat.price_multiplier).quantize(CENTS),
                booked=seat.label in booked
            ))

        layout_rows = [
            LayoutRow(name=name, seats=sorted(seats, key=lambda s: s.seat_number))
            for name, seats in sorted(rows.items(), key=lambda item: row_sort_key(item[0]))
        ]
        total_seats = sum(len(row.seats) for row in layout_rows)

        return SeatingLayout(
            screening_id=screening.id,
            theatre_id=screening.theatre_id,
            screen_number=screening.screen_number,
            base_price=screening.base_price,
            total_seats=total_seats,
            booked_seats=sum(1 for row in layout_rows for seat in row.seats if seat.booked),
            rows=layout_rows
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _base_query(self):
        return self.db.query(Screening).options(
            joinedload(Screening.movie),
            joinedload(Screening.theatre)
        )

    def _lock_theatre(self, theatre_id: int) -> Theatre:
        """Row lock on the theatre serializes scheduling checks for its screens"""
        theatre = self.db.query(Theatre).filter(Theatre.id == theatre_id).with_for_update().first()
        if not theatre:
            raise NotFoundError(f"Theatre not found with id: {theatre_id}")
        return theatre

    def _ensure_no_overlap(
        self,
        theatre_id: int,
        screen_number: int,
        start_time: datetime,
        end_time: datetime,
        exclude_id: Optional[int] = None
    ) -> None:
        conflict = find_overlapping_screening(
            self.db, theatre_id, screen_number, start_time, end_time, exclude_id
        )
        if conflict:
            self.db.rollback()
            logger.warning(
                f"Scheduling conflict on theatre {theatre_id} screen {screen_number}: "
                f"{start_time:%Y-%m-%d %H:%M}-{end_time:%H:%M} overlaps screening {conflict.id}"
            )
            raise ConflictError("There is a scheduling conflict with another screening")
