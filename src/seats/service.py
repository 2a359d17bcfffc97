from typing import Dict, List, Optional, Tuple
from decimal import Decimal
import re
from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from src.models import Seat, Theatre
from src.seats.schemas import SeatType, DEFAULT_PRICE_MULTIPLIERS, SEAT_LABEL_PATTERN
from src.theatres.service import TheatreService
from src.exceptions import ConflictError, NotFoundError, ValidationError
from src.logger_config import logger

_LABEL_RE = re.compile(r"^([A-Z]+)([0-9]+)$")
_STRICT_LABEL_RE = re.compile(SEAT_LABEL_PATTERN)

def row_name_for_index(index: int) -> str:
    """0 -> A, 25 -> Z, 26 -> AA"""
    name = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        name = chr(ord("A") + remainder) + name
    return name

def row_sort_key(row_name: str) -> Tuple[int, str]:
    return len(row_name), row_name

def label_sort_key(label: str) -> Tuple[int, str, int]:
    match = _LABEL_RE.match(label)
    if not match:
        return (99, label, 0)
    row, number = match.groups()
    return len(row), row, int(number)

def is_valid_seat_label(label: str) -> bool:
    return bool(_STRICT_LABEL_RE.match(label))

def resolve_multiplier(seat_type: SeatType, price_multiplier: Optional[Decimal]) -> Decimal:
    if price_multiplier is not None:
        return price_multiplier
    return DEFAULT_PRICE_MULTIPLIERS[SeatType(seat_type)]

def seat_type_for_position(row: int, seat_number: int, rows: int, seats_per_row: int) -> SeatType:
    """Tier of a seat in a freshly initialized grid"""
    if row == rows // 2 and seat_number in (1, seats_per_row):
        return SeatType.ACCESSIBLE
    if row < 2:
        return SeatType.STANDARD
    if row < rows - 2:
        return SeatType.PREMIUM
    return SeatType.VIP

class SeatService:
    """Service for managing the physical seat inventory of theatre screens"""

    def __init__(self, db: Session):
        self.db = db

    def initialize_seats(
        self,
        theatre_id: int,
        screen_number: int,
        rows: int,
        seats_per_row: int
    ) -> int:
        """Create a rows x seats_per_row grid for a screen; refuses if the screen already has seats"""

        theatre = self._get_theatre(theatre_id)
        TheatreService.validate_screen_number(theatre, screen_number)

        if rows < 1 or seats_per_row < 1:
            raise ValidationError("Rows and seats per row must be positive")

        if self._count_screen_seats(theatre_id, screen_number) > 0:
            raise ConflictError(
                "Seats already exist for this screen. Delete them first before reinitializing."
            )

        seats = []
        for row in range(rows):
            row_name = row_name_for_index(row)
            for seat_number in range(1, seats_per_row + 1):
                seat_type = seat_type_for_position(row, seat_number, rows, seats_per_row)
                seats.append(Seat(
                    theatre_id=theatre_id,
                    screen_number=screen_number,
                    row_name=row_name,
                    seat_number=seat_number,
                    seat_type=seat_type.value,
                    price_multiplier=DEFAULT_PRICE_MULTIPLIERS[seat_type]
                ))

        try:
            self.db.add_all(seats)
            self.db.commit()
        except IntegrityError:
            # Another initialization of the same screen committed first
            self.db.rollback()
            raise ConflictError("Seats already exist for this screen")

        logger.info(
            f"Initialized {len(seats)} seats for theatre {theatre_id} screen {screen_number} "
            f"({rows} rows x {seats_per_row})"
        )
        return len(seats)

    def get_seats(self, theatre_id: int, screen_number: int) -> List[Seat]:
        seats = self.db.query(Seat).filter(
            Seat.theatre_id == theatre_id,
            Seat.screen_number == screen_number
        ).all()
        return sorted(seats, key=lambda s: (row_sort_key(s.row_name), s.seat_number))

    def get_seat_map(self, theatre_id: int, screen_number: int) -> Dict[str, List[Seat]]:
        """Seats grouped by row, rows and seats in display order"""
        self._get_theatre(theatre_id)

        seat_map: Dict[str, List[Seat]] = {}
        for seat in self.get_seats(theatre_id, screen_number):
            seat_map.setdefault(seat.row_name, []).append(seat)
        return seat_map

    def get_screens(self, theatre_id: int) -> List[Tuple[int, int]]:
        """(screen_number, seat_count) for every screen that has seats"""
        self._get_theatre(theatre_id)

        rows = self.db.query(Seat.screen_number, func.count(Seat.id)).filter(
            Seat.theatre_id == theatre_id
        ).group_by(Seat.screen_number).order_by(Seat.screen_number).all()
        return [(screen_number, count) for screen_number, count in rows]

    def update_seat(
        self,
        seat_id: int,
        seat_type: SeatType,
        price_multiplier: Optional[Decimal] = None
    ) -> Seat:
        seat = self.db.query(Seat).filter(Seat.id == seat_id).first()
        if not seat:
            raise NotFoundError(f"Seat not found with id: {seat_id}")

        seat.seat_type = SeatType(seat_type).value
        seat.price_multiplier = resolve_multiplier(seat_type, price_multiplier)
        self.db.commit()
        self.db.refresh(seat)
        return seat

    def update_row(
        self,
        theatre_id: int,
        screen_number: int,
        row_name: str,
        seat_type: SeatType,
        price_multiplier: Optional[Decimal] = None
    ) -> int:
        row_seats = self.db.query(Seat).filter(
            Seat.theatre_id == theatre_id,
            Seat.screen_number == screen_number,
            Seat.row_name == row_name
        ).all()

        if not row_seats:
            raise NotFoundError("No seats found for the specified row")

        multiplier = resolve_multiplier(seat_type, price_multiplier)
        for seat in row_seats:
            seat.seat_type = SeatType(seat_type).value
            seat.price_multiplier = multiplier

        self.db.commit()
        return len(row_seats)

    def bulk_update(
        self,
        theatre_id: int,
        screen_number: int,
        seat_labels: List[str],
        seat_type: SeatType,
        price_multiplier: Optional[Decimal] = None
    ) -> int:
        """Update every listed seat of a screen; unknown labels are skipped"""
        invalid = [label for label in seat_labels if not is_valid_seat_label(label)]
        if invalid:
            raise ValidationError(f"Invalid seat label(s): {', '.join(invalid)}")

        wanted = set(seat_labels)
        multiplier = resolve_multiplier(seat_type, price_multiplier)

        updated = 0
        for seat in self.get_seats(theatre_id, screen_number):
            if seat.label in wanted:
                seat.seat_type = SeatType(seat_type).value
                seat.price_multiplier = multiplier
                updated += 1

        self.db.commit()
        return updated

    def delete_screen_seats(self, theatre_id: int, screen_number: int) -> int:
        count = self.db.query(Seat).filter(
            Seat.theatre_id == theatre_id,
            Seat.screen_number == screen_number
        ).delete(synchronize_session=False)
        self.db.commit()

        logger.info(f"Deleted {count} seats from theatre {theatre_id} screen {screen_number}")
        return count

    def _count_screen_seats(self, theatre_id: int, screen_number: int) -> int:
        return self.db.query(func.count(Seat.id)).filter(
            Seat.theatre_id == theatre_id,
            Seat.screen_number == screen_number
        ).scalar()

    def _get_theatre(self, theatre_id: int) -> Theatre:
        theatre = TheatreService.get_theatre_by_id(self.db, theatre_id)
        if not theatre:
            raise NotFoundError(f"Theatre not found with id: {theatre_id}")
        return theatre
