from typing import Dict, List, Tuple
from decimal import Decimal
from sqlalchemy.orm import Session

from src.config import settings
from src.models import Screening, Seat
from src.bookings.schemas import PriceQuote, SeatPrice
from src.exceptions import NotFoundError

CENTS = Decimal("0.01")

class SeatPriceResolver:
    """Prices seat selections from a screening's base price and per-seat multipliers"""

    def __init__(self, db: Session):
        self.db = db

    def compute_price(self, screening_id: int, seat_labels: List[str]) -> Decimal:
        screening = self._get_screening(screening_id)
        return self.quote(screening, seat_labels).total_amount

    def quote(self, screening: Screening, seat_labels: List[str]) -> PriceQuote:
        """Price every label; labels missing from the inventory fall back to the base price"""

        base_price = Decimal(screening.base_price)
        seat_index = self._load_seat_index(screening)

        breakdown = []
        total = Decimal("0")
        for label in seat_labels:
            seat_type, multiplier = seat_index.get(label, (None, Decimal("1")))
            price = base_price * multiplier
            total += price
            breakdown.append(SeatPrice(
                label=label,
                seat_type=seat_type,
                price_multiplier=multiplier,
                price=price.quantize(CENTS)
            ))

        return PriceQuote(
            screening_id=screening.id,
            base_price=base_price,
            seat_count=len(seat_labels),
            total_amount=total.quantize(CENTS),
            currency=settings.CURRENCY,
            breakdown=breakdown
        )

    def quote_for_screening(self, screening_id: int, seat_labels: List[str]) -> PriceQuote:
        return self.quote(self._get_screening(screening_id), seat_labels)

    def _load_seat_index(self, screening: Screening) -> Dict[str, Tuple[str, Decimal]]:
        """label -> (seat type, multiplier) for the screening's theatre screen"""
        seats = self.db.query(Seat).filter(
            Seat.theatre_id == screening.theatre_id,
            Seat.screen_number == screening.screen_number
        ).all()
        return {seat.label: (seat.seat_type, Decimal(seat.price_multiplier)) for seat in seats}

    def _get_screening(self, screening_id: int) -> Screening:
        screening = self.db.query(Screening).filter(Screening.id == screening_id).first()
        if not screening:
            raise NotFoundError(f"Screening not found with id: {screening_id}")
        return screening
