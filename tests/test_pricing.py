"""Seat price resolution tests."""

from decimal import Decimal

import pytest

from conftest import create_movie, create_screening, create_theatre, tomorrow_at
from src.bookings.pricing import SeatPriceResolver
from src.exceptions import NotFoundError
from src.models import Seat


@pytest.fixture
def priced_screening(db_session):
    theatre = create_theatre(db_session)
    db_session.add_all(
        [
            Seat(theatre_id=theatre.id, screen_number=1, row_name='A', seat_number=1,
                 seat_type='STANDARD', price_multiplier=Decimal('1.00')),
            Seat(theatre_id=theatre.id, screen_number=1, row_name='F', seat_number=5,
                 seat_type='VIP', price_multiplier=Decimal('1.50')),
            Seat(theatre_id=theatre.id, screen_number=1, row_name='C', seat_number=3,
                 seat_type='PREMIUM', price_multiplier=Decimal('1.20')),
            # Same label on another screen must not leak into screen 1 prices
            Seat(theatre_id=theatre.id, screen_number=2, row_name='A', seat_number=1,
                 seat_type='VIP', price_multiplier=Decimal('2.00')),
        ]
    )
    db_session.commit()
    return create_screening(db_session, create_movie(db_session), theatre, tomorrow_at(10))


class TestSeatPriceResolver:
    def test_sums_base_price_times_multiplier(self, db_session, priced_screening):
        total = SeatPriceResolver(db_session).compute_price(priced_screening.id, ['A1', 'F5'])

        assert total == Decimal('25.00')

    def test_premium_multiplier(self, db_session, priced_screening):
        total = SeatPriceResolver(db_session).compute_price(priced_screening.id, ['C3'])

        assert total == Decimal('12.00')

    def test_unknown_label_priced_at_base(self, db_session, priced_screening):
        total = SeatPriceResolver(db_session).compute_price(priced_screening.id, ['Z9', 'A1'])

        assert total == Decimal('20.00')

    def test_only_the_screenings_screen_is_used(self, db_session, priced_screening):
        quote = SeatPriceResolver(db_session).quote_for_screening(priced_screening.id, ['A1'])

        assert quote.total_amount == Decimal('10.00')
        assert quote.breakdown[0].seat_type == 'STANDARD'

    def test_quote_breakdown(self, db_session, priced_screening):
        quote = SeatPriceResolver(db_session).quote_for_screening(priced_screening.id, ['F5', 'Q1'])

        assert quote.seat_count == 2
        assert quote.currency == 'RWF'
        assert [line.price for line in quote.breakdown] == [Decimal('15.00'), Decimal('10.00')]
        assert quote.breakdown[1].seat_type is None

    def test_missing_screening(self, db_session):
        with pytest.raises(NotFoundError):
            SeatPriceResolver(db_session).compute_price(999, ['A1'])
