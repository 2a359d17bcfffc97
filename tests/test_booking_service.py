"""Booking service tests: seat claims, cancellation and payment status rules."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from conftest import create_screening, tomorrow_at
from src.bookings.booking_service import BookingService
from src.bookings.schemas import BookingSearchFilters, PaymentStatus
from src.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from src.models import Booking, SeatClaim


def claimed_labels(db, screening_id):
    return {label for (label,) in db.query(SeatClaim.seat_label).filter(
        SeatClaim.screening_id == screening_id
    )}


def move_to_past(db, screening):
    screening.start_time = datetime.now() - timedelta(hours=1)
    screening.end_time = screening.start_time + timedelta(hours=2)
    db.commit()


class TestCreateBooking:
    def test_booking_is_completed_and_priced(self, db_session, customer, screening):
        booking = BookingService(db_session).create_booking(
            screening.id, customer.username, ['A1', 'A2'], 'CARD'
        )

        assert booking.payment_status == PaymentStatus.COMPLETED.value
        assert booking.booked_seats == ['A1', 'A2']
        assert booking.total_amount == Decimal('20.00')
        assert booking.booking_number.startswith('BK')
        assert claimed_labels(db_session, screening.id) == {'A1', 'A2'}

    def test_overlapping_seat_is_rejected(self, db_session, customer, other_customer, screening):
        service = BookingService(db_session)
        service.create_booking(screening.id, customer.username, ['A1', 'A2'])

        with pytest.raises(ConflictError) as exc_info:
            service.create_booking(screening.id, other_customer.username, ['A2', 'A3'])

        assert 'A2' in exc_info.value.message
        assert db_session.query(Booking).count() == 1
        assert claimed_labels(db_session, screening.id) == {'A1', 'A2'}

    def test_same_seat_on_another_screening_is_free(
        self, db_session, customer, other_customer, movie, seated_theatre, screening
    ):
        later = create_screening(db_session, movie, seated_theatre, tomorrow_at(21))
        service = BookingService(db_session)
        service.create_booking(screening.id, customer.username, ['A1'])

        booking = service.create_booking(later.id, other_customer.username, ['A1'])

        assert booking.screening_id == later.id

    def test_lost_race_surfaces_as_conflict(self, db_session, customer, other_customer, screening):
        service = BookingService(db_session)
        service.create_booking(screening.id, customer.username, ['B4'])

        # Pretend the availability snapshot was taken before the first booking committed
        service.screening_service.get_booked_seats = lambda screening_id: set()

        with pytest.raises(ConflictError):
            service.create_booking(screening.id, other_customer.username, ['B4', 'B5'])

        assert db_session.query(Booking).count() == 1
        assert claimed_labels(db_session, screening.id) == {'B4'}

    def test_unknown_user(self, db_session, screening):
        with pytest.raises(NotFoundError):
            BookingService(db_session).create_booking(screening.id, 'nobody', ['A1'])

    def test_unknown_screening(self, db_session, customer):
        with pytest.raises(NotFoundError):
            BookingService(db_session).create_booking(404, customer.username, ['A1'])

    def test_empty_selection(self, db_session, customer, screening):
        with pytest.raises(ValidationError):
            BookingService(db_session).create_booking(screening.id, customer.username, [])

    def test_duplicate_labels(self, db_session, customer, screening):
        with pytest.raises(ValidationError):
            BookingService(db_session).create_booking(screening.id, customer.username, ['A1', 'A1'])

    def test_started_screening_cannot_be_booked(self, db_session, customer, screening):
        move_to_past(db_session, screening)

        with pytest.raises(InvalidStateError):
            BookingService(db_session).create_booking(screening.id, customer.username, ['A1'])

    def test_booking_numbers_are_unique(self, db_session, customer, screening):
        service = BookingService(db_session)
        first = service.create_booking(screening.id, customer.username, ['A1'])
        second = service.create_booking(screening.id, customer.username, ['A2'])

        assert first.booking_number != second.booking_number


class TestCancelBooking:
    def test_cancel_releases_seats(self, db_session, customer, other_customer, screening):
        service = BookingService(db_session)
        booking = service.create_booking(screening.id, customer.username, ['A1', 'A2'])

        cancelled = service.cancel_booking(booking.id)

        assert cancelled.payment_status == PaymentStatus.CANCELLED.value
        assert cancelled.booked_seats == ['A1', 'A2']
        assert claimed_labels(db_session, screening.id) == set()

        rebooked = service.create_booking(screening.id, other_customer.username, ['A2', 'A3'])
        assert rebooked.payment_status == PaymentStatus.COMPLETED.value

    def test_cancel_after_start_fails_and_keeps_status(self, db_session, customer, screening):
        service = BookingService(db_session)
        booking = service.create_booking(screening.id, customer.username, ['A1'])
        move_to_past(db_session, screening)

        with pytest.raises(InvalidStateError):
            service.cancel_booking(booking.id)

        db_session.expire_all()
        assert db_session.get(Booking, booking.id).payment_status == PaymentStatus.COMPLETED.value
        assert claimed_labels(db_session, screening.id) == {'A1'}

    def test_cancel_twice(self, db_session, customer, screening):
        service = BookingService(db_session)
        booking = service.create_booking(screening.id, customer.username, ['A1'])
        service.cancel_booking(booking.id)

        with pytest.raises(InvalidStateError):
            service.cancel_booking(booking.id)

    def test_cancel_missing_booking(self, db_session):
        with pytest.raises(NotFoundError):
            BookingService(db_session).cancel_booking(12345)


class TestPaymentStatus:
    def test_refund_completed_booking_keeps_seats(self, db_session, customer, screening):
        service = BookingService(db_session)
        booking = service.create_booking(screening.id, customer.username, ['D1'])

        refunded = service.refund_booking(booking.id)

        assert refunded.payment_status == PaymentStatus.REFUNDED.value
        assert claimed_labels(db_session, screening.id) == {'D1'}

    def test_refund_requires_refund_operation(self, db_session, customer, screening):
        service = BookingService(db_session)
        booking = service.create_booking(screening.id, customer.username, ['D1'])

        with pytest.raises(InvalidStateError):
            service.update_booking_status(booking.id, PaymentStatus.REFUNDED)

    def test_cancelled_booking_cannot_be_reopened_without_force(self, db_session, customer, screening):
        service = BookingService(db_session)
        booking = service.create_booking(screening.id, customer.username, ['D1'])
        service.cancel_booking(booking.id)

        with pytest.raises(InvalidStateError):
            service.update_booking_status(booking.id, PaymentStatus.COMPLETED)

    def test_forced_reopen_reclaims_seats(self, db_session, customer, screening):
        service = BookingService(db_session)
        booking = service.create_booking(screening.id, customer.username, ['D1', 'D2'])
        service.cancel_booking(booking.id)

        reopened = service.update_booking_status(booking.id, PaymentStatus.COMPLETED, force=True)

        assert reopened.payment_status == PaymentStatus.COMPLETED.value
        assert claimed_labels(db_session, screening.id) == {'D1', 'D2'}

    def test_forced_reopen_conflicts_when_seat_was_resold(
        self, db_session, customer, other_customer, screening
    ):
        service = BookingService(db_session)
        booking = service.create_booking(screening.id, customer.username, ['D1', 'D2'])
        service.cancel_booking(booking.id)
        service.create_booking(screening.id, other_customer.username, ['D2'])

        with pytest.raises(ConflictError):
            service.update_booking_status(booking.id, PaymentStatus.COMPLETED, force=True)

        db_session.expire_all()
        assert db_session.get(Booking, booking.id).payment_status == PaymentStatus.CANCELLED.value

    def test_forced_cancel_after_start(self, db_session, customer, screening):
        service = BookingService(db_session)
        booking = service.create_booking(screening.id, customer.username, ['E1'])
        move_to_past(db_session, screening)

        cancelled = service.update_booking_status(booking.id, PaymentStatus.CANCELLED, force=True)

        assert cancelled.payment_status == PaymentStatus.CANCELLED.value
        assert claimed_labels(db_session, screening.id) == set()


class TestBookingQueries:
    def test_search_by_status_and_movie(self, db_session, customer, other_customer, movie, screening):
        service = BookingService(db_session)
        kept = service.create_booking(screening.id, customer.username, ['A1'])
        dropped = service.create_booking(screening.id, other_customer.username, ['A2'])
        service.cancel_booking(dropped.id)

        completed = service.search_bookings(
            BookingSearchFilters(status=PaymentStatus.COMPLETED, movie_id=movie.id)
        )

        assert [b.id for b in completed] == [kept.id]

    def test_user_bookings(self, db_session, customer, other_customer, screening):
        service = BookingService(db_session)
        service.create_booking(screening.id, customer.username, ['A1'])
        service.create_booking(screening.id, other_customer.username, ['A2'])

        bookings = service.get_user_bookings(customer.id)

        assert [b.booked_seats for b in bookings] == [['A1']]

    def test_statistics(self, db_session, customer, screening):
        service = BookingService(db_session)
        service.create_booking(screening.id, customer.username, ['A1', 'A2'])
        refunded = service.create_booking(screening.id, customer.username, ['A3'])
        service.refund_booking(refunded.id)

        stats = service.get_statistics()

        assert stats.total_bookings == 2
        assert stats.bookings_by_status['COMPLETED'] == 1
        assert stats.bookings_by_status['REFUNDED'] == 1
        assert stats.total_revenue == Decimal('20.00')
        assert stats.refunded_amount == Decimal('10.00')
        assert stats.seats_sold == 2

    def test_delete_booking_releases_claims(self, db_session, customer, screening):
        service = BookingService(db_session)
        booking = service.create_booking(screening.id, customer.username, ['A1'])

        service.delete_booking(booking.id)

        assert db_session.query(Booking).count() == 0
        assert claimed_labels(db_session, screening.id) == set()
