from typing import List, Optional, Dict
from datetime import datetime, time
from decimal import Decimal
import uuid
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import IntegrityError

from src.config import settings
from src.models import Booking, Screening, SeatClaim
from src.bookings.schemas import PaymentStatus, PriceQuote, BookingSearchFilters, BookingStatistics
from src.bookings.pricing import SeatPriceResolver
from src.screenings.service import ScreeningService
from src.auth.service import UserService
from src.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from src.logger_config import logger

# Transitions allowed without an admin override
ALLOWED_TRANSITIONS: Dict[PaymentStatus, set] = {
    PaymentStatus.PENDING: {PaymentStatus.COMPLETED, PaymentStatus.CANCELLED},
    PaymentStatus.COMPLETED: {PaymentStatus.CANCELLED, PaymentStatus.REFUNDED},
    PaymentStatus.CANCELLED: set(),
    PaymentStatus.REFUNDED: set(),
}

class BookingService:
    """Books seats for screenings and manages the booking payment lifecycle"""

    def __init__(self, db: Session):
        self.db = db
        self.price_resolver = SeatPriceResolver(db)
        self.screening_service = ScreeningService(db)

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------
    def create_booking(
        self,
        screening_id: int,
        username: str,
        seat_labels: List[str],
        payment_method: Optional[str] = "CARD"
    ) -> Booking:
        """Claim the requested seats and record a completed booking

        Either every seat is claimed or none is: a seat already held by another
        non-cancelled booking fails the whole request with a ConflictError.
        """

        if not seat_labels:
            raise ValidationError("At least one seat must be selected")
        if len(set(seat_labels)) != len(seat_labels):
            raise ValidationError("The same seat cannot be selected twice")

        user = UserService.get_user_by_username(self.db, username)
        if not user:
            raise NotFoundError(f"User not found: {username}")

        screening = self.screening_service.get_screening(screening_id)
        if screening.start_time <= datetime.now():
            raise InvalidStateError("Cannot book seats for a screening that has already started")

        already_booked = self.screening_service.get_booked_seats(screening_id)
        taken = sorted(set(seat_labels) & already_booked)
        if taken:
            raise ConflictError(f"Seat(s) already booked: {', '.join(taken)}")

        quote = self.price_resolver.quote(screening, seat_labels)

        booking = Booking(
            booking_number=self._generate_booking_number(),
            user_id=user.id,
            screening_id=screening.id,
            booking_time=datetime.now(),
            total_amount=quote.total_amount,
            payment_status=PaymentStatus.COMPLETED.value,
            payment_method=payment_method,
            booked_seats=list(seat_labels)
        )
        booking.seat_claims = [
            SeatClaim(screening_id=screening.id, seat_label=label) for label in seat_labels
        ]

        try:
            self.db.add(booking)
            self.db.commit()
        except IntegrityError:
            # A concurrent booking claimed one of the seats between the check and the insert
            self.db.rollback()
            logger.warning(f"Seat claim race lost on screening {screening_id} for {seat_labels}")
            raise ConflictError("One or more of the selected seats have just been booked")

        self.db.refresh(booking)
        logger.info(
            f"Booking {booking.booking_number} created for {username}: screening {screening_id}, "
            f"seats {', '.join(seat_labels)}, total {booking.total_amount} {settings.CURRENCY}"
        )
        return booking

    def compute_price(self, screening_id: int, seat_labels: List[str]) -> Decimal:
        return self.price_resolver.compute_price(screening_id, seat_labels)

    def quote_price(self, screening_id: int, seat_labels: List[str]) -> PriceQuote:
        return self.price_resolver.quote_for_screening(screening_id, seat_labels)

    def cancel_booking(self, booking_id: int) -> Booking:
        """Cancel a booking and release its seats; only allowed before the screening starts"""
        booking = self.get_booking(booking_id)

        if booking.payment_status == PaymentStatus.CANCELLED.value:
            raise InvalidStateError("Booking is already cancelled")

        self._change_status(booking, PaymentStatus.CANCELLED)
        logger.info(f"Booking {booking.booking_number} cancelled")
        return booking

    def refund_booking(self, booking_id: int) -> Booking:
        """Mark a completed booking as refunded"""
        booking = self.get_booking(booking_id)
        self._change_status(booking, PaymentStatus.REFUNDED, allow_refund=True)
        logger.info(f"Booking {booking.booking_number} refunded ({booking.total_amount} {settings.CURRENCY})")
        return booking

    def update_booking_status(
        self,
        booking_id: int,
        new_status: PaymentStatus,
        force: bool = False
    ) -> Booking:
        """Move a booking to another payment status

        With force the transition table and the start-time check are skipped;
        seat claims still follow the status so the seat invariant is kept.
        """
        booking = self.get_booking(booking_id)
        self._change_status(booking, PaymentStatus(new_status), force=force)
        logger.info(
            f"Booking {booking.booking_number} status set to {booking.payment_status}"
            + (" (forced)" if force else "")
        )
        return booking

    def delete_booking(self, booking_id: int) -> None:
        booking = self.get_booking(booking_id)
        booking_number = booking.booking_number
        self.db.delete(booking)
        self.db.commit()
        logger.info(f"Booking {booking_number} deleted")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_booking(self, booking_id: int) -> Booking:
        booking = self._base_query().filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError(f"Booking not found with id: {booking_id}")
        return booking

    def get_booking_by_number(self, booking_number: str) -> Booking:
        booking = self._base_query().filter(Booking.booking_number == booking_number).first()
        if not booking:
            raise NotFoundError(f"Booking not found with number: {booking_number}")
        return booking

    def get_user_bookings(self, user_id: int) -> List[Booking]:
        return self._base_query().filter(
            Booking.user_id == user_id
        ).order_by(Booking.booking_time.desc()).all()

    def search_bookings(
        self,
        filters: BookingSearchFilters,
        skip: int = 0,
        limit: int = 50
    ) -> List[Booking]:
        query = self._base_query().join(Booking.screening)

        if filters.status is not None:
            query = query.filter(Booking.payment_status == PaymentStatus(filters.status).value)
        if filters.movie_id is not None:
            query = query.filter(Screening.movie_id == filters.movie_id)
        if filters.theatre_id is not None:
            query = query.filter(Screening.theatre_id == filters.theatre_id)
        if filters.screening_id is not None:
            query = query.filter(Booking.screening_id == filters.screening_id)
        if filters.user_id is not None:
            query = query.filter(Booking.user_id == filters.user_id)
        if filters.date_from is not None:
            query = query.filter(Booking.booking_time >= datetime.combine(filters.date_from, time.min))
        if filters.date_to is not None:
            query = query.filter(Booking.booking_time <= datetime.combine(filters.date_to, time.max))

        return query.order_by(Booking.booking_time.desc()).offset(skip).limit(limit).all()

    def get_statistics(self) -> BookingStatistics:
        status_counts = dict(
            self.db.query(Booking.payment_status, func.count(Booking.id))
            .group_by(Booking.payment_status).all()
        )
        by_status = {s.value: status_counts.get(s.value, 0) for s in PaymentStatus}

        revenue = self.db.query(func.coalesce(func.sum(Booking.total_amount), 0)).filter(
            Booking.payment_status == PaymentStatus.COMPLETED.value
        ).scalar()
        refunded = self.db.query(func.coalesce(func.sum(Booking.total_amount), 0)).filter(
            Booking.payment_status == PaymentStatus.REFUNDED.value
        ).scalar()
        seats_sold = self.db.query(func.count(SeatClaim.id)).join(SeatClaim.booking).filter(
            Booking.payment_status == PaymentStatus.COMPLETED.value
        ).scalar()

        return BookingStatistics(
            total_bookings=sum(by_status.values()),
            bookings_by_status=by_status,
            total_revenue=Decimal(revenue),
            refunded_amount=Decimal(refunded),
            seats_sold=seats_sold or 0,
            currency=settings.CURRENCY
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _base_query(self):
        return self.db.query(Booking).options(
            joinedload(Booking.user),
            joinedload(Booking.screening).joinedload(Screening.movie),
            joinedload(Booking.screening).joinedload(Screening.theatre)
        )

    def _change_status(
        self,
        booking: Booking,
        new_status: PaymentStatus,
        force: bool = False,
        allow_refund: bool = False
    ) -> None:
        current = PaymentStatus(booking.payment_status)
        if new_status == current:
            return

        if not force:
            if new_status not in ALLOWED_TRANSITIONS[current]:
                raise InvalidStateError(
                    f"Cannot change booking status from {current.value} to {new_status.value}"
                )
            if new_status == PaymentStatus.REFUNDED and not allow_refund:
                raise InvalidStateError("Use the refund operation to refund a booking")
            if new_status == PaymentStatus.CANCELLED and booking.screening.start_time <= datetime.now():
                raise InvalidStateError("Cannot cancel a booking for a screening that has already started")

        if new_status == PaymentStatus.CANCELLED:
            booking.seat_claims = []
        elif current == PaymentStatus.CANCELLED:
            self._reclaim_seats(booking)

        booking.payment_status = new_status.value
        self.db.commit()
        self.db.refresh(booking)

    def _reclaim_seats(self, booking: Booking) -> None:
        """Re-take the seats of a booking leaving CANCELLED"""
        labels = list(booking.booked_seats or [])
        taken = sorted(set(labels) & self.screening_service.get_booked_seats(booking.screening_id))
        if taken:
            raise ConflictError(f"Seat(s) already booked: {', '.join(taken)}")

        booking.seat_claims = [
            SeatClaim(screening_id=booking.screening_id, seat_label=label) for label in labels
        ]
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("One or more of the booking's seats have just been booked")

    def _generate_booking_number(self) -> str:
        """BK + timestamp + random suffix, checked against existing numbers"""
        for _ in range(settings.BOOKING_NUMBER_MAX_ATTEMPTS):
            candidate = (
                f"{settings.BOOKING_NUMBER_PREFIX}{datetime.now():%Y%m%d%H%M%S}"
                f"{uuid.uuid4().hex[:8].upper()}"
            )
            exists = self.db.query(Booking.id).filter(Booking.booking_number == candidate).first()
            if not exists:
                return candidate
        raise ConflictError("Could not generate a unique booking number")
