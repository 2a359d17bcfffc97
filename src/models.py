from sqlalchemy import Column, Integer, BigInteger, String, DateTime, Date, Text, ForeignKey, Numeric, JSON, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from src.database import Base

# ================================
# Users & Roles
# ================================
class User(Base):
    __tablename__ = "users"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user_roles = relationship("UserHasRole", back_populates="user", cascade="all, delete-orphan")
    bookings = relationship("Booking", back_populates="user")

class Role(Base):
    __tablename__ = "roles"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user_roles = relationship("UserHasRole", back_populates="role")

class UserHasRole(Base):
    __tablename__ = "user_has_roles"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    user_id = Column(BigInteger, ForeignKey("users.id"), nullable=False)
    role_id = Column(BigInteger, ForeignKey("roles.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="user_roles")
    role = relationship("Role", back_populates="user_roles")

# ================================
# Catalog
# ================================
class Movie(Base):
    __tablename__ = "movies"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    title = Column(String(100), nullable=False, index=True)
    description = Column(String(500))
    duration_minutes = Column(Integer, nullable=False)
    director = Column(String(255))
    cast_members = Column("movie_cast", String(255))
    release_date = Column(Date)
    poster_image_url = Column(Text)
    trailer_url = Column(Text)
    rating = Column(String(20))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    screenings = relationship("Screening", back_populates="movie")

class Theatre(Base):
    __tablename__ = "theatres"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    address = Column(String(200), nullable=False)
    phone_number = Column(String(20))
    email = Column(String(100))
    description = Column(String(500))
    total_screens = Column(Integer)
    image_url = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    screenings = relationship("Screening", back_populates="theatre")
    seats = relationship("Seat", back_populates="theatre", cascade="all, delete-orphan")

# ================================
# Screenings & Seats
# ================================
class Screening(Base):
    __tablename__ = "screenings"
    __table_args__ = (
        Index("ix_screenings_theatre_screen", "theatre_id", "screen_number"),
    )

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    movie_id = Column(BigInteger, ForeignKey("movies.id"), nullable=False, index=True)
    theatre_id = Column(BigInteger, ForeignKey("theatres.id"), nullable=False, index=True)
    screen_number = Column(Integer, nullable=False)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    format = Column(String(20), nullable=False, default="STANDARD")
    base_price = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    movie = relationship("Movie", back_populates="screenings")
    theatre = relationship("Theatre", back_populates="screenings")
    bookings = relationship("Booking", back_populates="screening")

class Seat(Base):
    __tablename__ = "seats"
    __table_args__ = (
        UniqueConstraint("theatre_id", "screen_number", "row_name", "seat_number", name="uq_seat_position"),
    )

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    theatre_id = Column(BigInteger, ForeignKey("theatres.id"), nullable=False, index=True)
    screen_number = Column(Integer, nullable=False)
    row_name = Column(String(5), nullable=False)
    seat_number = Column(Integer, nullable=False)
    seat_type = Column(String(20), nullable=False, default="STANDARD")
    price_multiplier = Column(Numeric(4, 2), nullable=False, default=1)

    # Relationships
    theatre = relationship("Theatre", back_populates="seats")

    @property
    def label(self) -> str:
        return f"{self.row_name}{self.seat_number}"

# ================================
# Bookings
# ================================
class Booking(Base):
    __tablename__ = "bookings"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    booking_number = Column(String(40), unique=True, nullable=False, index=True)
    user_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    screening_id = Column(BigInteger, ForeignKey("screenings.id"), nullable=False, index=True)
    booking_time = Column(DateTime, nullable=False, index=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    payment_status = Column(String(20), nullable=False, default="PENDING", index=True)
    payment_method = Column(String(50))
    booked_seats = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="bookings")
    screening = relationship("Screening", back_populates="bookings")
    seat_claims = relationship("SeatClaim", back_populates="booking", cascade="all, delete-orphan")

class SeatClaim(Base):
    """Live ownership of a seat label for a screening; removed when the booking is cancelled"""
    __tablename__ = "seat_claims"
    __table_args__ = (
        UniqueConstraint("screening_id", "seat_label", name="uq_seat_claim_screening_label"),
    )

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    screening_id = Column(BigInteger, ForeignKey("screenings.id"), nullable=False, index=True)
    booking_id = Column(BigInteger, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    seat_label = Column(String(10), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    booking = relationship("Booking", back_populates="seat_claims")
