#!/usr/bin/env python3
"""
Seed Data Script

Creates roles, staff accounts, a small catalogue of movies, theatres with seat
grids and a week of screenings for the Theatre Management System.

Usage:
    python seed_data.py
"""

from datetime import datetime, date, time, timedelta
from decimal import Decimal

from src.database import Base, engine, SessionLocal
from src.models import (
    SeatClaim, Booking, Screening, Seat, Theatre, Movie, UserHasRole, User, Role
)
from src.auth.schemas import UserCreate
from src.auth.service import UserService, ADMIN_ROLE, MANAGER_ROLE, USER_ROLE
from src.seats.service import SeatService
from src.screenings.schemas import ScreeningCreate, ScreeningFormat
from src.screenings.service import ScreeningService

SHOW_TIMES = [time(10, 0), time(14, 0), time(18, 0), time(21, 30)]

def create_seed_data():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        print("🎬 Creating seed data for Theatre Management System...")

        # Clear existing data (in reverse dependency order)
        print("Clearing existing data...")
        db.query(SeatClaim).delete()
        db.query(Booking).delete()
        db.query(Screening).delete()
        db.query(Seat).delete()
        db.query(Theatre).delete()
        db.query(Movie).delete()
        db.query(UserHasRole).delete()
        db.query(User).delete()
        db.query(Role).delete()
        db.commit()

        # 1. Roles and accounts
        print("Creating roles and users...")
        for role_name in (ADMIN_ROLE, MANAGER_ROLE, USER_ROLE):
            UserService.get_or_create_role(db, role_name)
        db.commit()

        accounts = [
            (UserCreate(username="admin", name="System Administrator",
                        email="admin@theatre.example.com", password="Admin123!"), ADMIN_ROLE),
            (UserCreate(username="manager", name="Theatre Manager",
                        email="manager@theatre.example.com", password="Manager123!"), MANAGER_ROLE),
            (UserCreate(username="customer", name="Demo Customer",
                        email="customer@theatre.example.com", password="Customer123!"), USER_ROLE),
        ]
        for account, role_name in accounts:
            UserService.create_user(db, account, role_name=role_name)

        # 2. Movies
        print("Creating movies...")
        movies = [
            Movie(title="The Long Night", description="A city loses power for a week.",
                  duration_minutes=118, director="Amani Keza", rating="PG13",
                  release_date=date(2024, 3, 1)),
            Movie(title="Hills of Gold", description="Two sisters restart the family farm.",
                  duration_minutes=95, director="Jean Mugisha", rating="PG",
                  release_date=date(2023, 11, 17)),
            Movie(title="Signal Lost", description="A deep-space crew hears an echo.",
                  duration_minutes=142, director="Ines Uwase", rating="R",
                  release_date=date(2024, 6, 21)),
        ]
        db.add_all(movies)
        db.commit()

        # 3. Theatres with seat grids
        print("Creating theatres and seats...")
        theatres = [
            Theatre(name="Downtown Cinema", address="KN 4 Ave, Kigali",
                    phone_number="+250788000001", total_screens=3),
            Theatre(name="Lakeside Screens", address="Lake Road 12, Rubavu",
                    phone_number="+250788000002", total_screens=2),
        ]
        db.add_all(theatres)
        db.commit()

        seat_service = SeatService(db)
        seat_count = 0
        for theatre in theatres:
            for screen_number in range(1, theatre.total_screens + 1):
                seat_count += seat_service.initialize_seats(theatre.id, screen_number, 8, 12)

        # 4. Screenings for the coming week, one movie per screen
        print("Creating screenings...")
        screening_service = ScreeningService(db)
        screening_count = 0
        tomorrow = date.today() + timedelta(days=1)
        for day in range(7):
            show_date = tomorrow + timedelta(days=day)
            for theatre in theatres:
                for screen_number in range(1, theatre.total_screens + 1):
                    movie = movies[(screen_number + day) % len(movies)]
                    for show_time in SHOW_TIMES:
                        screening_service.create_screening(ScreeningCreate(
                            movie_id=movie.id,
                            theatre_id=theatre.id,
                            screen_number=screen_number,
                            start_time=datetime.combine(show_date, show_time),
                            format=ScreeningFormat.IMAX if screen_number == 1 else ScreeningFormat.STANDARD,
                            base_price=Decimal("5000.00") if screen_number == 1 else Decimal("3500.00")
                        ))
                        screening_count += 1

        print("✅ Successfully created seed data for Theatre Management System!")
        print("Created:")
        print(f"  - {len(accounts)} users (admin / manager / customer)")
        print(f"  - {len(movies)} movies")
        print(f"  - {len(theatres)} theatres")
        print(f"  - {seat_count} seats")
        print(f"  - {screening_count} screenings")

    except Exception as e:
        print(f"❌ Error creating seed data: {e}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    create_seed_data()
