import os
from datetime import datetime, timedelta
from decimal import Decimal

# Settings are read at import time, so the test database must be configured first
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['SECRET_KEY'] = 'test-secret-key'
os.environ['LOG_LEVEL'] = 'WARNING'

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402

from src.auth.schemas import UserCreate  # noqa: E402
from src.auth.service import UserService, ADMIN_ROLE, MANAGER_ROLE, USER_ROLE  # noqa: E402
from src.auth.utils import create_access_token  # noqa: E402
from src.database import Base, SessionLocal, engine, get_db  # noqa: E402
from src.main import app  # noqa: E402
from src.models import Movie, Screening, Theatre  # noqa: E402
from src.seats.service import SeatService  # noqa: E402

DEFAULT_PASSWORD = 'Pass123!'


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_user(db, username: str, role: str = USER_ROLE):
    return UserService.create_user(
        db,
        UserCreate(
            username=username,
            name=username.title(),
            email=f'{username}@example.com',
            password=DEFAULT_PASSWORD,
        ),
        role_name=role,
    )


def auth_headers(user) -> dict:
    token = create_access_token({'sub': str(user.id), 'username': user.username})
    return {'Authorization': f'Bearer {token}'}


def create_movie(db, title: str = 'Test Movie', duration_minutes: int = 120) -> Movie:
    movie = Movie(title=title, duration_minutes=duration_minutes, rating='PG')
    db.add(movie)
    db.commit()
    db.refresh(movie)
    return movie


def create_theatre(db, name: str = 'Test Theatre', total_screens: int = 3) -> Theatre:
    theatre = Theatre(name=name, address='1 Cinema Street', total_screens=total_screens)
    db.add(theatre)
    db.commit()
    db.refresh(theatre)
    return theatre


def create_screening(
    db,
    movie: Movie,
    theatre: Theatre,
    start_time: datetime,
    screen_number: int = 1,
    base_price: str = '10.00',
) -> Screening:
    """Insert a screening directly, bypassing scheduling checks"""
    screening = Screening(
        movie_id=movie.id,
        theatre_id=theatre.id,
        screen_number=screen_number,
        start_time=start_time,
        end_time=start_time + timedelta(minutes=movie.duration_minutes),
        format='STANDARD',
        base_price=Decimal(base_price),
    )
    db.add(screening)
    db.commit()
    db.refresh(screening)
    return screening


def tomorrow_at(hour: int, minute: int = 0) -> datetime:
    return (datetime.now() + timedelta(days=1)).replace(hour=hour, minute=minute, second=0, microsecond=0)


@pytest.fixture
def customer(db_session):
    return create_user(db_session, 'customer')


@pytest.fixture
def other_customer(db_session):
    return create_user(db_session, 'othercustomer')


@pytest.fixture
def admin(db_session):
    return create_user(db_session, 'admin', role=ADMIN_ROLE)


@pytest.fixture
def manager(db_session):
    return create_user(db_session, 'manager', role=MANAGER_ROLE)


@pytest.fixture
def movie(db_session):
    return create_movie(db_session)


@pytest.fixture
def theatre(db_session):
    return create_theatre(db_session)


@pytest.fixture
def seated_theatre(db_session, theatre):
    """Theatre whose screen 1 has a 5 x 10 seat grid"""
    SeatService(db_session).initialize_seats(theatre.id, 1, 5, 10)
    return theatre


@pytest.fixture
def screening(db_session, movie, seated_theatre):
    return create_screening(db_session, movie, seated_theatre, tomorrow_at(18))
