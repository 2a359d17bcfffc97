"""
Screenings Module

Scheduling of movie screenings on theatre screens and seat availability
per screening.

Key Components:
- service.py: Screening scheduling with overlap detection, availability queries
- router.py: FastAPI endpoints for screenings, seat availability and layouts
- schemas.py: Pydantic models for screenings and seating layouts

Scheduling rules:
- A screening ends start_time + movie duration
- Two screenings on the same theatre screen may not overlap; back-to-back is fine
- Scheduling checks for a theatre are serialized with a row lock on the theatre
"""

from .router import router
from .service import ScreeningService, find_overlapping_screening
from .schemas import ScreeningCreate, ScreeningUpdate, ScreeningFormat, SeatingLayout

__all__ = [
    "router",
    "ScreeningService",
    "find_overlapping_screening",
    "ScreeningCreate",
    "ScreeningUpdate",
    "ScreeningFormat",
    "SeatingLayout"
]
