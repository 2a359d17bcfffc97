from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from src.models import Theatre, Screening
from src.theatres.schemas import TheatreCreate, TheatreUpdate
from src.exceptions import ConflictError, NotFoundError, ValidationError

class TheatreService:
    @staticmethod
    def get_theatre_by_id(db: Session, theatre_id: int) -> Optional[Theatre]:
        """Get theatre by ID"""
        return db.query(Theatre).filter(Theatre.id == theatre_id).first()

    @staticmethod
    def get_theatres(
        db: Session,
        skip: int = 0,
        limit: int = 50,
        query: Optional[str] = None
    ) -> Tuple[List[Theatre], int]:
        theatres_query = db.query(Theatre)

        if query:
            theatres_query = theatres_query.filter(Theatre.name.ilike(f"%{query}%"))

        total = theatres_query.count()
        theatres = theatres_query.order_by(Theatre.name).offset(skip).limit(limit).all()

        return theatres, total

    @staticmethod
    def create_theatre(db: Session, theatre: TheatreCreate) -> Theatre:
        db_theatre = Theatre(**theatre.model_dump())
        db.add(db_theatre)
        db.commit()
        db.refresh(db_theatre)
        return db_theatre

    @staticmethod
    def update_theatre(db: Session, theatre_id: int, theatre_update: TheatreUpdate) -> Theatre:
        db_theatre = TheatreService.get_theatre_by_id(db, theatre_id)
        if not db_theatre:
            raise NotFoundError(f"Theatre not found with id: {theatre_id}")

        for field, value in theatre_update.model_dump(exclude_unset=True).items():
            setattr(db_theatre, field, value)

        db.commit()
        db.refresh(db_theatre)
        return db_theatre

    @staticmethod
    def delete_theatre(db: Session, theatre_id: int) -> None:
        db_theatre = TheatreService.get_theatre_by_id(db, theatre_id)
        if not db_theatre:
            raise NotFoundError(f"Theatre not found with id: {theatre_id}")

        if db.query(Screening).filter(Screening.theatre_id == theatre_id).first():
            raise ConflictError("Theatre has screenings and cannot be deleted")

        db.delete(db_theatre)
        db.commit()

    @staticmethod
    def validate_screen_number(theatre: Theatre, screen_number: int) -> None:
        """Screen numbers start at 1 and may not exceed the theatre's declared screen count"""
        if screen_number < 1:
            raise ValidationError("Screen number must be at least 1")
        if theatre.total_screens and screen_number > theatre.total_screens:
            raise ValidationError(
                f"Theatre '{theatre.name}' has only {theatre.total_screens} screen(s)"
            )
