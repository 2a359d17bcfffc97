from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from datetime import datetime, timedelta
from src.models import Movie, Screening
from src.movies.schemas import MovieCreate, MovieUpdate
from src.screenings.service import find_overlapping_screening
from src.exceptions import ConflictError, NotFoundError
from src.logger_config import logger

class MovieService:
    @staticmethod
    def get_movie_by_id(db: Session, movie_id: int) -> Optional[Movie]:
        """Get movie by ID"""
        return db.query(Movie).filter(Movie.id == movie_id).first()

    @staticmethod
    def get_movies(
        db: Session,
        skip: int = 0,
        limit: int = 50,
        query: Optional[str] = None
    ) -> Tuple[List[Movie], int]:
        """Get movies with optional title/director search"""
        movies_query = db.query(Movie)

        if query:
            movies_query = movies_query.filter(
                Movie.title.ilike(f"%{query}%") | Movie.director.ilike(f"%{query}%")
            )

        total = movies_query.count()
        movies = movies_query.order_by(Movie.title).offset(skip).limit(limit).all()

        return movies, total

    @staticmethod
    def create_movie(db: Session, movie: MovieCreate) -> Movie:
        db_movie = Movie(**movie.model_dump())
        db.add(db_movie)
        db.commit()
        db.refresh(db_movie)
        logger.info(f"Created movie {db_movie.id} '{db_movie.title}'")
        return db_movie

    @staticmethod
    def update_movie(db: Session, movie_id: int, movie_update: MovieUpdate) -> Movie:
        """Update a movie; a duration change moves the end time of its upcoming screenings"""
        db_movie = MovieService.get_movie_by_id(db, movie_id)
        if not db_movie:
            raise NotFoundError(f"Movie not found with id: {movie_id}")

        update_data = movie_update.model_dump(exclude_unset=True)
        duration_changed = (
            "duration_minutes" in update_data
            and update_data["duration_minutes"] != db_movie.duration_minutes
        )

        for field, value in update_data.items():
            setattr(db_movie, field, value)

        if duration_changed:
            MovieService._reschedule_upcoming_screenings(db, db_movie)

        db.commit()
        db.refresh(db_movie)
        return db_movie

    @staticmethod
    def delete_movie(db: Session, movie_id: int) -> None:
        db_movie = MovieService.get_movie_by_id(db, movie_id)
        if not db_movie:
            raise NotFoundError(f"Movie not found with id: {movie_id}")

        if db.query(Screening).filter(Screening.movie_id == movie_id).first():
            raise ConflictError("Movie has screenings and cannot be deleted")

        db.delete(db_movie)
        db.commit()

    @staticmethod
    def _reschedule_upcoming_screenings(db: Session, movie: Movie) -> None:
        upcoming = db.query(Screening).filter(
            Screening.movie_id == movie.id,
            Screening.start_time > datetime.now()
        ).all()

        for screening in upcoming:
            new_end = screening.start_time + timedelta(minutes=movie.duration_minutes)
            conflict = find_overlapping_screening(
                db,
                theatre_id=screening.theatre_id,
                screen_number=screening.screen_number,
                start_time=screening.start_time,
                end_time=new_end,
                exclude_id=screening.id
            )
            if conflict:
                db.rollback()
                raise ConflictError(
                    f"New duration makes screening {screening.id} overlap screening {conflict.id}"
                )
            screening.end_time = new_end

        if upcoming:
            logger.info(f"Recomputed end time of {len(upcoming)} screening(s) for movie {movie.id}")
