from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from src.database import get_db
from src.auth.dependencies import require_staff
from src.movies.schemas import Movie, MovieCreate, MovieUpdate, MovieSearchResult
from src.movies.service import MovieService

router = APIRouter()

@router.get("/", response_model=MovieSearchResult)
def get_movies(
    skip: int = Query(0, ge=0, description="Number of movies to skip"),
    limit: int = Query(50, ge=1, le=100, description="Number of movies to return"),
    query: Optional[str] = Query(None, description="Search by title or director"),
    db: Session = Depends(get_db)
):
    """Get movies with optional search"""
    movies, total = MovieService.get_movies(db, skip=skip, limit=limit, query=query)

    return MovieSearchResult(
        movies=movies,
        total=total,
        page=(skip // limit) + 1,
        per_page=limit
    )

@router.get("/{movie_id}", response_model=Movie)
def get_movie(movie_id: int, db: Session = Depends(get_db)):
    """Get movie details"""
    movie = MovieService.get_movie_by_id(db, movie_id)
    if not movie:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Movie not found"
        )
    return movie

@router.post("/", response_model=Movie, status_code=status.HTTP_201_CREATED)
def create_movie(
    movie: MovieCreate,
    current_user = Depends(require_staff),
    db: Session = Depends(get_db)
):
    return MovieService.create_movie(db, movie)

@router.put("/{movie_id}", response_model=Movie)
def update_movie(
    movie_id: int,
    movie_update: MovieUpdate,
    current_user = Depends(require_staff),
    db: Session = Depends(get_db)
):
    return MovieService.update_movie(db, movie_id, movie_update)

@router.delete("/{movie_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_movie(
    movie_id: int,
    current_user = Depends(require_staff),
    db: Session = Depends(get_db)
):
    MovieService.delete_movie(db, movie_id)
