from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime, date
from enum import Enum

class MovieRating(str, Enum):
    G = "G"
    PG = "PG"
    PG13 = "PG13"
    R = "R"
    NC17 = "NC17"
    UNRATED = "UNRATED"

class MovieBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    duration_minutes: int = Field(..., gt=0)
    director: Optional[str] = Field(None, max_length=255)
    cast_members: Optional[str] = Field(None, max_length=255)
    release_date: Optional[date] = None
    poster_image_url: Optional[str] = None
    trailer_url: Optional[str] = None
    rating: Optional[MovieRating] = MovieRating.UNRATED

class MovieCreate(MovieBase):
    pass

class MovieUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    duration_minutes: Optional[int] = Field(None, gt=0)
    director: Optional[str] = None
    cast_members: Optional[str] = None
    release_date: Optional[date] = None
    poster_image_url: Optional[str] = None
    trailer_url: Optional[str] = None
    rating: Optional[MovieRating] = None

class Movie(MovieBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class MovieSearchResult(BaseModel):
    movies: List[Movie]
    total: int
    page: int
    per_page: int
