from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

class TheatreBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1, max_length=200)
    phone_number: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    total_screens: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = None

class TheatreCreate(TheatreBase):
    pass

class TheatreUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = Field(None, min_length=1, max_length=200)
    phone_number: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    total_screens: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = None

class Theatre(TheatreBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TheatreSearchResult(BaseModel):
    theatres: List[Theatre]
    total: int
    page: int
    per_page: int
