from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from src.database import get_db
from src.auth.dependencies import require_staff, require_admin
from src.theatres.schemas import Theatre, TheatreCreate, TheatreUpdate, TheatreSearchResult
from src.theatres.service import TheatreService

router = APIRouter()

@router.get("/", response_model=TheatreSearchResult)
def get_theatres(
    skip: int = Query(0, ge=0, description="Number of theatres to skip"),
    limit: int = Query(50, ge=1, le=100, description="Number of theatres to return"),
    query: Optional[str] = Query(None, description="Search by theatre name"),
    db: Session = Depends(get_db)
):
    """Get theatres with optional name search"""
    theatres, total = TheatreService.get_theatres(db, skip=skip, limit=limit, query=query)

    return TheatreSearchResult(
        theatres=theatres,
        total=total,
        page=(skip // limit) + 1,
        per_page=limit
    )

@router.get("/{theatre_id}", response_model=Theatre)
def get_theatre(theatre_id: int, db: Session = Depends(get_db)):
    theatre = TheatreService.get_theatre_by_id(db, theatre_id)
    if not theatre:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Theatre not found"
        )
    return theatre

@router.post("/", response_model=Theatre, status_code=status.HTTP_201_CREATED)
def create_theatre(
    theatre: TheatreCreate,
    current_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return TheatreService.create_theatre(db, theatre)

@router.put("/{theatre_id}", response_model=Theatre)
def update_theatre(
    theatre_id: int,
    theatre_update: TheatreUpdate,
    current_user = Depends(require_staff),
    db: Session = Depends(get_db)
):
    return TheatreService.update_theatre(db, theatre_id, theatre_update)

@router.delete("/{theatre_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_theatre(
    theatre_id: int,
    current_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    TheatreService.delete_theatre(db, theatre_id)
