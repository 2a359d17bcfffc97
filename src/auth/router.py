from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from datetime import timedelta
from src.database import get_db
from src.auth.schemas import UserCreate, User, UserUpdate, LoginRequest, AuthResponse, RoleAssignment
from src.auth.service import UserService
from src.auth.utils import create_access_token
from src.auth.dependencies import get_current_user, require_admin
from src.config import settings

router = APIRouter()

def _user_response(db: Session, user) -> User:
    response = User.model_validate(user)
    response.roles = UserService.get_user_roles(db, user.id)
    return response

def _issue_token(user) -> str:
    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return create_access_token(
        data={"sub": str(user.id), "username": user.username}, expires_delta=access_token_expires
    )

@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
def register_user(user: UserCreate, db: Session = Depends(get_db)):
    """Register a new user"""
    db_user = UserService.create_user(db=db, user=user)
    return _user_response(db, db_user)

@router.post("/login", response_model=AuthResponse)
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    """Login with username or email"""
    user = UserService.authenticate_user(db, login_data.username, login_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return AuthResponse(
        access_token=_issue_token(user),
        token_type="bearer",
        user=_user_response(db, user)
    )

@router.post("/token")
def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """OAuth2 password flow used by the interactive docs"""
    user = UserService.authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return {"access_token": _issue_token(user), "token_type": "bearer"}

@router.get("/me", response_model=User)
def read_users_me(current_user = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get current user profile"""
    return _user_response(db, current_user)

@router.put("/me", response_model=User)
def update_user_profile(
    user_update: UserUpdate,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update current user profile"""
    updated_user = UserService.update_user(db=db, user_id=current_user.id, user_update=user_update)
    if not updated_user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return _user_response(db, updated_user)

@router.post("/users/{user_id}/roles")
def assign_user_role(
    user_id: int,
    assignment: RoleAssignment,
    current_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Grant a role to a user (admin only)"""
    roles = UserService.assign_role(db, user_id, assignment.role)
    return {"user_id": user_id, "roles": roles}
