from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime

class UserBase(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    name: str
    email: EmailStr

class UserCreate(UserBase):
    password: str = Field(..., min_length=6)

class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)

class UserInDB(UserBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class User(UserInDB):
    roles: List[str] = []

class LoginRequest(BaseModel):
    # Either a username or an email address
    username: str
    password: str

class AuthResponse(BaseModel):
    access_token: str
    token_type: str
    user: User

class RoleAssignment(BaseModel):
    role: str = Field(..., pattern="^(admin|manager|user)$")
