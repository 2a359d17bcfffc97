from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from src.models import User, Role, UserHasRole
from src.auth.schemas import UserCreate, UserUpdate
from src.auth.utils import get_password_hash, verify_password
from src.exceptions import ConflictError, NotFoundError
from src.logger_config import logger
from typing import List, Optional

ADMIN_ROLE = "admin"
MANAGER_ROLE = "manager"
USER_ROLE = "user"
STAFF_ROLES = {ADMIN_ROLE, MANAGER_ROLE}

class UserService:
    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email"""
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def get_user_by_username(db: Session, username: str) -> Optional[User]:
        """Get user by username"""
        return db.query(User).filter(User.username == username).first()

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def create_user(db: Session, user: UserCreate, role_name: str = USER_ROLE) -> User:
        """Create a new user with a single role"""
        hashed_password = get_password_hash(user.password)
        db_user = User(
            username=user.username,
            name=user.name,
            email=user.email,
            password=hashed_password
        )

        try:
            db.add(db_user)
            db.flush()

            role = UserService.get_or_create_role(db, role_name)
            db.add(UserHasRole(user_id=db_user.id, role_id=role.id))

            db.commit()
            db.refresh(db_user)
            logger.info(f"Registered user '{db_user.username}' with role '{role_name}'")
            return db_user

        except IntegrityError:
            db.rollback()
            raise ConflictError("Username or email already registered")

    @staticmethod
    def authenticate_user(db: Session, login: str, password: str) -> Optional[User]:
        """Authenticate user with username or email and password"""
        user = db.query(User).filter(
            or_(User.username == login, User.email == login)
        ).first()
        if not user:
            return None
        if not verify_password(password, user.password):
            return None
        return user

    @staticmethod
    def update_user(db: Session, user_id: int, user_update: UserUpdate) -> Optional[User]:
        """Update user information"""
        db_user = UserService.get_user_by_id(db, user_id)
        if not db_user:
            return None

        update_data = user_update.model_dump(exclude_unset=True)

        if "password" in update_data:
            update_data["password"] = get_password_hash(update_data["password"])

        for field, value in update_data.items():
            setattr(db_user, field, value)

        try:
            db.commit()
            db.refresh(db_user)
            return db_user
        except IntegrityError:
            db.rollback()
            raise ConflictError("Email already exists")

    @staticmethod
    def get_or_create_role(db: Session, role_name: str) -> Role:
        role = db.query(Role).filter(Role.name == role_name).first()
        if not role:
            role = Role(name=role_name)
            db.add(role)
            db.flush()
        return role

    @staticmethod
    def get_user_roles(db: Session, user_id: int) -> List[str]:
        """Get user's role names"""
        rows = db.query(Role.name).join(UserHasRole, UserHasRole.role_id == Role.id).filter(
            UserHasRole.user_id == user_id
        ).all()
        return [name for (name,) in rows]

    @staticmethod
    def assign_role(db: Session, user_id: int, role_name: str) -> List[str]:
        """Grant an extra role to a user"""
        user = UserService.get_user_by_id(db, user_id)
        if not user:
            raise NotFoundError(f"User not found with id: {user_id}")

        if role_name not in UserService.get_user_roles(db, user_id):
            role = UserService.get_or_create_role(db, role_name)
            db.add(UserHasRole(user_id=user_id, role_id=role.id))
            db.commit()
            logger.info(f"Granted role '{role_name}' to user '{user.username}'")

        return UserService.get_user_roles(db, user_id)

    @staticmethod
    def is_staff(db: Session, user_id: int) -> bool:
        return bool(STAFF_ROLES.intersection(UserService.get_user_roles(db, user_id)))
