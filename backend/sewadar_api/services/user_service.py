"""User service - credential store reads and account management"""

from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from sewadar_api.models.sewadar import Sewadar
from sewadar_api.models.user import User
from sewadar_api.schemas.user import UserCreate, UserUpdate, ProfileUpdate
from sewadar_api.core.permissions import UserRole
from sewadar_api.core.security import get_password_hash, verify_password
from sewadar_api.core.exceptions import (
    BusinessLogicError,
    InvalidCredentialsError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
)
import logging

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """Service for user management"""

    # Credential store reads

    @staticmethod
    def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email, case-insensitively"""
        return db.query(User).filter(func.lower(User.email) == _normalize_email(email)).first()

    @staticmethod
    def find_active_by_id(db: Session, user_id: str) -> Optional[User]:
        """Live lookup used by the authorization gate on every request"""
        return (
            db.query(User)
            .filter(User.id == user_id, User.is_active.is_(True))
            .first()
        )

    @staticmethod
    def find_active_by_email(db: Session, email: str) -> Optional[User]:
        return (
            db.query(User)
            .filter(func.lower(User.email) == _normalize_email(email), User.is_active.is_(True))
            .first()
        )

    @staticmethod
    def authenticate_user(db: Session, email: str, password: str) -> User:
        """
        Authenticate user by email and password

        Unknown, inactive and wrong-password cases raise the same error so
        callers cannot tell which emails exist.

        Args:
            db: Database session
            email: Email
            password: Password

        Returns:
            Authenticated user
        """
        user = UserService.find_active_by_email(db, email)

        if not user:
            logger.warning("Login attempt with unknown or inactive email")
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash):
            logger.warning(f"Invalid password attempt for user: {user.id}")
            raise InvalidCredentialsError()

        logger.info(f"User authenticated: {user.id}")
        return user

    # Administration

    @staticmethod
    def create_user(db: Session, user_data: UserCreate) -> User:
        """
        Create new user

        Args:
            db: Database session
            user_data: User creation data

        Returns:
            Created user
        """
        if UserService.get_user_by_email(db, user_data.email):
            raise ResourceAlreadyExistsError("Email already registered")

        user = User(
            email=_normalize_email(user_data.email),
            password_hash=get_password_hash(user_data.password),
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            role=UserRole.parse(user_data.role).value,
            is_active=True,
        )

        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info(f"Created user: {user.id} (role: {user.role})")
        return user

    @staticmethod
    def get_all_users(db: Session, role: Optional[UserRole] = None) -> List[User]:
        """
        Get all users, optionally filtered by role

        Args:
            db: Database session
            role: Optional role filter

        Returns:
            List of users, newest first
        """
        query = db.query(User)

        if role:
            query = query.filter(User.role == UserRole.parse(role).value)

        return query.order_by(User.created_at.desc()).all()

    @staticmethod
    def get_user_with_stats(db: Session, user_id: str) -> Tuple[User, int]:
        user = UserService.get_user_by_id(db, user_id)
        if not user:
            raise ResourceNotFoundError("User")
        return user, UserService.count_authored_records(db, user_id)

    @staticmethod
    def count_authored_records(db: Session, user_id: str) -> int:
        return db.query(func.count(Sewadar.id)).filter(Sewadar.created_by == user_id).scalar() or 0

    @staticmethod
    def update_user(db: Session, user_id: str, updates: UserUpdate, acting_user_id: str) -> User:
        """
        Administrative update of names, role and active flag

        Args:
            db: Database session
            user_id: User to update
            updates: Fields to change
            acting_user_id: Administrator performing the change

        Returns:
            Updated user
        """
        user = UserService.get_user_by_id(db, user_id)
        if not user:
            raise ResourceNotFoundError("User")

        if user_id == acting_user_id and updates.is_active is False:
            raise BusinessLogicError("Cannot deactivate your own account")

        changes = updates.model_dump(exclude_none=True)
        if "role" in changes:
            changes["role"] = UserRole.parse(changes["role"]).value
        for field, value in changes.items():
            setattr(user, field, value)

        db.commit()
        db.refresh(user)

        logger.info(f"Updated user {user.id}: {sorted(changes)}")
        return user

    @staticmethod
    def update_profile(db: Session, user_id: str, profile: ProfileUpdate) -> User:
        user = UserService.get_user_by_id(db, user_id)
        if not user:
            raise ResourceNotFoundError("User")

        email = _normalize_email(profile.email)
        if email != user.email:
            existing = UserService.get_user_by_email(db, email)
            if existing and existing.id != user.id:
                raise ResourceAlreadyExistsError("Email already exists")

        user.first_name = profile.first_name
        user.last_name = profile.last_name
        user.email = email
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def change_password(db: Session, user_id: str, current_password: str, new_password: str) -> None:
        user = UserService.get_user_by_id(db, user_id)
        if not user:
            raise ResourceNotFoundError("User")

        if not verify_password(current_password, user.password_hash):
            raise BusinessLogicError("Current password is incorrect")

        user.password_hash = get_password_hash(new_password)
        db.commit()

    @staticmethod
    def reset_password(db: Session, user_id: str, new_password: str) -> User:
        user = UserService.get_user_by_id(db, user_id)
        if not user:
            raise ResourceNotFoundError("User")

        user.password_hash = get_password_hash(new_password)
        db.commit()
        return user

    @staticmethod
    def delete_user(db: Session, user_id: str, acting_user_id: str) -> str:
        """
        Delete user

        Refused for the acting administrator and for users who authored
        sewadar records, so audit history stays attributable.

        Args:
            db: Database session
            user_id: User ID
            acting_user_id: Administrator performing the deletion

        Returns:
            Email of the deleted user
        """
        user = UserService.get_user_by_id(db, user_id)

        if not user:
            raise ResourceNotFoundError("User")

        if user_id == acting_user_id:
            raise BusinessLogicError("Cannot delete your own account")

        authored = UserService.count_authored_records(db, user_id)
        if authored > 0:
            raise BusinessLogicError(
                f"Cannot delete user who has created {authored} sewadar records. "
                "Please reassign or delete the records first."
            )

        email = user.email
        db.delete(user)
        db.commit()

        logger.info(f"Deleted user: {user_id}")
        return email

    @staticmethod
    def ensure_admin(
        db: Session,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> Optional[User]:
        """Create the bootstrap administrator if no account uses the email"""
        if UserService.get_user_by_email(db, email):
            return None
        return UserService.create_user(
            db,
            UserCreate(
                email=email,
                password=password,
                first_name=first_name,
                last_name=last_name,
                role=UserRole.ADMINISTRATOR,
            ),
        )


# Singleton instance
user_service = UserService()
