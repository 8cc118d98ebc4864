"""User registration and credential checks."""

from __future__ import annotations

import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from talecraft.core.errors import ConflictError, NotFoundError, UnauthenticatedError
from talecraft.core.security import hash_password, verify_password
from talecraft.models.user import User

logger = logging.getLogger(__name__)


def conflicting_field(error: IntegrityError) -> str:
    """Name the unique field an IntegrityError was raised for."""
    return "email" if "email" in str(error.orig).lower() else "username"


class UserService:
    """Service for user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(self, username: str, email: str, password: str) -> User:
        """Create a user with a bcrypt-hashed password.

        Raises:
            ConflictError: If the username or email is already taken
        """
        existing = await self.db.execute(
            select(User.username, User.email).where(
                or_(User.username == username, User.email == email)
            )
        )
        taken = existing.first()
        if taken is not None:
            field = "email" if taken.email == email else "username"
            raise ConflictError(f"This {field} is already registered.")

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent registration
            await self.db.rollback()
            raise ConflictError(
                f"This {conflicting_field(e)} is already registered."
            ) from e
        await self.db.refresh(user)

        logger.info("Registered user %s", user.id)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """Return the user matching the credentials.

        Raises:
            UnauthenticatedError: If the email is unknown or the password is wrong
        """
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise UnauthenticatedError("Invalid email or password")
        return user

    async def get_user(self, user_id: int) -> User:
        """Get a user by id.

        Raises:
            NotFoundError: If no such user exists
        """
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found.")
        return user
