"""User persistence: lookups by id, email and single-use token digests."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateEmailError
from app.core.security import TokenService
from app.models.user import User
from app.utils.helpers import normalize_email

logger = logging.getLogger(__name__)


class UserRepository:
    """Credential store over the ``users`` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, user_id: UUID | str) -> Optional[User]:
        try:
            key = user_id if isinstance(user_id, UUID) else UUID(str(user_id))
        except ValueError:
            return None
        return await self.db.get(User, key)

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == normalize_email(email)))
        return result.scalar_one_or_none()

    async def find_by_valid_reset_token(self, token: str, now: datetime) -> Optional[User]:
        """Owner of an unexpired reset token; unknown and expired both give None."""
        result = await self.db.execute(
            select(User).where(
                User.reset_password_token == TokenService.hash_single_use_token(token),
                User.reset_password_expire > now,
            )
        )
        return result.scalar_one_or_none()

    async def find_by_valid_verification_token(self, token: str, now: datetime) -> Optional[User]:
        """Owner of an unexpired verification token; unknown and expired both give None."""
        result = await self.db.execute(
            select(User).where(
                User.email_verification_token == TokenService.hash_single_use_token(token),
                User.email_verification_expire > now,
            )
        )
        return result.scalar_one_or_none()

    async def save(self, user: User) -> User:
        """Persist ``user``; the unique email index turns races into DuplicateEmailError."""
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if "email" not in str(e.orig).lower():
                raise
            logger.info(f"Rejected duplicate email on save: {user.email}")
            raise DuplicateEmailError() from e
        return user
