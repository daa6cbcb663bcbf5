"""
Credential store backed by SQLAlchemy.
"""
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from leafbase.auth.errors import DuplicateKeyError
from leafbase.auth.models import User


class CredentialStore:
    """
    Persists ``User`` records.

    The unique indexes on ``users.username`` and ``users.email`` are the
    final guard against two concurrent registrations for the same name.
    """
    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert_if_unique(self, user: User) -> User:
        """
        Insert ``user`` and commit.

        Raises:
            DuplicateKeyError: a unique constraint rejected the insert
        """
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateKeyError(str(e.orig)) from e
        await self.db.refresh(user)
        return user

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return await self.db.get(User, user_id)
