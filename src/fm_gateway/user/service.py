"""User service: register, login, refresh.

register commits through unit_of_work like every other mutating service;
login and refresh are read-only.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_common.errors import (
    AccountBannedError,
    EmailExistsError,
    InvalidCredentialsError,
    UsernameExistsError,
)
from src.fm_common.unit_of_work import unit_of_work
from src.fm_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.fm_gateway.auth.password import hash_password, verify_password
from src.fm_gateway.user.db_models import UserModel

logger = logging.getLogger(__name__)


class UserService:
    """Stateless service, instantiate once and reuse across requests."""

    async def _find(self, db: AsyncSession, criterion: Any) -> UserModel | None:
        result = await db.execute(select(UserModel).where(criterion))
        return result.scalar_one_or_none()

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        role: str,
        db: AsyncSession,
    ) -> UserModel:
        """Create a user with zeroed balances (column defaults).

        Balances start at zero; the only way to fund an account afterwards is
        a ledger posting (admin deposit or order earnings).
        """
        async with unit_of_work(db):
            if await self._find(db, UserModel.username == username) is not None:
                raise UsernameExistsError()
            if await self._find(db, UserModel.email == email) is not None:
                raise EmailExistsError()

            user = UserModel(
                username=username,
                email=email,
                password_hash=hash_password(password),
                role=role,
                is_banned=False,
            )
            db.add(user)
            await db.flush()
        logger.info("Registered user=%s role=%s", user.id, role)
        return user

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Authenticate and return (user, access_token, refresh_token).

        Unknown user and wrong password raise the same error so usernames
        cannot be enumerated.
        """
        user = await self._find(db, UserModel.username == username)

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if user.is_banned:
            raise AccountBannedError()

        return (
            user,
            create_access_token(str(user.id)),
            create_refresh_token(str(user.id)),
        )

    async def refresh(self, refresh_token: str) -> str:
        """Validate refresh token and return a new access token."""
        payload = decode_token(refresh_token, expected_type="refresh")
        return create_access_token(str(payload["sub"]))
