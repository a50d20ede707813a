"""Unit tests for UserService (mocked DB)."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.fm_common.errors import (
    AccountBannedError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    UsernameExistsError,
)
from src.fm_gateway.auth.jwt_handler import create_access_token, decode_token
from src.fm_gateway.user.db_models import UserModel
from src.fm_gateway.user.service import UserService


def _make_user(is_banned: bool = False, role: str = "client") -> UserModel:
    return UserModel(
        id="user-1",
        username="alice",
        email="alice@example.com",
        password_hash="$2b$12$fakehash",
        role=role,
        is_banned=is_banned,
    )


def _result(user: UserModel | None) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = user
    return result


@pytest.fixture
def mock_db() -> AsyncMock:
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def service() -> UserService:
    return UserService()


class TestRegister:
    async def test_duplicate_username(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user()))
        with pytest.raises(UsernameExistsError):
            await service.register("alice", "new@example.com", "Pass1word", "client", mock_db)

    async def test_duplicate_email(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(side_effect=[_result(None), _result(_make_user())])
        with pytest.raises(EmailExistsError):
            await service.register("bob", "alice@example.com", "Pass1word", "client", mock_db)

    async def test_seller_created_unbanned(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_result(None))
        with patch("src.fm_gateway.user.service.hash_password", return_value="hashed"):
            user = await service.register("bob", "bob@example.com", "Pass1word", "seller", mock_db)

        assert user.role == "seller"
        assert user.is_seller
        assert user.is_banned is False
        mock_db.add.assert_called_once_with(user)
        mock_db.flush.assert_awaited_once()
        mock_db.commit.assert_awaited_once()


class TestLogin:
    async def test_unknown_user(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_result(None))
        with pytest.raises(InvalidCredentialsError):
            await service.login("nobody", "Pass1word", mock_db)

    async def test_wrong_password(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user()))
        with (
            patch("src.fm_gateway.user.service.verify_password", return_value=False),
            pytest.raises(InvalidCredentialsError),
        ):
            await service.login("alice", "WrongPass1", mock_db)

    async def test_banned_account(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user(is_banned=True)))
        with (
            patch("src.fm_gateway.user.service.verify_password", return_value=True),
            pytest.raises(AccountBannedError),
        ):
            await service.login("alice", "Pass1word", mock_db)

    async def test_token_pair_carries_user_id(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user()))
        with patch("src.fm_gateway.user.service.verify_password", return_value=True):
            _, access, refresh = await service.login("alice", "Pass1word", mock_db)

        assert decode_token(access, expected_type="access")["sub"] == "user-1"
        assert decode_token(refresh, expected_type="refresh")["sub"] == "user-1"


class TestRefresh:
    async def test_garbage_token(self, service: UserService) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh("not.a.real.token")

    async def test_access_token_rejected(self, service: UserService) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh(create_access_token("user-1"))
