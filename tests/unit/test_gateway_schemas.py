"""Unit tests for fm_gateway Pydantic schemas."""

import pytest
from pydantic import ValidationError

from src.fm_gateway.user.schemas import RegisterRequest


class TestRegisterRequest:
    def test_defaults_to_client(self) -> None:
        req = RegisterRequest(username="alice", email="alice@example.com", password="SecureP1ss")
        assert req.role == "client"

    def test_seller_allowed(self) -> None:
        req = RegisterRequest(
            username="alice", email="alice@example.com", password="SecureP1ss", role="seller"
        )
        assert req.role == "seller"

    def test_admin_not_self_assignable(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(
                username="alice", email="alice@example.com", password="SecureP1ss", role="admin"
            )

    @pytest.mark.parametrize("username", ["ab", "a" * 65, "alice!"])
    def test_bad_username(self, username: str) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(username=username, email="a@example.com", password="SecureP1ss")

    def test_invalid_email(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(username="alice", email="not-an-email", password="SecureP1ss")

    @pytest.mark.parametrize("password", ["Ab1", "alllower1", "ALLUPPER1", "NoDigitPass"])
    def test_weak_password(self, password: str) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(username="alice", email="a@example.com", password=password)
