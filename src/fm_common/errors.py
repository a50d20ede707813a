"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Ledger / balances
  3xxx: Catalog (services, settings)
  4xxx: Order
  5xxx: Withdrawal
  6xxx: Dispute
  9xxx: System

Every error is raised before any mutation is flushed, or the unit of work
that raised it is rolled back by the application service.
"""

from collections.abc import Iterable
from decimal import Decimal


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- Taxonomy base kinds ---

class ValidationError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 422)


class NotFoundError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


class ForbiddenError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 403)


class ConflictError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 409)


class NotImplementedFeatureError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 501)


# --- 1xxx: Auth/User ---

class UsernameExistsError(ConflictError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists")


class EmailExistsError(ConflictError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists")


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class AccountBannedError(ForbiddenError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is banned")


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class AdminRequiredError(ForbiddenError):
    def __init__(self) -> None:
        super().__init__(1006, "Admin privileges required")


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1007, f"User not found: {user_id}")


# --- 2xxx: Ledger ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: Decimal, available: Decimal) -> None:
        self.required = required
        self.available = available
        super().__init__(
            2001,
            f"Insufficient balance: required {required:.2f}, available {available:.2f}",
            422,
        )


class InvalidAmountError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(2002, f"Invalid amount: {detail}")


# --- 3xxx: Catalog ---

class ServiceNotFoundError(NotFoundError):
    def __init__(self, service_id: str) -> None:
        super().__init__(3001, f"Service not found: {service_id}")


class ServiceNotActiveError(ValidationError):
    def __init__(self, service_id: str) -> None:
        super().__init__(3002, f"Service is not active: {service_id}")


class SellerRequiredError(ForbiddenError):
    def __init__(self) -> None:
        super().__init__(3003, "Must be a seller to manage services")


class ServiceOwnershipError(ForbiddenError):
    def __init__(self, service_id: str) -> None:
        super().__init__(3004, f"Service {service_id} belongs to another seller")


class InvalidCommissionRateError(ValidationError):
    def __init__(self, value: str) -> None:
        super().__init__(3005, f"Commission rate must be a number between 0 and 100, got {value!r}")


class InvalidPackageError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(3006, detail)


# --- 4xxx: Order ---

class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4001, f"Order not found: {order_id}")


class OrderAccessForbiddenError(ForbiddenError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4002, f"Not a party to order {order_id}")


class InvalidStatusTransitionError(ConflictError):
    def __init__(
        self,
        order_id: str,
        current: str,
        target: str,
        allowed: Iterable[str] | None = None,
    ) -> None:
        message = f"Order {order_id} cannot move from {current} to {target}"
        if allowed is not None:
            message += f"; allowed: {', '.join(allowed) or 'none'}"
        super().__init__(4003, message)


class RevisionLimitExceededError(ConflictError):
    def __init__(self, order_id: str, max_revisions: int) -> None:
        super().__init__(
            4004, f"Order {order_id} already used all {max_revisions} revisions"
        )


# --- 5xxx: Withdrawal ---

class WithdrawalNotFoundError(NotFoundError):
    def __init__(self, withdrawal_id: str) -> None:
        super().__init__(5001, f"Withdrawal request not found: {withdrawal_id}")


class WithdrawalAlreadyProcessedError(ConflictError):
    def __init__(self, withdrawal_id: str, status: str) -> None:
        super().__init__(
            5002, f"Withdrawal request {withdrawal_id} is already {status}"
        )


# --- 6xxx: Dispute ---

class DisputeNotFoundError(NotFoundError):
    def __init__(self, dispute_id: str) -> None:
        super().__init__(6001, f"Dispute not found: {dispute_id}")


class DisputeExistsError(ConflictError):
    def __init__(self, order_id: str) -> None:
        super().__init__(6002, f"Order {order_id} already has a dispute")


class DisputeAccessForbiddenError(ForbiddenError):
    def __init__(self, dispute_id: str) -> None:
        super().__init__(6003, f"Not a party to dispute {dispute_id}")


class DisputeResolutionNotImplementedError(NotImplementedFeatureError):
    def __init__(self) -> None:
        super().__init__(
            6004, "Dispute resolution has no financial policy yet; nothing was changed"
        )


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class StorageError(AppError):
    """Unexpected database failure; the unit of work was rolled back."""

    def __init__(self, detail: str = "Storage failure") -> None:
        super().__init__(9003, detail, 500)


REQUEST_VALIDATION_CODE = 9004
