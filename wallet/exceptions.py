"""
Domain errors for the Wallet app.

Every error is a ValueError subclass carrying the HTTP status the API
answers with, so views can catch ``WalletError`` and respond uniformly.
"""

from decimal import Decimal
from typing import Optional

from rest_framework import status


class WalletError(ValueError):
    """Base class for wallet domain errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Wallet operation failed'

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class ValidationError(WalletError):
    """Malformed or missing input detected before any storage access."""

    default_message = 'Invalid request'

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(WalletError):
    """Referenced entity does not exist or has been soft-deleted."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found'

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        # Entities referenced from a request body answer 400 instead of 404
        if status_code is not None:
            self.status_code = status_code


class InsufficientFundsError(WalletError):
    """Source account balance is lower than the requested amount."""

    def __init__(self, available: Decimal, required: Decimal):
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient funds. Available balance: ${available:.2f}, "
            f"Required: ${required:.2f}"
        )


class InvariantViolationError(WalletError):
    """Operation would break a ledger invariant."""

    default_message = 'Operation not allowed'


class SpendingLimitExceededError(InvariantViolationError):
    """Debit would push the account past its spending limit for the period."""

    def __init__(self, limit_amount: Decimal, current_spending: Decimal, required: Decimal):
        self.limit_amount = limit_amount
        self.current_spending = current_spending
        self.required = required
        super().__init__(
            f"Spending limit exceeded. Limit: ${limit_amount:.2f}, "
            f"spent this period: ${current_spending:.2f}, Required: ${required:.2f}"
        )


class ConflictError(WalletError):
    """Uniqueness conflict, such as a duplicate username or email."""

    default_message = 'Conflicting data'


class PersistenceError(WalletError):
    """Storage failure during an atomic unit of work; nothing was written."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'The operation could not be completed and was rolled back'


def account_not_found(label: str = 'Account') -> str:
    """Return message for a missing or deleted account."""
    return f"{label} not found or has been deleted"


def core_details_missing(label: str = 'Account') -> str:
    """Return message for an account without core details."""
    return f"{label} does not have core details configured"


def user_not_found() -> str:
    """Return message for a missing or deleted user."""
    return "User not found or has been deleted"


def duplicate_main_account() -> str:
    """Return message when a second main account is requested."""
    return "User already has a main account. Only one main account is allowed per user."
