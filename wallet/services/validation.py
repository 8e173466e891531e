"""
Transaction validation.

Structural checks need no storage access. Resolution checks run against
Account rows the caller has already loaded (and, when executing, locked), so
the balance that is checked is the balance that gets mutated.
"""

from dataclasses import dataclass, fields, replace
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional
from uuid import UUID

from django.conf import settings
from django.utils import timezone
from rest_framework import status

from wallet.exceptions import (
    InsufficientFundsError,
    InvariantViolationError,
    NotFoundError,
    SpendingLimitExceededError,
    ValidationError,
    account_not_found,
    core_details_missing,
)
from wallet.models import Account, DestinationType, SourceType

MAX_DESCRIPTION_LENGTH = 500
MAX_IBAN_LENGTH = 34
MAX_NAME_LENGTH = 255
CENT = Decimal('0.01')


@dataclass(frozen=True)
class TransactionRequest:
    """A proposed money movement, as submitted by a client."""

    source_type: int
    destination_type: int
    amount: Decimal
    description: str
    source_account_id: Optional[UUID] = None
    source_iban: Optional[str] = None
    source_name: Optional[str] = None
    destination_account_id: Optional[UUID] = None
    destination_iban: Optional[str] = None
    destination_name: Optional[str] = None
    timestamp: Optional[datetime] = None

    @classmethod
    def from_data(cls, data: dict) -> 'TransactionRequest':
        names = {field.name for field in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in names})

    @property
    def account_ids(self) -> list:
        return [
            account_id
            for account_id in (self.source_account_id, self.destination_account_id)
            if account_id is not None
        ]


@dataclass(frozen=True)
class ResolvedTransaction:
    """A validated request with its internal accounts loaded."""

    request: TransactionRequest
    source_account: Optional[Account]
    destination_account: Optional[Account]


def _check_length(value: Optional[str], limit: int, field: str) -> None:
    if value is not None and len(value) > limit:
        raise ValidationError(f"{field} must be at most {limit} characters", field=field)


def check_fields(request: TransactionRequest) -> None:
    """
    Check required fields per source/destination kind, amount and description.

    Raises:
        ValidationError: naming the offending field
    """
    if request.source_type not in SourceType.values:
        raise ValidationError("Unknown source type", field='sourceType')
    if request.destination_type not in DestinationType.values:
        raise ValidationError("Unknown destination type", field='destinationType')

    if request.amount is None or request.amount <= 0:
        raise ValidationError("Transaction amount must be greater than zero", field='amount')
    if request.amount != request.amount.quantize(CENT):
        raise ValidationError("Transaction amount must have at most 2 decimal places", field='amount')

    if not request.description or not request.description.strip():
        raise ValidationError("Description is required", field='description')
    _check_length(request.description, MAX_DESCRIPTION_LENGTH, 'description')

    if request.source_type == SourceType.ACCOUNT and request.source_account_id is None:
        raise ValidationError(
            "SourceAccountId is required when SourceType is ACCOUNT", field='sourceAccountId'
        )
    if request.source_type == SourceType.IBAN and not request.source_iban:
        raise ValidationError(
            "SourceIban is required when SourceType is IBAN", field='sourceIban'
        )
    _check_length(request.source_iban, MAX_IBAN_LENGTH, 'sourceIban')
    _check_length(request.source_name, MAX_NAME_LENGTH, 'sourceName')

    if request.destination_type == DestinationType.ACCOUNT and request.destination_account_id is None:
        raise ValidationError(
            "DestinationAccountId is required when DestinationType is ACCOUNT",
            field='destinationAccountId',
        )
    if request.destination_type == DestinationType.IBAN and not request.destination_iban:
        raise ValidationError(
            "DestinationIban is required when DestinationType is IBAN", field='destinationIban'
        )
    _check_length(request.destination_iban, MAX_IBAN_LENGTH, 'destinationIban')
    _check_length(request.destination_name, MAX_NAME_LENGTH, 'destinationName')


def normalize(request: TransactionRequest) -> TransactionRequest:
    """Drop the endpoint fields that do not belong to the chosen kinds."""
    source = {
        SourceType.ACCOUNT: dict(source_iban=None, source_name=None),
        SourceType.IBAN: dict(source_account_id=None),
        SourceType.SYSTEM: dict(source_account_id=None, source_iban=None),
    }[request.source_type]
    destination = {
        DestinationType.ACCOUNT: dict(destination_iban=None, destination_name=None),
        DestinationType.IBAN: dict(destination_account_id=None),
        DestinationType.SPEND: dict(destination_account_id=None, destination_iban=None),
    }[request.destination_type]
    return replace(request, **source, **destination)


def check_not_self_transfer(source_id: Optional[UUID], destination_id: Optional[UUID]) -> None:
    if source_id is not None and source_id == destination_id:
        raise InvariantViolationError("Cannot transfer money to the same account")


def validate_structure(request: TransactionRequest) -> TransactionRequest:
    """
    Run every check that needs no storage access.

    Returns the normalized request.
    """
    check_fields(request)
    request = normalize(request)
    check_not_self_transfer(request.source_account_id, request.destination_account_id)
    return request


def load_accounts(account_ids: Iterable[UUID], for_update: bool = False) -> dict:
    """
    Load accounts by id, keyed by id.

    With ``for_update`` the rows are locked in primary-key order so that
    concurrent movements over the same pair of accounts cannot deadlock.
    """
    ids = sorted(set(account_ids), key=str)
    if not ids:
        return {}
    queryset = Account.objects.filter(pk__in=ids).order_by('pk')
    if for_update:
        queryset = queryset.select_for_update()
    return {account.pk: account for account in queryset}


def _resolve_account(account_id: UUID, accounts: dict, label: str) -> Account:
    account = accounts.get(account_id)
    if account is None or account.is_deleted:
        raise NotFoundError(account_not_found(label), status_code=status.HTTP_400_BAD_REQUEST)
    if account.get_component('core_details') is None:
        raise NotFoundError(core_details_missing(label), status_code=status.HTTP_400_BAD_REQUEST)
    return account


def check_spending_limit(account: Account, amount: Decimal, now: Optional[datetime] = None) -> None:
    """Reject a debit that would exceed the account's limit for the current period."""
    limit = account.get_component('spending_limit')
    if limit is None:
        return

    now = now or timezone.now()
    spent = limit.current_spending if now < limit.period_end_date else Decimal('0.00')
    if spent + amount > limit.limit_amount:
        raise SpendingLimitExceededError(limit.limit_amount, spent, amount)


def spending_limits_enforced() -> bool:
    return getattr(settings, 'WALLET_ENFORCE_SPENDING_LIMITS', True)


def resolve(request: TransactionRequest, accounts: dict) -> ResolvedTransaction:
    """
    Check existence, activity, funds and limits against loaded accounts.

    Has no side effects.

    Raises:
        NotFoundError: account missing, deleted or without core details
        InsufficientFundsError: source balance lower than the amount
        InvariantViolationError: self transfer or spending limit exceeded
    """
    source = None
    destination = None

    if request.source_type == SourceType.ACCOUNT:
        source = _resolve_account(request.source_account_id, accounts, 'Source account')
        balance = source.core_details.balance
        if balance < request.amount:
            raise InsufficientFundsError(balance, request.amount)

    if request.destination_type == DestinationType.ACCOUNT:
        destination = _resolve_account(
            request.destination_account_id, accounts, 'Destination account'
        )

    if source is not None and destination is not None:
        check_not_self_transfer(source.pk, destination.pk)

    if source is not None and spending_limits_enforced():
        check_spending_limit(source, request.amount)

    return ResolvedTransaction(request=request, source_account=source, destination_account=destination)


def validate_transaction(request: TransactionRequest) -> ResolvedTransaction:
    """Validate a request end to end without locking or writing anything."""
    request = validate_structure(request)
    return resolve(request, load_accounts(request.account_ids))
