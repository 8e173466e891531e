"""
Read functions for wallet entities.

Soft-deleted rows are excluded unless the caller passes
``include_deleted=True``; there is no implicit global filter.
"""

from typing import Optional
from uuid import UUID

from django.db.models import Q, QuerySet

from .models import Account, Transaction, User


def users(include_deleted: bool = False) -> QuerySet:
    queryset = User.objects.order_by('created_at')
    if not include_deleted:
        queryset = queryset.filter(is_deleted=False)
    return queryset


def get_user(user_id: UUID, include_deleted: bool = False) -> Optional[User]:
    return users(include_deleted).filter(pk=user_id).first()


def accounts(include_deleted: bool = False) -> QuerySet:
    queryset = Account.objects.select_related(*Account.COMPONENTS).order_by('created_at')
    if not include_deleted:
        queryset = queryset.filter(is_deleted=False)
    return queryset


def get_account(account_id: UUID, include_deleted: bool = False) -> Optional[Account]:
    return accounts(include_deleted).filter(pk=account_id).first()


def accounts_for_user(user_id: UUID, include_deleted: bool = False) -> QuerySet:
    return accounts(include_deleted).filter(user_id=user_id)


def transactions(include_deleted: bool = False) -> QuerySet:
    queryset = Transaction.objects.order_by('-timestamp', '-created_at')
    if not include_deleted:
        queryset = queryset.filter(is_deleted=False)
    return queryset


def get_transaction(transaction_id: UUID, include_deleted: bool = False) -> Optional[Transaction]:
    return transactions(include_deleted).filter(pk=transaction_id).first()


def transactions_for_account(account_id: UUID, include_deleted: bool = False) -> QuerySet:
    return transactions(include_deleted).filter(
        Q(source_account_id=account_id) | Q(destination_account_id=account_id)
    )
