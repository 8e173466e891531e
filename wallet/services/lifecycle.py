"""
User and account lifecycle.

Structural changes that depend on balances (account and user deletion) read
those balances under the same row locks the transaction executor takes, so a
concurrent movement cannot slip in between the check and the change.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone
from rest_framework import status

from wallet import selectors
from wallet.exceptions import (
    ConflictError,
    InvariantViolationError,
    NotFoundError,
    ValidationError,
    account_not_found,
    duplicate_main_account,
    user_not_found,
)
from wallet.models import (
    Account,
    ActiveAccount,
    CoreDetails,
    DeletionPolicy,
    SavingGoal,
    SpendingLimit,
    User,
)

from .atomic import unit_of_work

logger = logging.getLogger(__name__)

MAIN_ACCOUNT_NAME = 'Main Account'
DUPLICATE_USER_MESSAGE = "Username or email already exists. Please use different values."
DUPLICATE_USERNAME_MESSAGE = "Username already exists. Please choose a different username."
DUPLICATE_EMAIL_MESSAGE = "Email already exists. Please use a different email address."

OPTIONAL_COMPONENTS = {
    'active_account': ActiveAccount,
    'spending_limit': SpendingLimit,
    'saving_goal': SavingGoal,
}


def _check_user_conflicts(username: Optional[str], email: Optional[str], exclude: Optional[UUID] = None) -> None:
    others = User.objects.all()
    if exclude is not None:
        others = others.exclude(pk=exclude)
    if username is not None and others.filter(username=username).exists():
        raise ConflictError(DUPLICATE_USERNAME_MESSAGE)
    if email is not None and others.filter(email__iexact=email).exists():
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE)


def register_user(username: str, email: str, password: str) -> User:
    """
    Create a user together with its main account.

    Both rows are written in one unit of work; a user never exists without
    its main account.

    Raises:
        ConflictError: username or email already taken
    """
    _check_user_conflicts(username, email)

    with unit_of_work('User registration', conflict_message=DUPLICATE_USER_MESSAGE):
        user = User.objects.create_user(username=username, email=email, password=password)
        account = Account.objects.create(user=user, is_main=True)
        CoreDetails.objects.create(account=account, name=MAIN_ACCOUNT_NAME, balance=Decimal('0.00'))

    logger.info("User %s registered with main account %s", user.pk, account.pk)
    return user


def update_user(user_id: UUID, username: Optional[str] = None, email: Optional[str] = None) -> User:
    user = selectors.get_user(user_id)
    if user is None:
        raise NotFoundError(user_not_found())

    _check_user_conflicts(username, email, exclude=user.pk)

    with unit_of_work('User update', conflict_message=DUPLICATE_USER_MESSAGE):
        if username is not None:
            user.username = username
        if email is not None:
            user.email = email
        user.save(update_fields=['username', 'email', 'updated_at'])
    return user


def _save_component(account: Account, accessor: str, values: dict) -> None:
    """Create or update an optional component, reviving a soft-deleted one."""
    model = OPTIONAL_COMPONENTS[accessor]
    defaults = dict(values)
    if model.deletion_policy is DeletionPolicy.SOFT:
        defaults.update(is_deleted=False, deleted_at=None)
    model.objects.update_or_create(account=account, defaults=defaults)


def _retire_component(account: Account, accessor: str, when: datetime) -> None:
    component = account.get_component(accessor)
    if component is not None:
        component.retire(when)


def _retire_account(account: Account, when: datetime) -> None:
    """Retire every component by its policy, then soft-delete the account."""
    for accessor in Account.COMPONENTS:
        _retire_component(account, accessor, when)
    account.mark_deleted(when)
    account.save(update_fields=['is_deleted', 'deleted_at', 'updated_at'])


def _lock_account(account_id: UUID) -> Account:
    account = (
        Account.objects.select_for_update()
        .filter(pk=account_id, is_deleted=False)
        .first()
    )
    if account is None:
        raise NotFoundError(account_not_found())
    return account


def _lock_active_accounts(user: User) -> list:
    return list(
        Account.objects.select_for_update()
        .filter(user=user, is_deleted=False)
        .order_by('pk')
    )


def create_account(
    user_id: UUID,
    core_details: dict,
    is_main: bool = False,
    active_account: Optional[dict] = None,
    spending_limit: Optional[dict] = None,
    saving_goal: Optional[dict] = None,
) -> Account:
    """
    Create an account with its core details and any optional components.

    Raises:
        NotFoundError: owning user missing or deleted (answered with 400)
        ValidationError: negative initial balance
        InvariantViolationError: the user already has a main account
    """
    user = selectors.get_user(user_id)
    if user is None:
        raise NotFoundError(user_not_found(), status_code=status.HTTP_400_BAD_REQUEST)

    balance = core_details.get('balance') or Decimal('0.00')
    if balance < 0:
        raise ValidationError("Initial balance cannot be negative", field='balance')

    with unit_of_work('Account creation', conflict_message=duplicate_main_account()):
        if is_main and Account.objects.filter(user=user, is_main=True).exists():
            raise InvariantViolationError(duplicate_main_account())

        account = Account.objects.create(user=user, is_main=is_main)
        CoreDetails.objects.create(account=account, name=core_details['name'], balance=balance)
        for accessor, values in (
            ('active_account', active_account),
            ('spending_limit', spending_limit),
            ('saving_goal', saving_goal),
        ):
            if values is not None:
                _save_component(account, accessor, values)

    logger.info("Account %s created for user %s", account.pk, user.pk)
    return selectors.get_account(account.pk)


def update_account(account_id: UUID, changes: dict) -> Account:
    """
    Apply a partial update to a non-main account.

    ``changes`` maps ``is_main``, ``core_details`` and the optional component
    names to their new values. A component key mapped to None removes that
    component; an absent key leaves it alone. Balances can never be set here.

    Raises:
        NotFoundError: account missing or deleted
        InvariantViolationError: main account, balance edit, duplicate main
    """
    core_changes = changes.get('core_details') or {}
    if 'balance' in changes or 'balance' in core_changes:
        raise InvariantViolationError(
            "Account balance cannot be modified directly. Use transactions to change balances."
        )

    with unit_of_work('Account update', conflict_message=duplicate_main_account()):
        account = _lock_account(account_id)
        if account.is_main:
            raise InvariantViolationError("Main accounts cannot be modified.")

        if changes.get('is_main'):
            if Account.objects.filter(user_id=account.user_id, is_main=True).exists():
                raise InvariantViolationError(duplicate_main_account())
            account.is_main = True

        if 'name' in core_changes:
            core = account.get_component('core_details')
            if core is None:
                raise NotFoundError(account_not_found())
            core.name = core_changes['name']
            core.save(update_fields=['name', 'updated_at'])

        now = timezone.now()
        for accessor in OPTIONAL_COMPONENTS:
            if accessor not in changes:
                continue
            if changes[accessor] is None:
                _retire_component(account, accessor, now)
            else:
                _save_component(account, accessor, changes[accessor])

        account.save(update_fields=['is_main', 'updated_at'])

    return selectors.get_account(account.pk)


def delete_account(account_id: UUID) -> None:
    """
    Soft-delete a non-main account whose balance is zero.

    Raises:
        NotFoundError: account missing or already deleted
        InvariantViolationError: main account, or balance not zero
    """
    with unit_of_work('Account deletion'):
        account = _lock_account(account_id)
        if account.is_main:
            raise InvariantViolationError("Main accounts cannot be deleted.")

        balance = account.balance or Decimal('0.00')
        if balance != 0:
            raise InvariantViolationError(
                f"Cannot delete account with non-zero balance. Current balance: ${balance:.2f}"
            )
        _retire_account(account, timezone.now())

    logger.info("Account %s deleted", account_id)


def delete_all_accounts_for_user(user: User, when: Optional[datetime] = None) -> int:
    """
    Retire every active account of ``user``, main account included.

    Joins the caller's atomic block when there is one.

    Returns:
        Number of accounts deleted
    """
    when = when or timezone.now()
    with transaction.atomic():
        accounts = _lock_active_accounts(user)
        if not accounts:
            raise InvariantViolationError("User has no active accounts to delete.")
        for account in accounts:
            _retire_account(account, when)
    return len(accounts)


def delete_user(user_id: UUID) -> None:
    """
    Soft-delete a user and all of its accounts.

    Raises:
        NotFoundError: user missing or already deleted
        InvariantViolationError: no active accounts, or money left in them
    """
    with unit_of_work('User deletion'):
        user = User.objects.select_for_update().filter(pk=user_id, is_deleted=False).first()
        if user is None:
            raise NotFoundError(user_not_found())

        accounts = _lock_active_accounts(user)
        if not accounts:
            raise InvariantViolationError("User has no active accounts to delete.")
        total = sum((account.balance or Decimal('0.00') for account in accounts), Decimal('0.00'))
        if total != 0:
            raise InvariantViolationError(
                f"Cannot delete user with outstanding balance. Total balance: ${total:.2f}"
            )

        now = timezone.now()
        count = delete_all_accounts_for_user(user, now)
        user.mark_deleted(now)
        user.is_active = False
        user.save(update_fields=['is_deleted', 'deleted_at', 'is_active', 'updated_at'])

    logger.info("User %s deleted along with %d accounts", user_id, count)


def user_total_balance(user_id: UUID) -> dict:
    """Sum the balances of the user's active accounts."""
    user = selectors.get_user(user_id)
    if user is None:
        raise NotFoundError(user_not_found())

    accounts = list(selectors.accounts_for_user(user.pk))
    total = sum((account.balance or Decimal('0.00') for account in accounts), Decimal('0.00'))
    return {
        'user_id': user.pk,
        'total_balance': total,
        'account_count': len(accounts),
        'active_account_count': sum(
            1 for account in accounts if account.get_component('active_account') is not None
        ),
    }
