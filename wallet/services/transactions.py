"""
Transaction execution.

The executor is the only code path that changes an account balance.
"""

import logging
from decimal import Decimal
from uuid import UUID

from django.utils import timezone

from wallet import selectors
from wallet.exceptions import NotFoundError, PersistenceError, WalletError
from wallet.models import Account, Transaction

from .atomic import unit_of_work
from .validation import (
    TransactionRequest,
    load_accounts,
    resolve,
    spending_limits_enforced,
    validate_structure,
)

logger = logging.getLogger(__name__)


def _move_balance(account: Account, delta: Decimal) -> Decimal:
    """Apply ``delta`` to the account balance and return the balance before."""
    core = account.core_details
    before = core.balance
    core.balance = before + delta
    core.save(update_fields=['balance', 'updated_at'])
    account.save(update_fields=['updated_at'])
    return before


def _accumulate_spending(account: Account, amount: Decimal, now) -> None:
    limit = account.get_component('spending_limit')
    if limit is None:
        return
    limit.roll_period(now)
    limit.current_spending += amount
    limit.save(update_fields=['current_spending', 'period_start_date', 'updated_at'])


def execute_transaction(request: TransactionRequest) -> Transaction:
    """
    Validate and apply one money movement as a single unit of work.

    Referenced accounts are locked in primary-key order before their balances
    are read, so the checks and the mutation see the same values.

    Args:
        request: The proposed movement

    Returns:
        The persisted Transaction record

    Raises:
        ValidationError, NotFoundError, InsufficientFundsError,
        InvariantViolationError: request rejected, nothing written
        PersistenceError: storage failure, everything rolled back
    """
    request = validate_structure(request)
    now = timezone.now()

    try:
        with unit_of_work('Transaction'):
            accounts = load_accounts(request.account_ids, for_update=True)
            resolved = resolve(request, accounts)
            source = resolved.source_account
            destination = resolved.destination_account

            source_before = None
            destination_before = None
            if source is not None:
                source_before = _move_balance(source, -request.amount)
                if spending_limits_enforced():
                    _accumulate_spending(source, request.amount, now)
            if destination is not None:
                destination_before = _move_balance(destination, request.amount)

            record = Transaction.objects.create(
                source_type=request.source_type,
                source_account=source,
                source_iban=request.source_iban,
                source_name=request.source_name,
                destination_type=request.destination_type,
                destination_account=destination,
                destination_iban=request.destination_iban,
                destination_name=request.destination_name,
                amount=request.amount,
                description=request.description,
                timestamp=request.timestamp or now,
                source_account_balance_before=source_before,
                destination_account_balance_before=destination_before,
            )
    except PersistenceError:
        raise
    except WalletError as exc:
        logger.info("Transaction rejected: %s", exc)
        raise

    logger.info(
        "Transaction %s committed: %s %s -> %s",
        record.id,
        record.amount,
        record.get_source_type_display(),
        record.get_destination_type_display(),
    )
    return record


def soft_delete_transaction(transaction_id: UUID) -> Transaction:
    """Flag a transaction record as deleted. Balances are not touched."""
    record = selectors.get_transaction(transaction_id)
    if record is None:
        raise NotFoundError("Transaction not found or has been deleted")

    record.mark_deleted()
    record.save(update_fields=['is_deleted', 'deleted_at', 'updated_at'])
    logger.info("Transaction %s soft-deleted", record.id)
    return record
