"""
Administrative reset and status of the ledger tables.
"""

import logging

from django.db.models import Q

from wallet.models import (
    Account,
    ActiveAccount,
    CoreDetails,
    SavingGoal,
    SpendingLimit,
    Transaction,
    User,
    UserSettings,
)

from .atomic import unit_of_work

logger = logging.getLogger(__name__)

# Children before parents; accounts and users are PROTECTed by transactions.
DELETION_ORDER = (
    Transaction,
    CoreDetails,
    ActiveAccount,
    SpendingLimit,
    SavingGoal,
    UserSettings,
    Account,
)


def reset_database() -> dict:
    """
    Hard-delete every ledger row, soft-deleted ones included.

    Staff and superuser logins are kept so the site stays administrable.

    Returns:
        Number of rows removed per model label
    """
    removed = {}
    with unit_of_work('Database reset'):
        for model in DELETION_ORDER:
            removed[model._meta.label] = model.objects.all().delete()[0]
        removed[User._meta.label] = (
            User.objects.exclude(Q(is_staff=True) | Q(is_superuser=True)).delete()[0]
        )

    logger.warning("Database reset: %s", removed)
    return removed


def database_status() -> dict:
    return {
        'users': User.objects.count(),
        'accounts': Account.objects.count(),
        'transactions': Transaction.objects.count(),
        'components': {
            'core_details': CoreDetails.objects.count(),
            'active_accounts': ActiveAccount.objects.count(),
            'spending_limits': SpendingLimit.objects.count(),
            'saving_goals': SavingGoal.objects.count(),
        },
    }
