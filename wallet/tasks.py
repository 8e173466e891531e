"""
Celery tasks for the Wallet app.

This module contains periodic housekeeping scheduled by Celery beat.
"""

import logging

from celery import shared_task
from django.db import transaction
from django.utils import timezone

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def reset_expired_spending_limits(self) -> int:
    """
    Roll every spending limit whose period has ended into the current period.

    Each limit is rolled under a lock on its account row, the same lock the
    transaction executor takes before debiting, so a debit racing with the
    reset is either counted in the new period or in the old one, never lost.

    Returns:
        Number of limits that were reset.
    """
    # Import here to avoid circular imports
    from wallet.models import Account, SpendingLimit

    now = timezone.now()
    reset = 0

    for account_id in SpendingLimit.objects.values_list('account_id', flat=True).order_by('account_id'):
        with transaction.atomic():
            if Account.objects.select_for_update().filter(pk=account_id).first() is None:
                continue
            limit = SpendingLimit.objects.filter(pk=account_id).first()
            # Removed while we were waiting for the lock
            if limit is None:
                continue
            if limit.roll_period(now):
                limit.save(update_fields=['current_spending', 'period_start_date', 'updated_at'])
                reset += 1

    logger.info("Reset %d expired spending limits", reset)
    return reset
