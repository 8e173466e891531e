"""
Data models for the Wallet app.

This module contains:
- User: wallet holder, soft-deletable
- Account: container owned by a user, with optional 1:1 components
- CoreDetails / ActiveAccount / SpendingLimit / SavingGoal: account components
- Transaction: immutable audit record of one money movement
- UserSettings: per-user JSON settings
"""

import calendar
import enum
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.contrib.auth.models import AbstractUser, UserManager
from django.core.exceptions import ObjectDoesNotExist
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

MONEY_MAX_DIGITS = 18
MONEY_DECIMAL_PLACES = 2


class DeletionPolicy(enum.Enum):
    """How a row is retired when its owner goes away."""

    SOFT = 'soft'
    HARD = 'hard'


class SoftDeleteFields(models.Model):
    """Flag and timestamp marking a row inactive instead of removing it."""

    is_deleted = models.BooleanField(
        default=False,
        help_text='Whether the row has been soft-deleted'
    )
    deleted_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text='When the row was soft-deleted'
    )

    class Meta:
        abstract = True

    def mark_deleted(self, when: Optional[datetime] = None) -> None:
        """Flag the row as deleted. Caller saves."""
        self.is_deleted = True
        self.deleted_at = when or timezone.now()


class User(AbstractUser, SoftDeleteFields):
    """
    Wallet holder.

    Always paired with exactly one main Account, created at registration.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(
        unique=True,
        max_length=255,
        help_text='Unique email address'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    class Meta:
        """User model metadata."""

        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['created_at']

    def __str__(self) -> str:
        """Return string representation of the user."""
        return self.username


class Account(SoftDeleteFields):
    """
    Account owned by a single user.

    The balance lives in the mandatory CoreDetails component; the other
    components are optional capabilities.
    """

    COMPONENTS = ('core_details', 'active_account', 'spending_limit', 'saving_goal')

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='accounts',
        help_text='The user who owns this account'
    )
    is_main = models.BooleanField(
        default=False,
        help_text='Main accounts cannot be edited or deleted'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Account model metadata."""

        verbose_name = 'Account'
        verbose_name_plural = 'Accounts'
        ordering = ['created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['user'],
                condition=models.Q(is_main=True),
                name='unique_main_account_per_user',
            ),
        ]
        indexes = [
            models.Index(fields=['user', 'is_deleted'], name='account_user_deleted_idx'),
        ]

    def __str__(self) -> str:
        """Return string representation of the account."""
        core = self.get_component('core_details')
        name = core.name if core else 'unconfigured'
        return f"Account({name}: {self.id})"

    def get_component(self, accessor: str):
        """Return the named component, or None if missing or soft-deleted."""
        try:
            component = getattr(self, accessor)
        except ObjectDoesNotExist:
            return None
        if getattr(component, 'is_deleted', False):
            return None
        return component

    @property
    def balance(self) -> Optional[Decimal]:
        """Current balance, or None when core details are not configured."""
        core = self.get_component('core_details')
        return core.balance if core else None


class AccountComponent(models.Model):
    """Common fields for the 1:1 account components."""

    deletion_policy = DeletionPolicy.HARD

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def retire(self, when: Optional[datetime] = None) -> None:
        """Remove the component according to its deletion policy."""
        if self.deletion_policy is DeletionPolicy.SOFT:
            self.mark_deleted(when)
            self.save(update_fields=['is_deleted', 'deleted_at', 'updated_at'])
        else:
            self.delete()


class CoreDetails(AccountComponent, SoftDeleteFields):
    """Display name and authoritative balance of an account."""

    deletion_policy = DeletionPolicy.SOFT

    account = models.OneToOneField(
        Account,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name='core_details'
    )
    name = models.CharField(max_length=100)
    balance = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text='Current balance (must be >= 0.00)'
    )

    class Meta:
        """CoreDetails model metadata."""

        verbose_name = 'Core details'
        verbose_name_plural = 'Core details'
        constraints = [
            models.CheckConstraint(
                condition=models.Q(balance__gte=0),
                name='core_details_balance_non_negative',
            ),
        ]

    def __str__(self) -> str:
        """Return string representation of the core details."""
        return f"CoreDetails({self.name}: ${self.balance})"


class ActiveAccount(AccountComponent, SoftDeleteFields):
    """External-facing IBAN identifier of an account."""

    deletion_policy = DeletionPolicy.SOFT

    account = models.OneToOneField(
        Account,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name='active_account'
    )
    iban = models.CharField(max_length=34)
    activated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        """ActiveAccount model metadata."""

        verbose_name = 'Active account'
        verbose_name_plural = 'Active accounts'

    def __str__(self) -> str:
        """Return string representation of the active account."""
        return f"ActiveAccount({self.iban})"


class LimitTimeframe(models.IntegerChoices):
    DAILY = 0, 'Daily'
    WEEKLY = 1, 'Weekly'
    MONTHLY = 2, 'Monthly'
    YEARLY = 3, 'Yearly'


def _add_months(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def period_boundary(anchor: datetime, timeframe: int, periods: int) -> datetime:
    """Return the start of the period ``periods`` steps after ``anchor``."""
    if timeframe == LimitTimeframe.DAILY:
        return anchor + timedelta(days=periods)
    if timeframe == LimitTimeframe.WEEKLY:
        return anchor + timedelta(weeks=periods)
    if timeframe == LimitTimeframe.MONTHLY:
        return _add_months(anchor, periods)
    return _add_months(anchor, 12 * periods)


class SpendingLimit(AccountComponent):
    """Periodic cap on outgoing money for an account."""

    account = models.OneToOneField(
        Account,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name='spending_limit'
    )
    limit_amount = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    timeframe = models.PositiveSmallIntegerField(choices=LimitTimeframe.choices)
    current_spending = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    period_start_date = models.DateTimeField(default=timezone.now)

    class Meta:
        """SpendingLimit model metadata."""

        verbose_name = 'Spending limit'
        verbose_name_plural = 'Spending limits'

    def __str__(self) -> str:
        """Return string representation of the spending limit."""
        return (
            f"SpendingLimit(${self.current_spending}/${self.limit_amount} "
            f"{self.get_timeframe_display()})"
        )

    @property
    def period_end_date(self) -> datetime:
        return period_boundary(self.period_start_date, self.timeframe, 1)

    @property
    def remaining(self) -> Decimal:
        return max(self.limit_amount - self.current_spending, Decimal('0.00'))

    def roll_period(self, now: Optional[datetime] = None) -> bool:
        """
        Advance to the period containing ``now`` and reset the accumulator.

        Returns True if the period changed. Caller saves.
        """
        now = now or timezone.now()
        if now < self.period_end_date:
            return False

        anchor = self.period_start_date
        periods = 1
        while period_boundary(anchor, self.timeframe, periods + 1) <= now:
            periods += 1

        self.period_start_date = period_boundary(anchor, self.timeframe, periods)
        self.current_spending = Decimal('0.00')
        return True


class SavingGoal(AccountComponent):
    """Informational saving target for an account."""

    account = models.OneToOneField(
        Account,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name='saving_goal'
    )
    goal_name = models.CharField(max_length=200)
    target_amount = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    class Meta:
        """SavingGoal model metadata."""

        verbose_name = 'Saving goal'
        verbose_name_plural = 'Saving goals'

    def __str__(self) -> str:
        """Return string representation of the saving goal."""
        return f"SavingGoal({self.goal_name}: ${self.target_amount})"


class SourceType(models.IntegerChoices):
    ACCOUNT = 0, 'Account'
    IBAN = 1, 'IBAN'
    SYSTEM = 2, 'System'


class DestinationType(models.IntegerChoices):
    ACCOUNT = 0, 'Account'
    IBAN = 1, 'IBAN'
    SPEND = 2, 'Spend'


class Transaction(SoftDeleteFields):
    """
    Immutable audit record of one money movement.

    Balances before the movement are snapshotted for internal sides, so each
    record is auditable without replaying history. Accounts referenced here
    cannot be removed (PROTECT).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    source_type = models.PositiveSmallIntegerField(choices=SourceType.choices)
    source_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='source_transactions',
        help_text='Internal account the money left'
    )
    source_iban = models.CharField(max_length=34, null=True, blank=True)
    source_name = models.CharField(max_length=255, null=True, blank=True)

    destination_type = models.PositiveSmallIntegerField(choices=DestinationType.choices)
    destination_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='destination_transactions',
        help_text='Internal account the money entered'
    )
    destination_iban = models.CharField(max_length=34, null=True, blank=True)
    destination_name = models.CharField(max_length=255, null=True, blank=True)

    amount = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        validators=[MinValueValidator(Decimal('0.01'))],
        help_text='Amount moved'
    )
    description = models.CharField(max_length=500)
    timestamp = models.DateTimeField(
        default=timezone.now,
        help_text='Logical time of the movement'
    )
    source_account_balance_before = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        null=True,
        blank=True
    )
    destination_account_balance_before = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        null=True,
        blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Transaction model metadata."""

        verbose_name = 'Transaction'
        verbose_name_plural = 'Transactions'
        ordering = ['-timestamp', '-created_at']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name='transaction_amount_positive',
            ),
        ]
        indexes = [
            models.Index(fields=['source_account', 'timestamp'], name='tx_source_time_idx'),
            models.Index(fields=['destination_account', 'timestamp'], name='tx_destination_time_idx'),
            models.Index(fields=['timestamp'], name='tx_timestamp_idx'),
        ]

    def __str__(self) -> str:
        """Return string representation of the transaction."""
        return (
            f"Transaction #{self.id}: "
            f"{self.get_source_type_display()} -> {self.get_destination_type_display()} "
            f"${self.amount} @ {self.timestamp}"
        )


class UserSettings(models.Model):
    """Free-form JSON settings of a user (timezone, display preferences)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='wallet_settings'
    )
    values = models.JSONField(default=dict, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """UserSettings model metadata."""

        verbose_name = 'User settings'
        verbose_name_plural = 'User settings'

    def __str__(self) -> str:
        """Return string representation of the settings row."""
        return f"UserSettings({self.user_id})"
