"""
Admin configuration for the Wallet app.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import (
    Account,
    ActiveAccount,
    CoreDetails,
    SavingGoal,
    SpendingLimit,
    Transaction,
    User,
    UserSettings,
)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin configuration for User model."""

    list_display = ('username', 'email', 'is_staff', 'is_deleted', 'created_at')
    list_filter = BaseUserAdmin.list_filter + ('is_deleted',)
    readonly_fields = ('created_at', 'updated_at', 'deleted_at')
    ordering = ('-created_at',)


class CoreDetailsInline(admin.StackedInline):
    model = CoreDetails
    # Balances only change through transactions
    readonly_fields = ('balance', 'created_at', 'updated_at')
    can_delete = False


class ActiveAccountInline(admin.StackedInline):
    model = ActiveAccount
    can_delete = False


class SpendingLimitInline(admin.StackedInline):
    model = SpendingLimit
    readonly_fields = ('current_spending',)


class SavingGoalInline(admin.StackedInline):
    model = SavingGoal


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    """Admin configuration for Account model."""

    list_display = ('id', 'user', 'is_main', 'balance', 'is_deleted', 'created_at')
    list_filter = ('is_main', 'is_deleted', 'created_at')
    search_fields = ('user__username', 'user__email', 'core_details__name')
    readonly_fields = ('created_at', 'updated_at', 'deleted_at')
    list_select_related = ('user', 'core_details')
    inlines = [CoreDetailsInline, ActiveAccountInline, SpendingLimitInline, SavingGoalInline]
    ordering = ('-created_at',)

    def has_delete_permission(self, request, obj=None):
        """Accounts are retired through the API, which checks balances."""
        return False


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """Admin configuration for Transaction model."""

    list_display = (
        'id', 'source_type', 'source_account', 'destination_type',
        'destination_account', 'amount', 'timestamp', 'is_deleted',
    )
    list_filter = ('source_type', 'destination_type', 'is_deleted', 'timestamp')
    search_fields = ('description', 'source_iban', 'destination_iban', 'source_name', 'destination_name')
    ordering = ('-timestamp',)

    def has_add_permission(self, request):
        """Transactions should only be created through the API."""
        return False

    def has_change_permission(self, request, obj=None):
        """Transactions are immutable."""
        return False

    def has_delete_permission(self, request, obj=None):
        """Transactions cannot be deleted."""
        return False


@admin.register(UserSettings)
class UserSettingsAdmin(admin.ModelAdmin):
    list_display = ('user', 'updated_at')
    search_fields = ('user__username',)
