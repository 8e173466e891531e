"""
DRF Serializers for the Wallet app.

JSON field names are camelCase and map onto the snake_case model attributes
through ``source``.
"""

from django.contrib.auth import password_validation
from rest_framework import serializers

from .exceptions import ValidationError as WalletValidationError
from .models import (
    MONEY_DECIMAL_PLACES,
    MONEY_MAX_DIGITS,
    DestinationType,
    LimitTimeframe,
    SourceType,
    Transaction,
    User,
)
from .services.user_settings import to_user_timezone
from .services.validation import TransactionRequest, check_fields


def money(**kwargs):
    """Decimal field with the ledger's precision."""
    return serializers.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        **kwargs
    )


# Transactions

class TransactionCreateSerializer(serializers.Serializer):
    """
    Serializer for the transaction endpoint.

    Validates field shapes per source/destination type; existence, funds and
    limits are checked by the executor under row locks.
    """

    sourceType = serializers.ChoiceField(choices=SourceType.choices, source='source_type')
    sourceAccountId = serializers.UUIDField(
        required=False, allow_null=True, source='source_account_id'
    )
    sourceIban = serializers.CharField(
        required=False, allow_null=True, allow_blank=True, max_length=34, source='source_iban'
    )
    sourceName = serializers.CharField(
        required=False, allow_null=True, allow_blank=True, max_length=255, source='source_name'
    )
    destinationType = serializers.ChoiceField(
        choices=DestinationType.choices, source='destination_type'
    )
    destinationAccountId = serializers.UUIDField(
        required=False, allow_null=True, source='destination_account_id'
    )
    destinationIban = serializers.CharField(
        required=False, allow_null=True, allow_blank=True, max_length=34, source='destination_iban'
    )
    destinationName = serializers.CharField(
        required=False, allow_null=True, allow_blank=True, max_length=255, source='destination_name'
    )
    amount = money(help_text='Amount to move (must be > 0)')
    description = serializers.CharField(max_length=500)
    timestamp = serializers.DateTimeField(required=False, allow_null=True)

    def validate(self, attrs):
        try:
            check_fields(TransactionRequest.from_data(attrs))
        except WalletValidationError as exc:
            raise serializers.ValidationError({exc.field or 'non_field_errors': [str(exc)]})
        return attrs

    def to_request(self) -> TransactionRequest:
        return TransactionRequest.from_data(self.validated_data)


class TransactionSerializer(serializers.ModelSerializer):
    """
    Serializer for transaction records.

    When the context carries a ``tzinfo`` the representation also includes
    ``localTimestamp``.
    """

    sourceType = serializers.IntegerField(source='source_type')
    sourceAccountId = serializers.UUIDField(source='source_account_id', allow_null=True)
    sourceIban = serializers.CharField(source='source_iban', allow_null=True)
    sourceName = serializers.CharField(source='source_name', allow_null=True)
    destinationType = serializers.IntegerField(source='destination_type')
    destinationAccountId = serializers.UUIDField(source='destination_account_id', allow_null=True)
    destinationIban = serializers.CharField(source='destination_iban', allow_null=True)
    destinationName = serializers.CharField(source='destination_name', allow_null=True)
    sourceAccountBalanceBefore = money(source='source_account_balance_before', allow_null=True)
    destinationAccountBalanceBefore = money(
        source='destination_account_balance_before', allow_null=True
    )
    isDeleted = serializers.BooleanField(source='is_deleted')
    deletedAt = serializers.DateTimeField(source='deleted_at', allow_null=True)
    createdAt = serializers.DateTimeField(source='created_at')
    updatedAt = serializers.DateTimeField(source='updated_at')

    class Meta:
        model = Transaction
        fields = [
            'id', 'sourceType', 'sourceAccountId', 'sourceIban', 'sourceName',
            'destinationType', 'destinationAccountId', 'destinationIban', 'destinationName',
            'amount', 'description', 'timestamp',
            'sourceAccountBalanceBefore', 'destinationAccountBalanceBefore',
            'isDeleted', 'deletedAt', 'createdAt', 'updatedAt',
        ]
        read_only_fields = fields

    def to_representation(self, instance):
        data = super().to_representation(instance)
        zone = self.context.get('tzinfo')
        if zone is not None:
            data['localTimestamp'] = to_user_timezone(instance.timestamp, zone).isoformat()
        return data


# Accounts

class CoreDetailsSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    balance = money(required=False)


class CoreDetailsUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False)
    balance = money(required=False)


class ActiveAccountSerializer(serializers.Serializer):
    iban = serializers.CharField(max_length=34)
    activatedAt = serializers.DateTimeField(source='activated_at', required=False)


class SpendingLimitSerializer(serializers.Serializer):
    limitAmount = money(source='limit_amount', min_value=0)
    timeframe = serializers.ChoiceField(choices=LimitTimeframe.choices)
    currentSpending = money(source='current_spending', min_value=0, required=False)
    periodStartDate = serializers.DateTimeField(source='period_start_date', required=False)
    periodEndDate = serializers.DateTimeField(source='period_end_date', read_only=True)
    remaining = money(read_only=True)


class SavingGoalSerializer(serializers.Serializer):
    goalName = serializers.CharField(source='goal_name', max_length=200)
    targetAmount = money(source='target_amount', min_value=0)


class AccountSerializer(serializers.Serializer):
    """Serializer for account responses; retired components render as null."""

    id = serializers.UUIDField()
    userId = serializers.UUIDField(source='user_id')
    isMain = serializers.BooleanField(source='is_main')
    coreDetails = serializers.SerializerMethodField(method_name='get_core_details')
    activeAccount = serializers.SerializerMethodField(method_name='get_active_account')
    spendingLimit = serializers.SerializerMethodField(method_name='get_spending_limit')
    savingGoal = serializers.SerializerMethodField(method_name='get_saving_goal')
    isDeleted = serializers.BooleanField(source='is_deleted')
    deletedAt = serializers.DateTimeField(source='deleted_at', allow_null=True)
    createdAt = serializers.DateTimeField(source='created_at')
    updatedAt = serializers.DateTimeField(source='updated_at')

    def _component(self, account, accessor, serializer_class):
        component = account.get_component(accessor)
        if component is None:
            return None
        return serializer_class(component).data

    def get_core_details(self, account):
        return self._component(account, 'core_details', CoreDetailsSerializer)

    def get_active_account(self, account):
        return self._component(account, 'active_account', ActiveAccountSerializer)

    def get_spending_limit(self, account):
        return self._component(account, 'spending_limit', SpendingLimitSerializer)

    def get_saving_goal(self, account):
        return self._component(account, 'saving_goal', SavingGoalSerializer)


class AccountCreateSerializer(serializers.Serializer):
    userId = serializers.UUIDField(source='user_id')
    isMain = serializers.BooleanField(source='is_main', default=False)
    coreDetails = CoreDetailsSerializer(source='core_details')
    activeAccount = ActiveAccountSerializer(source='active_account', required=False, allow_null=True)
    spendingLimit = SpendingLimitSerializer(source='spending_limit', required=False, allow_null=True)
    savingGoal = SavingGoalSerializer(source='saving_goal', required=False, allow_null=True)


class AccountUpdateSerializer(serializers.Serializer):
    """
    Partial account update.

    An optional component sent as null is removed; an omitted one is kept.
    ``balance`` is accepted here only so the update can be refused with a
    clear message.
    """

    isMain = serializers.BooleanField(source='is_main', required=False)
    balance = money(required=False)
    coreDetails = CoreDetailsUpdateSerializer(source='core_details', required=False)
    activeAccount = ActiveAccountSerializer(source='active_account', required=False, allow_null=True)
    spendingLimit = SpendingLimitSerializer(source='spending_limit', required=False, allow_null=True)
    savingGoal = SavingGoalSerializer(source='saving_goal', required=False, allow_null=True)


# Users

class UserSerializer(serializers.ModelSerializer):
    isDeleted = serializers.BooleanField(source='is_deleted', read_only=True)
    deletedAt = serializers.DateTimeField(source='deleted_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'isDeleted', 'deletedAt', 'createdAt', 'updatedAt']
        read_only_fields = fields


class UserCreateSerializer(serializers.Serializer):
    """
    Serializer for user registration.

    Validates:
    - username: at most 64 characters
    - email: valid address, at most 255 characters
    - password: at least 6 characters
    """

    username = serializers.CharField(max_length=64)
    email = serializers.EmailField(max_length=255)
    password = serializers.CharField(min_length=6, write_only=True)

    def validate_password(self, value):
        password_validation.validate_password(value)
        return value


class UserUpdateSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=64, required=False)
    email = serializers.EmailField(max_length=255, required=False)


class UserTotalBalanceSerializer(serializers.Serializer):
    userId = serializers.UUIDField(source='user_id')
    totalBalance = money(source='total_balance')
    accountCount = serializers.IntegerField(source='account_count')
    activeAccountCount = serializers.IntegerField(source='active_account_count')


# Settings

class SettingsSerializer(serializers.Serializer):
    settings = serializers.DictField()


class SettingSerializer(serializers.Serializer):
    key = serializers.CharField(max_length=100)
    value = serializers.JSONField()


class TimezoneSerializer(serializers.Serializer):
    timezone = serializers.CharField(max_length=64)
