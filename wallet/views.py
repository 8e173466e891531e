"""
API Views for the Wallet app.

Views translate HTTP to service calls and back. Every balance-affecting
operation is delegated to ``wallet.services``, which raises ``WalletError``
subclasses carrying the status code to answer with.
"""

from rest_framework import status
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from . import selectors
from .exceptions import NotFoundError, WalletError, account_not_found, user_not_found
from .pagination import SkipLimitPagination, include_deleted
from .serializers import (
    AccountCreateSerializer,
    AccountSerializer,
    AccountUpdateSerializer,
    SettingSerializer,
    SettingsSerializer,
    TimezoneSerializer,
    TransactionCreateSerializer,
    TransactionSerializer,
    UserCreateSerializer,
    UserSerializer,
    UserTotalBalanceSerializer,
    UserUpdateSerializer,
)
from .services import database, lifecycle, user_settings
from .services.transactions import execute_transaction, soft_delete_transaction


def error_response(exc: WalletError) -> Response:
    """Render a domain error with the status it carries."""
    return Response({'error': str(exc)}, status=exc.status_code)


def invalid_response(serializer) -> Response:
    return Response({'error': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)


def paginated(view, request, queryset, serializer_class, context=None) -> Response:
    paginator = SkipLimitPagination()
    page = paginator.paginate_queryset(queryset, request, view=view)
    serializer = serializer_class(page, many=True, context=context or {})
    return paginator.get_paginated_response(serializer.data)


def transaction_context(request) -> dict:
    """Serializer context rendering timestamps in the caller's timezone."""
    if not request.user.is_authenticated:
        return {}
    return {'tzinfo': user_settings.get_timezone_info(request.user)}


# Transactions

class TransactionListView(APIView):
    """
    GET  /api/transaction
    POST /api/transaction

    POST validates and applies one money movement atomically.

    Request body:
        - sourceType (int): 0 ACCOUNT, 1 IBAN, 2 SYSTEM
        - destinationType (int): 0 ACCOUNT, 1 IBAN, 2 SPEND
        - sourceAccountId / sourceIban / sourceName: per source type
        - destinationAccountId / destinationIban / destinationName: per destination type
        - amount (decimal): must be > 0, at most 2 decimal places
        - description (str): at most 500 characters
        - timestamp (datetime, optional): defaults to now

    Returns:
        - 200: Transaction recorded, with balances before the movement
        - 400: Validation error, unknown account, insufficient funds, limit exceeded
        - 500: Storage failure; nothing was written
    """

    def get(self, request):
        """Return transactions, newest first."""
        queryset = selectors.transactions(include_deleted(request))
        return paginated(self, request, queryset, TransactionSerializer, transaction_context(request))

    def post(self, request):
        """Handle transaction request."""
        serializer = TransactionCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_response(serializer)

        try:
            record = execute_transaction(serializer.to_request())
        except WalletError as e:
            return error_response(e)

        return Response(
            TransactionSerializer(record, context=transaction_context(request)).data,
            status=status.HTTP_200_OK
        )


class TransactionDetailView(APIView):
    """
    GET    /api/transaction/<id>
    DELETE /api/transaction/<id>

    DELETE only flags the record; balances are left as they are.
    """

    def get(self, request, transaction_id):
        record = selectors.get_transaction(transaction_id, include_deleted(request))
        if record is None:
            return error_response(NotFoundError("Transaction not found"))
        return Response(TransactionSerializer(record, context=transaction_context(request)).data)

    def delete(self, request, transaction_id):
        try:
            soft_delete_transaction(transaction_id)
        except WalletError as e:
            return error_response(e)
        return Response({'message': 'Transaction deleted successfully.'})


class AccountTransactionListView(APIView):
    """
    GET /api/transaction/account/<account_id>

    Transactions where the account is the source or the destination.
    """

    def get(self, request, account_id):
        queryset = selectors.transactions_for_account(account_id, include_deleted(request))
        return paginated(self, request, queryset, TransactionSerializer, transaction_context(request))


# Accounts

class AccountListView(APIView):
    """
    GET  /api/account
    POST /api/account

    Returns:
        - 201: Account created
        - 400: Invalid input, unknown user, or a second main account
    """

    def get(self, request):
        return paginated(self, request, selectors.accounts(include_deleted(request)), AccountSerializer)

    def post(self, request):
        serializer = AccountCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_response(serializer)

        try:
            account = lifecycle.create_account(**serializer.validated_data)
        except WalletError as e:
            return error_response(e)

        return Response(AccountSerializer(account).data, status=status.HTTP_201_CREATED)


class AccountDetailView(APIView):
    """
    GET    /api/account/<id>
    PUT    /api/account/<id>
    DELETE /api/account/<id>

    Main accounts cannot be modified or deleted, balances cannot be edited,
    and only accounts with a zero balance can be deleted.
    """

    def get(self, request, account_id):
        account = selectors.get_account(account_id, include_deleted(request))
        if account is None:
            return error_response(NotFoundError(account_not_found()))
        return Response(AccountSerializer(account).data)

    def put(self, request, account_id):
        serializer = AccountUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_response(serializer)

        try:
            account = lifecycle.update_account(account_id, serializer.validated_data)
        except WalletError as e:
            return error_response(e)

        return Response(AccountSerializer(account).data)

    def delete(self, request, account_id):
        try:
            lifecycle.delete_account(account_id)
        except WalletError as e:
            return error_response(e)
        return Response({'message': 'Account deleted successfully.'})


class UserAccountListView(APIView):
    """GET /api/account/user/<user_id>"""

    def get(self, request, user_id):
        queryset = selectors.accounts_for_user(user_id, include_deleted(request))
        return paginated(self, request, queryset, AccountSerializer)


# Users

class UserListView(APIView):
    """
    GET  /api/user
    POST /api/user

    POST registers a user and creates its main account.
    """

    def get(self, request):
        return paginated(self, request, selectors.users(include_deleted(request)), UserSerializer)

    def post(self, request):
        serializer = UserCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_response(serializer)

        try:
            user = lifecycle.register_user(**serializer.validated_data)
        except WalletError as e:
            return error_response(e)

        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class UserDetailView(APIView):
    """
    GET    /api/user/<id>
    PUT    /api/user/<id>
    DELETE /api/user/<id>

    DELETE soft-deletes the user and every account, and is refused while any
    account still holds money.
    """

    def get(self, request, user_id):
        user = selectors.get_user(user_id, include_deleted(request))
        if user is None:
            return error_response(NotFoundError(user_not_found()))
        return Response(UserSerializer(user).data)

    def put(self, request, user_id):
        serializer = UserUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_response(serializer)

        try:
            user = lifecycle.update_user(user_id, **serializer.validated_data)
        except WalletError as e:
            return error_response(e)

        return Response(UserSerializer(user).data)

    def delete(self, request, user_id):
        try:
            lifecycle.delete_user(user_id)
        except WalletError as e:
            return error_response(e)
        return Response({'message': 'User deleted successfully.'})


class UserTotalBalanceView(APIView):
    """GET /api/user/<id>/total-balance"""

    def get(self, request, user_id):
        try:
            summary = lifecycle.user_total_balance(user_id)
        except WalletError as e:
            return error_response(e)
        return Response(UserTotalBalanceSerializer(summary).data)


# Settings

class SettingsView(APIView):
    """
    GET /api/settings
    PUT /api/settings

    Settings of the authenticated user; PUT replaces them all.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({
            'userId': request.user.pk,
            'settings': user_settings.get_settings(request.user),
        })

    def put(self, request):
        serializer = SettingsSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_response(serializer)

        try:
            values = user_settings.replace_settings(request.user, serializer.validated_data['settings'])
        except WalletError as e:
            return error_response(e)

        return Response({'userId': request.user.pk, 'settings': values})


class SettingView(APIView):
    """PUT /api/settings/setting with ``{key, value}``."""

    permission_classes = [IsAuthenticated]

    def put(self, request):
        serializer = SettingSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_response(serializer)

        key = serializer.validated_data['key']
        value = serializer.validated_data['value']
        try:
            user_settings.set_setting(request.user, key, value)
        except WalletError as e:
            return error_response(e)

        return Response({'key': key, 'value': value})


class SettingDetailView(APIView):
    """
    GET    /api/settings/setting/<key>
    DELETE /api/settings/setting/<key>
    """

    permission_classes = [IsAuthenticated]

    def get(self, request, key):
        try:
            value = user_settings.get_setting(request.user, key)
        except WalletError as e:
            return error_response(e)
        return Response({'key': key, 'value': value})

    def delete(self, request, key):
        try:
            user_settings.delete_setting(request.user, key)
        except WalletError as e:
            return error_response(e)
        return Response({'message': f"Setting '{key}' deleted successfully."})


class SettingsResetView(APIView):
    """POST /api/settings/reset"""

    permission_classes = [IsAuthenticated]

    def post(self, request):
        values = user_settings.reset_settings(request.user)
        return Response({'userId': request.user.pk, 'settings': values})


class TimezoneView(APIView):
    """
    GET /api/settings/timezone
    PUT /api/settings/timezone

    Unknown zone names are refused on write.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({'timezone': user_settings.get_timezone(request.user)})

    def put(self, request):
        serializer = TimezoneSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_response(serializer)

        try:
            name = user_settings.set_timezone(request.user, serializer.validated_data['timezone'])
        except WalletError as e:
            return error_response(e)

        return Response({'timezone': name})


# Database administration

class DatabaseResetView(APIView):
    """
    POST /api/database/reset

    Remove every ledger row. Staff logins survive.
    """

    permission_classes = [IsAdminUser]

    def post(self, request):
        try:
            removed = database.reset_database()
        except WalletError as e:
            return error_response(e)
        return Response({'message': 'Database has been reset successfully.', 'removed': removed})


class DatabaseStatusView(APIView):
    """GET /api/database/status"""

    permission_classes = [IsAdminUser]

    def get(self, request):
        counts = database.database_status()
        components = counts['components']
        return Response({
            'users': counts['users'],
            'accounts': counts['accounts'],
            'transactions': counts['transactions'],
            'components': {
                'coreDetails': components['core_details'],
                'activeAccounts': components['active_accounts'],
                'spendingLimits': components['spending_limits'],
                'savingGoals': components['saving_goals'],
            },
        })
