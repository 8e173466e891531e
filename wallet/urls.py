"""
URL configuration for the Wallet app.
"""

from django.urls import path
from .views import (
    AccountDetailView,
    AccountListView,
    AccountTransactionListView,
    DatabaseResetView,
    DatabaseStatusView,
    SettingDetailView,
    SettingsResetView,
    SettingsView,
    SettingView,
    TimezoneView,
    TransactionDetailView,
    TransactionListView,
    UserAccountListView,
    UserDetailView,
    UserListView,
    UserTotalBalanceView,
)

app_name = 'wallet'


def route(pattern, view, name):
    """Serve ``pattern`` with and without a trailing slash; reverse() gives the bare form."""
    return [
        path(pattern, view.as_view(), name=name),
        path(f'{pattern}/', view.as_view()),
    ]


urlpatterns = [
    *route('transaction', TransactionListView, 'transactions'),
    *route('transaction/<uuid:transaction_id>', TransactionDetailView, 'transaction-detail'),
    *route('transaction/account/<uuid:account_id>', AccountTransactionListView, 'account-transactions'),
    *route('account', AccountListView, 'accounts'),
    *route('account/<uuid:account_id>', AccountDetailView, 'account-detail'),
    *route('account/user/<uuid:user_id>', UserAccountListView, 'user-accounts'),
    *route('user', UserListView, 'users'),
    *route('user/<uuid:user_id>', UserDetailView, 'user-detail'),
    *route('user/<uuid:user_id>/total-balance', UserTotalBalanceView, 'user-total-balance'),
    *route('settings', SettingsView, 'settings'),
    *route('settings/setting', SettingView, 'setting'),
    *route('settings/setting/<str:key>', SettingDetailView, 'setting-detail'),
    *route('settings/reset', SettingsResetView, 'settings-reset'),
    *route('settings/timezone', TimezoneView, 'settings-timezone'),
    *route('database/reset', DatabaseResetView, 'database-reset'),
    *route('database/status', DatabaseStatusView, 'database-status'),
]
