"""
Shared fixtures for the Wallet tests.
"""

from decimal import Decimal

from wallet.models import Account, CoreDetails, DestinationType, SourceType
from wallet.services import lifecycle
from wallet.services.validation import TransactionRequest

PASSWORD = 'testpass123'


def make_user(username='alice', main_balance='0.00'):
    """Register a user; the main account balance is seeded directly."""
    user = lifecycle.register_user(username, f'{username}@example.com', PASSWORD)
    if Decimal(main_balance):
        CoreDetails.objects.filter(account=main_account(user)).update(balance=Decimal(main_balance))
    return user


def main_account(user):
    return Account.objects.get(user=user, is_main=True)


def make_account(user, balance='0.00', name='Secondary'):
    account = Account.objects.create(user=user, is_main=False)
    CoreDetails.objects.create(account=account, name=name, balance=Decimal(balance))
    return account


def balance_of(account):
    return CoreDetails.objects.get(account_id=account.pk).balance


def transfer(source, destination, amount, description='Transfer'):
    return TransactionRequest(
        source_type=SourceType.ACCOUNT,
        source_account_id=source.pk,
        destination_type=DestinationType.ACCOUNT,
        destination_account_id=destination.pk,
        amount=Decimal(amount),
        description=description,
    )
