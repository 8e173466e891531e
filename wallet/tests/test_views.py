"""
API tests for the Wallet app views.
"""

import uuid
from decimal import Decimal
from django.db import DatabaseError
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework import status
from unittest.mock import patch

from wallet.models import Account, CoreDetails, DestinationType, SourceType, Transaction, User
from wallet.services import user_settings

from .helpers import balance_of, main_account, make_account, make_user


class TransactionViewTest(TestCase):
    """Test cases for the transaction endpoints."""

    def setUp(self):
        """Set up test fixtures."""
        self.client = APIClient()

        self.alice = make_user('alice', main_balance='100.00')
        self.bob = make_user('bob')
        self.source = main_account(self.alice)
        self.destination = main_account(self.bob)

        self.transactions_url = reverse('wallet:transactions')

    def post_transfer(self, amount, **overrides):
        payload = {
            'sourceType': SourceType.ACCOUNT,
            'sourceAccountId': str(self.source.pk),
            'destinationType': DestinationType.ACCOUNT,
            'destinationAccountId': str(self.destination.pk),
            'amount': amount,
            'description': 'Dinner',
        }
        payload.update(overrides)
        return self.client.post(self.transactions_url, payload, format='json')

    def test_successful_transfer(self):
        """Test a successful transfer between two accounts."""
        response = self.post_transfer('25.00')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['amount'], '25.00')
        self.assertEqual(response.data['sourceAccountBalanceBefore'], '100.00')
        self.assertEqual(response.data['destinationAccountBalanceBefore'], '0.00')
        self.assertEqual(response.data['sourceAccountId'], str(self.source.pk))
        self.assertNotIn('localTimestamp', response.data)

        self.assertEqual(balance_of(self.source), Decimal('75.00'))
        self.assertEqual(balance_of(self.destination), Decimal('25.00'))
        self.assertEqual(Transaction.objects.count(), 1)

    def test_missing_source_account_id(self):
        response = self.post_transfer('25.00', sourceAccountId=None)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('sourceAccountId', response.data['error'])

    def test_non_positive_amount(self):
        response = self.post_transfer('0.00')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount', response.data['error'])

    def test_too_many_decimal_places(self):
        response = self.post_transfer('1.001')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_insufficient_funds(self):
        response = self.post_transfer('150.00')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.data['error'],
            'Insufficient funds. Available balance: $100.00, Required: $150.00'
        )
        self.assertEqual(balance_of(self.source), Decimal('100.00'))

    def test_unknown_destination(self):
        response = self.post_transfer('10.00', destinationAccountId=str(uuid.uuid4()))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Destination account not found or has been deleted')

    def test_self_transfer(self):
        response = self.post_transfer('10.00', destinationAccountId=str(self.source.pk))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot transfer money to the same account')

    def test_storage_failure(self):
        with patch.object(Transaction.objects, 'create', side_effect=DatabaseError('gone')):
            response = self.post_transfer('10.00')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(balance_of(self.source), Decimal('100.00'))

    def test_trailing_slash_is_optional(self):
        self.assertEqual(self.transactions_url, '/api/transaction')

        response = self.client.post('/api/transaction', {
            'sourceType': SourceType.ACCOUNT,
            'sourceAccountId': str(self.source.pk),
            'destinationType': DestinationType.ACCOUNT,
            'destinationAccountId': str(self.destination.pk),
            'amount': '10.00',
            'description': 'No slash',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post('/api/transaction/', {
            'sourceType': SourceType.ACCOUNT,
            'sourceAccountId': str(self.source.pk),
            'destinationType': DestinationType.ACCOUNT,
            'destinationAccountId': str(self.destination.pk),
            'amount': '5.00',
            'description': 'Slash',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.assertEqual(balance_of(self.source), Decimal('85.00'))
        self.assertEqual(self.client.get('/api/transaction').data['total'], 2)

    def test_list_paginates(self):
        for amount in ('1.00', '2.00', '3.00'):
            self.post_transfer(amount)

        response = self.client.get(self.transactions_url, {'skip': 1, 'limit': 1})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 3)
        self.assertEqual(len(response.data['data']), 1)

    def test_detail_and_soft_delete(self):
        transaction_id = self.post_transfer('5.00').data['id']
        url = reverse('wallet:transaction-detail', args=[transaction_id])

        self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_404_NOT_FOUND)

        # Balances are untouched by deleting the record
        self.assertEqual(balance_of(self.source), Decimal('95.00'))
        listing = self.client.get(self.transactions_url, {'includeDeleted': 'true'})
        self.assertEqual(listing.data['total'], 1)

    def test_account_transactions(self):
        self.post_transfer('5.00')
        other = make_account(self.alice, balance='10.00')
        self.client.post(self.transactions_url, {
            'sourceType': SourceType.ACCOUNT,
            'sourceAccountId': str(other.pk),
            'destinationType': DestinationType.SPEND,
            'amount': '1.00',
            'description': 'Snack',
        }, format='json')

        url = reverse('wallet:account-transactions', args=[self.destination.pk])
        response = self.client.get(url)
        self.assertEqual(response.data['total'], 1)

    def test_local_timestamp_for_authenticated_user(self):
        user_settings.set_timezone(self.alice, 'Asia/Tokyo')
        self.client.force_authenticate(user=self.alice)

        response = self.post_transfer('1.00')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['localTimestamp'].endswith('+09:00'))


class AccountViewTest(TestCase):
    """Test cases for the account endpoints."""

    def setUp(self):
        """Set up test fixtures."""
        self.client = APIClient()
        self.user = make_user('alice')
        self.accounts_url = reverse('wallet:accounts')

    def test_create_account(self):
        response = self.client.post(self.accounts_url, {
            'userId': str(self.user.pk),
            'isMain': False,
            'coreDetails': {'name': 'Savings', 'balance': '50.00'},
            'spendingLimit': {'limitAmount': '200.00', 'timeframe': 2},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['coreDetails']['balance'], '50.00')
        self.assertEqual(response.data['spendingLimit']['limitAmount'], '200.00')
        self.assertIsNone(response.data['activeAccount'])

    def test_create_second_main_account(self):
        response = self.client.post(self.accounts_url, {
            'userId': str(self.user.pk),
            'isMain': True,
            'coreDetails': {'name': 'Another main'},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_for_unknown_user(self):
        response = self.client.post(self.accounts_url, {
            'userId': str(uuid.uuid4()),
            'coreDetails': {'name': 'Orphan'},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_main_account_rejected(self):
        url = reverse('wallet:account-detail', args=[main_account(self.user).pk])
        response = self.client.put(url, {'coreDetails': {'name': 'Renamed'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_balance_rejected(self):
        account = make_account(self.user)
        url = reverse('wallet:account-detail', args=[account.pk])
        response = self.client.put(url, {'coreDetails': {'balance': '999.00'}}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(balance_of(account), Decimal('0.00'))

    def test_update_missing_account(self):
        url = reverse('wallet:account-detail', args=[uuid.uuid4()])
        response = self.client.put(url, {'coreDetails': {'name': 'x'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_account(self):
        account = make_account(self.user)
        url = reverse('wallet:account-detail', args=[account.pk])

        self.assertEqual(self.client.delete(url).status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.get(url, {'includeDeleted': 'true'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['isDeleted'])

    def test_delete_account_without_trailing_slash(self):
        account = make_account(self.user)

        response = self.client.delete(f'/api/account/{account.pk}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            self.client.get(f'/api/account/{account.pk}/').status_code,
            status.HTTP_404_NOT_FOUND
        )

    def test_delete_account_with_balance(self):
        account = make_account(self.user, balance='3.00')
        url = reverse('wallet:account-detail', args=[account.pk])

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Current balance: $3.00', response.data['error'])

    def test_user_accounts(self):
        make_account(self.user)
        url = reverse('wallet:user-accounts', args=[self.user.pk])
        response = self.client.get(url)
        self.assertEqual(response.data['total'], 2)


class UserViewTest(TestCase):
    """Test cases for the user endpoints."""

    def setUp(self):
        """Set up test fixtures."""
        self.client = APIClient()
        self.users_url = reverse('wallet:users')

    def test_register(self):
        response = self.client.post(self.users_url, {
            'username': 'carol',
            'email': 'carol@example.com',
            'password': 'secret1',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertNotIn('password', response.data)
        user = User.objects.get(username='carol')
        self.assertEqual(Account.objects.filter(user=user, is_main=True).count(), 1)

    def test_register_duplicate(self):
        make_user('carol')
        response = self.client.post(self.users_url, {
            'username': 'carol',
            'email': 'someone@example.com',
            'password': 'secret1',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.data['error'],
            'Username already exists. Please choose a different username.'
        )

    def test_register_short_password(self):
        response = self.client.post(self.users_url, {
            'username': 'carol',
            'email': 'carol@example.com',
            'password': '123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_get_and_update_user(self):
        user = make_user('carol')
        url = reverse('wallet:user-detail', args=[user.pk])

        response = self.client.put(url, {'email': 'caroline@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(url).data['email'], 'caroline@example.com')

    def test_unknown_user(self):
        url = reverse('wallet:user-detail', args=[uuid.uuid4()])
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_404_NOT_FOUND)

    def test_total_balance(self):
        user = make_user('carol', main_balance='10.50')
        make_account(user, balance='4.50')

        response = self.client.get(reverse('wallet:user-total-balance', args=[user.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['totalBalance']), Decimal('15.00'))
        self.assertEqual(response.data['accountCount'], 2)

    def test_delete_user_with_balance(self):
        user = make_user('carol', main_balance='1.00')
        response = self.client.delete(reverse('wallet:user-detail', args=[user.pk]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_user(self):
        user = make_user('carol')
        url = reverse('wallet:user-detail', args=[user.pk])

        self.assertEqual(self.client.delete(url).status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(
            CoreDetails.objects.filter(account__user=user, is_deleted=False).exists()
        )
