"""
Tests for the transaction executor.
"""

from dataclasses import replace
from datetime import timedelta
from decimal import Decimal
from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.utils import timezone
from unittest.mock import patch

from wallet.exceptions import (
    InsufficientFundsError,
    InvariantViolationError,
    NotFoundError,
    PersistenceError,
    SpendingLimitExceededError,
)
from wallet.models import (
    CoreDetails,
    DestinationType,
    LimitTimeframe,
    SourceType,
    SpendingLimit,
    Transaction,
)
from wallet.services import lifecycle
from wallet.services.transactions import execute_transaction, soft_delete_transaction
from wallet.services.validation import TransactionRequest

from .helpers import balance_of, main_account, make_account, make_user, transfer


class ExecuteTransactionTest(TestCase):
    """Test cases for balance movements."""

    def setUp(self):
        """Set up test fixtures."""
        self.alice = make_user('alice')
        self.bob = make_user('bob')
        self.a = make_account(self.alice, balance='100.00', name='A')
        self.b = make_account(self.bob, balance='0.00', name='B')

    def test_transfer_between_accounts(self):
        """100/0, transfer 50 -> 50/50 with the balances before recorded."""
        record = execute_transaction(transfer(self.a, self.b, '50.00'))

        self.assertEqual(balance_of(self.a), Decimal('50.00'))
        self.assertEqual(balance_of(self.b), Decimal('50.00'))
        self.assertEqual(record.source_account_balance_before, Decimal('100.00'))
        self.assertEqual(record.destination_account_balance_before, Decimal('0.00'))
        self.assertEqual(Transaction.objects.count(), 1)

    def test_insufficient_funds_changes_nothing(self):
        CoreDetails.objects.filter(account=self.a).update(balance=Decimal('20.00'))

        with self.assertRaises(InsufficientFundsError):
            execute_transaction(transfer(self.a, self.b, '50.00'))

        self.assertEqual(balance_of(self.a), Decimal('20.00'))
        self.assertEqual(balance_of(self.b), Decimal('0.00'))
        self.assertFalse(Transaction.objects.exists())

    def test_spend_everything_then_delete(self):
        CoreDetails.objects.filter(account=self.b).update(balance=Decimal('100.00'))
        execute_transaction(TransactionRequest(
            source_type=SourceType.ACCOUNT,
            source_account_id=self.b.pk,
            destination_type=DestinationType.SPEND,
            destination_name='Groceries',
            amount=Decimal('100.00'),
            description='Weekly shop',
        ))

        self.assertEqual(balance_of(self.b), Decimal('0.00'))
        lifecycle.delete_account(self.b.pk)
        self.b.refresh_from_db()
        self.assertTrue(self.b.is_deleted)

    def test_decimal_precision(self):
        CoreDetails.objects.filter(account=self.a).update(balance=Decimal('123.45'))
        execute_transaction(transfer(self.a, self.b, '12.34'))
        self.assertEqual(balance_of(self.a), Decimal('111.11'))

        CoreDetails.objects.filter(account=self.b).update(balance=Decimal('100.00'))
        execute_transaction(transfer(self.b, self.a, '0.01'))
        self.assertEqual(balance_of(self.b), Decimal('99.99'))

    def test_self_transfer_rejected(self):
        with self.assertRaises(InvariantViolationError):
            execute_transaction(transfer(self.a, self.a, '1.00'))
        self.assertEqual(balance_of(self.a), Decimal('100.00'))
        self.assertFalse(Transaction.objects.exists())

    def test_deposit_from_system(self):
        record = execute_transaction(TransactionRequest(
            source_type=SourceType.SYSTEM,
            source_name='Payroll',
            destination_type=DestinationType.ACCOUNT,
            destination_account_id=self.b.pk,
            amount=Decimal('25.00'),
            description='Salary',
        ))

        self.assertEqual(balance_of(self.b), Decimal('25.00'))
        self.assertIsNone(record.source_account)
        self.assertIsNone(record.source_account_balance_before)
        self.assertEqual(record.destination_account_balance_before, Decimal('0.00'))
        self.assertEqual(record.source_name, 'Payroll')

    def test_withdrawal_to_iban_discards_unused_fields(self):
        record = execute_transaction(TransactionRequest(
            source_type=SourceType.ACCOUNT,
            source_account_id=self.a.pk,
            source_iban='IGNORED',
            destination_type=DestinationType.IBAN,
            destination_iban='GB29NWBK60161331926819',
            destination_name='Landlord',
            destination_account_id=self.b.pk,
            amount=Decimal('30.00'),
            description='Rent',
        ))

        self.assertEqual(balance_of(self.a), Decimal('70.00'))
        self.assertEqual(balance_of(self.b), Decimal('0.00'))
        record.refresh_from_db()
        self.assertIsNone(record.source_iban)
        self.assertIsNone(record.destination_account)
        self.assertIsNone(record.destination_account_balance_before)

    def test_client_timestamp_is_kept(self):
        when = timezone.now() - timedelta(days=3)
        req = transfer(self.a, self.b, '1.00')
        record = execute_transaction(replace(req, timestamp=when))
        self.assertEqual(record.timestamp, when)

    def test_conservation_across_transfers(self):
        a2 = make_account(self.alice, balance='40.00', name='A2')
        total = balance_of(self.a) + balance_of(self.b) + balance_of(a2)

        execute_transaction(transfer(self.a, self.b, '33.33'))
        execute_transaction(transfer(self.b, a2, '10.01'))
        execute_transaction(transfer(a2, self.a, '50.01'))

        self.assertEqual(balance_of(self.a) + balance_of(self.b) + balance_of(a2), total)

    def test_storage_failure_rolls_back(self):
        """Any error while writing the record undoes the balance changes."""
        with patch.object(Transaction.objects, 'create', side_effect=DatabaseError('disk full')):
            with self.assertRaises(PersistenceError):
                execute_transaction(transfer(self.a, self.b, '50.00'))

        self.assertEqual(balance_of(self.a), Decimal('100.00'))
        self.assertEqual(balance_of(self.b), Decimal('0.00'))
        self.assertFalse(Transaction.objects.exists())

    def test_deleted_source_rejected(self):
        self.a.mark_deleted()
        self.a.save()
        with self.assertRaises(NotFoundError):
            execute_transaction(transfer(self.a, self.b, '1.00'))


class SpendingLimitEnforcementTest(TestCase):
    """Test cases for spending limits on debits."""

    def setUp(self):
        """Set up test fixtures."""
        user = make_user('spender')
        self.account = lifecycle.create_account(
            user_id=user.pk,
            core_details={'name': 'Card', 'balance': Decimal('5000.00')},
            spending_limit={'limit_amount': Decimal('1000.00'), 'timeframe': LimitTimeframe.MONTHLY},
        )
        self.main = main_account(user)

    def spend(self, amount):
        return execute_transaction(TransactionRequest(
            source_type=SourceType.ACCOUNT,
            source_account_id=self.account.pk,
            destination_type=DestinationType.SPEND,
            amount=Decimal(amount),
            description='Shopping',
        ))

    def test_spend_within_limit(self):
        self.spend('500.00')
        limit = SpendingLimit.objects.get(pk=self.account.pk)
        self.assertEqual(limit.current_spending, Decimal('500.00'))

    def test_spend_over_limit_rejected(self):
        self.spend('600.00')
        with self.assertRaises(SpendingLimitExceededError):
            self.spend('400.01')
        self.assertEqual(balance_of(self.account), Decimal('4400.00'))

    def test_credit_does_not_count(self):
        CoreDetails.objects.filter(account=self.main).update(balance=Decimal('50.00'))
        execute_transaction(transfer(self.main, self.account, '50.00'))
        limit = SpendingLimit.objects.get(pk=self.account.pk)
        self.assertEqual(limit.current_spending, Decimal('0.00'))

    def test_expired_period_is_rolled(self):
        SpendingLimit.objects.filter(pk=self.account.pk).update(
            current_spending=Decimal('1000.00'),
            period_start_date=timezone.now() - timedelta(days=40),
        )
        self.spend('100.00')

        limit = SpendingLimit.objects.get(pk=self.account.pk)
        self.assertEqual(limit.current_spending, Decimal('100.00'))
        self.assertGreater(limit.period_end_date, timezone.now())

    @override_settings(WALLET_ENFORCE_SPENDING_LIMITS=False)
    def test_enforcement_can_be_disabled(self):
        self.spend('1500.00')
        limit = SpendingLimit.objects.get(pk=self.account.pk)
        self.assertEqual(limit.current_spending, Decimal('0.00'))


class SoftDeleteTransactionTest(TestCase):

    def setUp(self):
        """Set up test fixtures."""
        user = make_user('alice', main_balance='10.00')
        self.account = main_account(user)
        self.other = make_account(user)
        self.record = execute_transaction(transfer(self.account, self.other, '4.00'))

    def test_soft_delete_keeps_balances(self):
        soft_delete_transaction(self.record.pk)

        self.record.refresh_from_db()
        self.assertTrue(self.record.is_deleted)
        self.assertEqual(balance_of(self.account), Decimal('6.00'))
        self.assertEqual(balance_of(self.other), Decimal('4.00'))

    def test_soft_delete_twice(self):
        soft_delete_transaction(self.record.pk)
        with self.assertRaises(NotFoundError):
            soft_delete_transaction(self.record.pk)
