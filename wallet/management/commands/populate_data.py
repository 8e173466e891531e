"""
Management command to populate dummy data for testing.

Creates test users with accounts and runs sample transactions through the
transaction executor, so the seeded ledger obeys the same rules as the API.
"""

from decimal import Decimal
from django.core.management.base import BaseCommand, CommandError

from wallet.exceptions import WalletError
from wallet.models import DestinationType, LimitTimeframe, SourceType, User
from wallet.services import database, lifecycle
from wallet.services.transactions import execute_transaction
from wallet.services.validation import TransactionRequest


class Command(BaseCommand):
    help = 'Populate the database with dummy users, accounts, and transactions for testing'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before creating new data',
        )

    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            database.reset_database()
            self.stdout.write(self.style.SUCCESS('Cleared existing data'))

        self.stdout.write('Creating dummy data...')

        users_data = [
            {'username': 'alice', 'email': 'alice@example.com', 'deposit': '1000.00'},
            {'username': 'bob', 'email': 'bob@example.com', 'deposit': '500.00'},
            {'username': 'charlie', 'email': 'charlie@example.com', 'deposit': '750.00'},
            {'username': 'diana', 'email': 'diana@example.com', 'deposit': '250.00'},
            {'username': 'eve', 'email': 'eve@example.com', 'deposit': '100.00'},
        ]

        main_accounts = {}
        try:
            for user_data in users_data:
                if User.objects.filter(username=user_data['username']).exists():
                    raise CommandError(
                        f"User {user_data['username']} already exists; run with --clear"
                    )
                user = lifecycle.register_user(
                    username=user_data['username'],
                    email=user_data['email'],
                    password='password123',
                )
                main = user.accounts.get(is_main=True)
                main_accounts[user.username] = main
                self.stdout.write(f"  Created user: {user.username}")

                self._run(
                    source_type=SourceType.SYSTEM,
                    source_name='Opening deposit',
                    destination_type=DestinationType.ACCOUNT,
                    destination_account_id=main.pk,
                    amount=Decimal(user_data['deposit']),
                    description='Opening deposit',
                )
                self.stdout.write(f"    Deposited: ${user_data['deposit']}")

            savings = lifecycle.create_account(
                user_id=main_accounts['alice'].user_id,
                core_details={'name': 'Savings', 'balance': Decimal('0.00')},
                active_account={'iban': 'DE89370400440532013000'},
                spending_limit={'limit_amount': Decimal('200.00'), 'timeframe': LimitTimeframe.MONTHLY},
                saving_goal={'goal_name': 'Holiday', 'target_amount': Decimal('1500.00')},
            )
            self.stdout.write(f"  Created account: Savings for alice ({savings.pk})")

            # Create some sample transactions
            self.stdout.write('\nCreating sample transactions...')

            sample_transfers = [
                ('alice', 'bob', '50.00'),
                ('bob', 'charlie', '25.00'),
                ('charlie', 'diana', '100.00'),
                ('alice', 'eve', '30.00'),
                ('diana', 'alice', '15.00'),
            ]
            for sender, receiver, amount in sample_transfers:
                self._run(
                    source_type=SourceType.ACCOUNT,
                    source_account_id=main_accounts[sender].pk,
                    destination_type=DestinationType.ACCOUNT,
                    destination_account_id=main_accounts[receiver].pk,
                    amount=Decimal(amount),
                    description=f'Transfer from {sender} to {receiver}',
                )
                self.stdout.write(f"  {sender} -> {receiver}: ${amount}")

            self._run(
                source_type=SourceType.ACCOUNT,
                source_account_id=main_accounts['alice'].pk,
                destination_type=DestinationType.ACCOUNT,
                destination_account_id=savings.pk,
                amount=Decimal('300.00'),
                description='Move to savings',
            )
            self._run(
                source_type=SourceType.ACCOUNT,
                source_account_id=main_accounts['bob'].pk,
                destination_type=DestinationType.SPEND,
                destination_name='Coffee Shop',
                amount=Decimal('4.50'),
                description='Coffee',
            )
            self._run(
                source_type=SourceType.ACCOUNT,
                source_account_id=main_accounts['charlie'].pk,
                destination_type=DestinationType.IBAN,
                destination_iban='GB29NWBK60161331926819',
                destination_name='Landlord',
                amount=Decimal('120.00'),
                description='Rent share',
            )
        except WalletError as e:
            raise CommandError(str(e)) from e

        self.stdout.write('')
        self.stdout.write(self.style.SUCCESS('=' * 50))
        self.stdout.write(self.style.SUCCESS('Dummy data created successfully!'))
        self.stdout.write(self.style.SUCCESS('=' * 50))
        self.stdout.write('')
        self.stdout.write('Test Credentials (all use password: password123):')
        self.stdout.write('')
        self.stdout.write('  Username     Total balance')
        self.stdout.write('  ---------    -------------')
        for user_data in users_data:
            summary = lifecycle.user_total_balance(main_accounts[user_data['username']].user_id)
            self.stdout.write(f"  {user_data['username']:<12} ${summary['total_balance']}")
        self.stdout.write('')

    def _run(self, **fields):
        return execute_transaction(TransactionRequest(**fields))
