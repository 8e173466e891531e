import django.contrib.auth.models
import django.contrib.auth.validators
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import uuid
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(error_messages={'unique': 'A user with that username already exists.'}, help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.', max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('is_deleted', models.BooleanField(default=False, help_text='Whether the row has been soft-deleted')),
                ('deleted_at', models.DateTimeField(blank=True, help_text='When the row was soft-deleted', null=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('email', models.EmailField(help_text='Unique email address', max_length=255, unique=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'User',
                'verbose_name_plural': 'Users',
                'ordering': ['created_at'],
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='Account',
            fields=[
                ('is_deleted', models.BooleanField(default=False, help_text='Whether the row has been soft-deleted')),
                ('deleted_at', models.DateTimeField(blank=True, help_text='When the row was soft-deleted', null=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('is_main', models.BooleanField(default=False, help_text='Main accounts cannot be edited or deleted')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(help_text='The user who owns this account', on_delete=django.db.models.deletion.PROTECT, related_name='accounts', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Account',
                'verbose_name_plural': 'Accounts',
                'ordering': ['created_at'],
                'indexes': [models.Index(fields=['user', 'is_deleted'], name='account_user_deleted_idx')],
                'constraints': [models.UniqueConstraint(condition=models.Q(('is_main', True)), fields=('user',), name='unique_main_account_per_user')],
            },
        ),
        migrations.CreateModel(
            name='CoreDetails',
            fields=[
                ('is_deleted', models.BooleanField(default=False, help_text='Whether the row has been soft-deleted')),
                ('deleted_at', models.DateTimeField(blank=True, help_text='When the row was soft-deleted', null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('account', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, primary_key=True, related_name='core_details', serialize=False, to='wallet.account')),
                ('name', models.CharField(max_length=100)),
                ('balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Current balance (must be >= 0.00)', max_digits=18, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
            ],
            options={
                'verbose_name': 'Core details',
                'verbose_name_plural': 'Core details',
                'constraints': [models.CheckConstraint(condition=models.Q(('balance__gte', 0)), name='core_details_balance_non_negative')],
            },
        ),
        migrations.CreateModel(
            name='ActiveAccount',
            fields=[
                ('is_deleted', models.BooleanField(default=False, help_text='Whether the row has been soft-deleted')),
                ('deleted_at', models.DateTimeField(blank=True, help_text='When the row was soft-deleted', null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('account', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, primary_key=True, related_name='active_account', serialize=False, to='wallet.account')),
                ('iban', models.CharField(max_length=34)),
                ('activated_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Active account',
                'verbose_name_plural': 'Active accounts',
            },
        ),
        migrations.CreateModel(
            name='SpendingLimit',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('account', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, primary_key=True, related_name='spending_limit', serialize=False, to='wallet.account')),
                ('limit_amount', models.DecimalField(decimal_places=2, max_digits=18, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('timeframe', models.PositiveSmallIntegerField(choices=[(0, 'Daily'), (1, 'Weekly'), (2, 'Monthly'), (3, 'Yearly')])),
                ('current_spending', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('period_start_date', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Spending limit',
                'verbose_name_plural': 'Spending limits',
            },
        ),
        migrations.CreateModel(
            name='SavingGoal',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('account', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, primary_key=True, related_name='saving_goal', serialize=False, to='wallet.account')),
                ('goal_name', models.CharField(max_length=200)),
                ('target_amount', models.DecimalField(decimal_places=2, max_digits=18, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
            ],
            options={
                'verbose_name': 'Saving goal',
                'verbose_name_plural': 'Saving goals',
            },
        ),
        migrations.CreateModel(
            name='Transaction',
            fields=[
                ('is_deleted', models.BooleanField(default=False, help_text='Whether the row has been soft-deleted')),
                ('deleted_at', models.DateTimeField(blank=True, help_text='When the row was soft-deleted', null=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('source_type', models.PositiveSmallIntegerField(choices=[(0, 'Account'), (1, 'IBAN'), (2, 'System')])),
                ('source_iban', models.CharField(blank=True, max_length=34, null=True)),
                ('source_name', models.CharField(blank=True, max_length=255, null=True)),
                ('destination_type', models.PositiveSmallIntegerField(choices=[(0, 'Account'), (1, 'IBAN'), (2, 'Spend')])),
                ('destination_iban', models.CharField(blank=True, max_length=34, null=True)),
                ('destination_name', models.CharField(blank=True, max_length=255, null=True)),
                ('amount', models.DecimalField(decimal_places=2, help_text='Amount moved', max_digits=18, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('description', models.CharField(max_length=500)),
                ('timestamp', models.DateTimeField(default=django.utils.timezone.now, help_text='Logical time of the movement')),
                ('source_account_balance_before', models.DecimalField(blank=True, decimal_places=2, max_digits=18, null=True)),
                ('destination_account_balance_before', models.DecimalField(blank=True, decimal_places=2, max_digits=18, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('source_account', models.ForeignKey(blank=True, help_text='Internal account the money left', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='source_transactions', to='wallet.account')),
                ('destination_account', models.ForeignKey(blank=True, help_text='Internal account the money entered', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='destination_transactions', to='wallet.account')),
            ],
            options={
                'verbose_name': 'Transaction',
                'verbose_name_plural': 'Transactions',
                'ordering': ['-timestamp', '-created_at'],
                'indexes': [
                    models.Index(fields=['source_account', 'timestamp'], name='tx_source_time_idx'),
                    models.Index(fields=['destination_account', 'timestamp'], name='tx_destination_time_idx'),
                    models.Index(fields=['timestamp'], name='tx_timestamp_idx'),
                ],
                'constraints': [models.CheckConstraint(condition=models.Q(('amount__gt', 0)), name='transaction_amount_positive')],
            },
        ),
        migrations.CreateModel(
            name='UserSettings',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('values', models.JSONField(blank=True, default=dict)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='wallet_settings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'User settings',
                'verbose_name_plural': 'User settings',
            },
        ),
    ]
