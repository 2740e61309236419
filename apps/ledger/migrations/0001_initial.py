# Generated manually for the card ledger

import uuid
from decimal import Decimal
import django.core.validators
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('cards', '0001_initial'),
        ('franchises', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Transaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('kind', models.CharField(choices=[('RECHARGE', 'Recharge'), ('USAGE', 'Usage')], max_length=10)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('COMPLETED', 'Completed'), ('CANCELLED', 'Cancelled')], default='PENDING', max_length=10)),
                ('balance_after', models.DecimalField(decimal_places=2, max_digits=10)),
                ('customer_name', models.CharField(blank=True, max_length=150)),
                ('customer_phone', models.CharField(blank=True, max_length=20)),
                ('receipt', models.CharField(blank=True, db_index=True, max_length=64)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('card', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='cards.card')),
                ('establishment', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='franchises.establishment')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='ledger_transactions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'ledger_transactions',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['card', 'created_at'], name='ledger_tran_card_id_4f1e2b_idx'),
                    models.Index(fields=['establishment', 'created_at'], name='ledger_tran_establi_9a3c57_idx'),
                    models.Index(fields=['kind', 'status'], name='ledger_tran_kind_6d2e80_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('amount__gt', 0)), name='transaction_amount_positive'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Commission',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10)),
                ('rate', models.DecimalField(decimal_places=2, max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('100'))])),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('PAID', 'Paid'), ('CANCELLED', 'Cancelled')], default='PENDING', max_length=10)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('franchisee', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='commissions', to='franchises.franchisee')),
                ('establishment', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='commissions', to='franchises.establishment')),
                ('transaction', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='commission', to='ledger.transaction')),
            ],
            options={
                'db_table': 'commissions',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['franchisee', 'status'], name='commissions_franchi_1b8d42_idx'),
                    models.Index(fields=['establishment', 'created_at'], name='commissions_establi_5e0f39_idx'),
                ],
            },
        ),
    ]
