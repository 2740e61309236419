# Generated manually for the franchise network

import uuid
from decimal import Decimal
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Franchisor',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('cnpj', models.CharField(max_length=18, unique=True)),
                ('email', models.EmailField(max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'franchisors',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Franchisee',
            fields=[
                ('external_linkage', models.CharField(choices=[('UNLINKED', 'Unlinked'), ('LINKED', 'Linked'), ('LINK_FAILED', 'Link failed')], default='UNLINKED', max_length=20)),
                ('external_customer_id', models.CharField(blank=True, max_length=64)),
                ('external_link_error', models.TextField(blank=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('cnpj', models.CharField(max_length=18, unique=True)),
                ('email', models.EmailField(max_length=255)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('region', models.CharField(blank=True, max_length=100)),
                ('commission_rate', models.DecimalField(decimal_places=2, default=Decimal('10.00'), help_text='Percentage of each card usage owed as commission', max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('100'))])),
                ('status', models.CharField(choices=[('ACTIVE', 'Active'), ('INACTIVE', 'Inactive')], default='ACTIVE', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('franchisor', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='franchisees', to='franchises.franchisor')),
            ],
            options={
                'db_table': 'franchisees',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['franchisor', 'status'], name='franchisees_franchi_5b1c2e_idx'),
                    models.Index(fields=['region'], name='franchisees_region_8d0a4f_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('commission_rate__gte', 0), ('commission_rate__lte', 100)), name='franchisee_commission_rate_range'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Establishment',
            fields=[
                ('external_linkage', models.CharField(choices=[('UNLINKED', 'Unlinked'), ('LINKED', 'Linked'), ('LINK_FAILED', 'Link failed')], default='UNLINKED', max_length=20)),
                ('external_customer_id', models.CharField(blank=True, max_length=64)),
                ('external_link_error', models.TextField(blank=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('cnpj', models.CharField(max_length=18, unique=True)),
                ('email', models.EmailField(max_length=255)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('address', models.CharField(blank=True, max_length=255)),
                ('category', models.CharField(blank=True, max_length=100)),
                ('status', models.CharField(choices=[('ACTIVE', 'Active'), ('INACTIVE', 'Inactive')], default='ACTIVE', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('franchisee', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='establishments', to='franchises.franchisee')),
            ],
            options={
                'db_table': 'establishments',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['franchisee', 'status'], name='establishme_franchi_3e7b91_idx'),
                ],
            },
        ),
    ]
