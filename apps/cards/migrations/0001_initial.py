# Generated manually for prepaid cards

import uuid
from decimal import Decimal
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('franchises', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Card',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('code', models.CharField(db_index=True, max_length=50, unique=True)),
                ('qr_code', models.CharField(blank=True, max_length=255)),
                ('balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('status', models.CharField(choices=[('AVAILABLE', 'Available'), ('ACTIVE', 'Active'), ('USED', 'Used'), ('BLOCKED', 'Blocked'), ('EXPIRED', 'Expired')], default='AVAILABLE', max_length=10)),
                ('customer_reference', models.CharField(blank=True, max_length=100)),
                ('activated_at', models.DateTimeField(blank=True, null=True)),
                ('used_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('franchisee', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='cards', to='franchises.franchisee')),
                ('establishment', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='cards', to='franchises.establishment')),
            ],
            options={
                'db_table': 'cards',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['franchisee', 'status'], name='cards_franchi_7c4d10_idx'),
                    models.Index(fields=['establishment', 'status'], name='cards_establi_2a9f63_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('balance__gte', 0)), name='card_balance_non_negative'),
                ],
            },
        ),
    ]
