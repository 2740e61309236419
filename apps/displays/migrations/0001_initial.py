# Generated manually for display units

import uuid
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('franchises', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Display',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('unit_type', models.CharField(choices=[('COUNTER', 'Counter'), ('WALL', 'Wall'), ('TABLE', 'Table')], default='COUNTER', max_length=10)),
                ('status', models.CharField(choices=[('AVAILABLE', 'Available'), ('INSTALLED', 'Installed'), ('MAINTENANCE', 'Maintenance')], default='AVAILABLE', max_length=12)),
                ('installed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('franchisee', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='displays', to='franchises.franchisee')),
                ('establishment', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='displays', to='franchises.establishment')),
            ],
            options={
                'db_table': 'displays',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['franchisee', 'status'], name='displays_franchi_3d6c08_idx'),
                    models.Index(fields=['establishment'], name='displays_establi_7f1a25_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(models.Q(('status', 'INSTALLED'), _negated=True), ('establishment__isnull', False), _connector='OR'), name='display_installed_has_establishment'),
                ],
            },
        ),
    ]
