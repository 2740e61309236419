# Generated manually for the audit trail

import uuid
import django.core.serializers.json
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('actor_email', models.EmailField(blank=True, max_length=255)),
                ('action', models.CharField(choices=[('CREATE', 'Create'), ('UPDATE', 'Update'), ('DELETE', 'Delete'), ('RECHARGE', 'Recharge'), ('USAGE', 'Usage'), ('STATUS_CHANGE', 'Status change'), ('CANCEL', 'Cancel')], max_length=20)),
                ('entity', models.CharField(max_length=50)),
                ('entity_id', models.CharField(max_length=64)),
                ('before', models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True)),
                ('after', models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('actor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'audit_logs',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['entity', 'entity_id'], name='audit_logs_entity_2b7e90_idx'),
                    models.Index(fields=['actor', 'created_at'], name='audit_logs_actor_i_6c3f15_idx'),
                ],
            },
        ),
    ]
