from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
import uuid


class AuditAction(models.TextChoices):
    CREATE = 'CREATE', 'Create'
    UPDATE = 'UPDATE', 'Update'
    DELETE = 'DELETE', 'Delete'
    RECHARGE = 'RECHARGE', 'Recharge'
    USAGE = 'USAGE', 'Usage'
    STATUS_CHANGE = 'STATUS_CHANGE', 'Status change'
    CANCEL = 'CANCEL', 'Cancel'


class AuditLogImmutableError(Exception):
    """Raised when code tries to change or remove an audit row."""
    pass


class AuditLog(models.Model):
    """Append-only record of a mutating action with before/after snapshots."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    actor = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
    )
    actor_email = models.EmailField(max_length=255, blank=True)
    action = models.CharField(max_length=20, choices=AuditAction.choices)
    entity = models.CharField(max_length=50)
    entity_id = models.CharField(max_length=64)
    before = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    after = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        indexes = [
            models.Index(fields=['entity', 'entity_id'], name='audit_logs_entity_2b7e90_idx'),
            models.Index(fields=['actor', 'created_at'], name='audit_logs_actor_i_6c3f15_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.action} {self.entity}:{self.entity_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise AuditLogImmutableError('Audit log entries cannot be modified')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AuditLogImmutableError('Audit log entries cannot be deleted')
