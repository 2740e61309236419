"""
Audit trail service.

``record_audit`` is called by the other apps' services inside their own
atomic block, so a rolled-back operation never leaves an audit row behind.
"""
import json

from django.core.serializers.json import DjangoJSONEncoder
from django.db import DEFAULT_DB_ALIAS

from .models import AuditLog


def snapshot(instance, fields):
    """
    Capture selected field values of a model instance as JSON-safe data.

    Foreign keys are captured by their ``<name>_id`` attribute.
    """
    data = {}
    for field in fields:
        value = getattr(instance, field)
        data[field] = value
    return json.loads(json.dumps(data, cls=DjangoJSONEncoder))


def record_audit(
    *,
    actor,
    action: str,
    entity: str,
    entity_id,
    before=None,
    after=None,
    using: str = DEFAULT_DB_ALIAS,
) -> AuditLog:
    """
    Append one audit row.

    Args:
        actor: User performing the action (may be None for system actions)
        action: One of AuditAction
        entity: Entity name, e.g. 'Card'
        entity_id: Primary key of the affected row
        before: Snapshot before the change (None for creates)
        after: Snapshot after the change (None for deletes)
        using: Database alias of the surrounding transaction

    Returns:
        Created AuditLog instance
    """
    return AuditLog.objects.using(using).create(
        actor=actor if actor is not None and actor.pk else None,
        actor_email=getattr(actor, 'email', '') or '',
        action=action,
        entity=entity,
        entity_id=str(entity_id),
        before=before,
        after=after,
    )
