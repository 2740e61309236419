"""
Best-effort linkage of local organisations to gateway customers.

The local franchisee or establishment is always created; the gateway call
runs after the surrounding transaction commits and its outcome only moves
the row's ``external_linkage`` between UNLINKED, LINKED and LINK_FAILED.
Retrying LINK_FAILED rows is left to a separate reconciliation job.
"""
import logging
from functools import partial
from typing import Optional

from django.db import transaction

from apps.franchises.gateway import GatewayError, PaymentGateway, get_payment_gateway

logger = logging.getLogger(__name__)


def link_external_customer(instance, *, gateway: Optional[PaymentGateway] = None):
    """
    Create the gateway customer for a Franchisee or Establishment.

    Gateway failures are recorded on the row and logged, never raised.

    Returns:
        The same instance with its linkage fields updated
    """
    gateway = gateway or get_payment_gateway()
    try:
        customer_id = gateway.create_customer(
            name=instance.name,
            document=instance.cnpj,
            email=instance.email,
            phone=instance.phone,
        )
    except GatewayError as e:
        logger.warning(
            'Gateway linkage failed for %s %s: %s',
            instance._meta.model_name, instance.pk, e,
        )
        instance.mark_link_failed(str(e))
        return instance

    instance.mark_linked(customer_id)
    return instance


def schedule_external_linkage(instance) -> None:
    """Run ``link_external_customer`` once the current transaction commits."""
    transaction.on_commit(partial(_link_after_commit, type(instance), instance.pk))


def _link_after_commit(model, pk):
    try:
        instance = model.objects.get(pk=pk)
    except model.DoesNotExist:
        logger.warning('Skipping gateway linkage, %s %s no longer exists', model.__name__, pk)
        return
    link_external_customer(instance)
