"""
Project-wide DRF exception handler.

Every error leaves the API in one shape:

    {"error": "<message>", "code": "<kind>", "status": <http status>}

Serializer errors additionally carry ``details`` with the per-field messages.
Database integrity failures that escape a service are reported as conflicts;
anything DRF does not recognise is logged and reported as ``internal``.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.db.models import ProtectedError, RestrictedError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import ConflictError, ValidationFailed

logger = logging.getLogger(__name__)

STATUS_KINDS = {
    status.HTTP_400_BAD_REQUEST: 'validation',
    status.HTTP_401_UNAUTHORIZED: 'unauthenticated',
    status.HTTP_403_FORBIDDEN: 'forbidden',
    status.HTTP_404_NOT_FOUND: 'not_found',
    status.HTTP_405_METHOD_NOT_ALLOWED: 'method_not_allowed',
    status.HTTP_409_CONFLICT: 'conflict',
}


def ledger_exception_handler(exc, context):
    """Render domain and framework errors in the shared error shape."""
    if isinstance(exc, (ProtectedError, RestrictedError)):
        exc = ConflictError('The resource is still referenced by other records.')
    elif isinstance(exc, IntegrityError):
        logger.warning('Integrity error surfaced as conflict: %s', exc)
        exc = ConflictError('The request violates a uniqueness or reference constraint.')
    elif isinstance(exc, DjangoValidationError):
        exc = ValidationFailed('; '.join(exc.messages))

    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.error(
            'Unhandled error in %s',
            view.__class__.__name__ if view else 'unknown view',
            exc_info=exc,
        )
        return Response(
            {'error': 'Internal server error', 'code': 'internal', 'status': 500},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    kind = getattr(exc, 'kind', None) or STATUS_KINDS.get(response.status_code, 'error')
    payload = {'code': kind, 'status': response.status_code}

    data = response.data
    if isinstance(data, dict) and set(data) == {'detail'}:
        payload['error'] = str(data['detail'])
    else:
        payload['error'] = 'Invalid input.' if kind == 'validation' else str(data)
        payload['details'] = data

    for attribute in ('available', 'requested', 'current', 'target'):
        value = getattr(exc, attribute, None)
        if value is not None:
            payload[attribute] = str(getattr(value, 'value', value))

    response.data = payload
    return response
