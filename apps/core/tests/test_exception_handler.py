from decimal import Decimal

from django.db import IntegrityError
from django.http import Http404
from rest_framework import serializers, status

from apps.core.exception_handler import ledger_exception_handler
from apps.core.exceptions import (
    ConflictError,
    InsufficientBalance,
    InvalidTransition,
    ScopeForbidden,
)


def handle(exc):
    return ledger_exception_handler(exc, {'view': None})


class TestErrorShape:
    """Every error is rendered as {error, code, status}."""

    def test_domain_error(self):
        response = handle(ScopeForbidden('This card is outside your scope.'))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data == {
            'error': 'This card is outside your scope.',
            'code': 'forbidden',
            'status': 403,
        }

    def test_insufficient_balance_carries_amounts(self):
        response = handle(InsufficientBalance(available=Decimal('1.50'), requested=Decimal('3.00')))

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.data['code'] == 'insufficient_balance'
        assert response.data['available'] == '1.50'
        assert response.data['requested'] == '3.00'

    def test_invalid_transition_carries_states(self):
        response = handle(InvalidTransition('PAID', 'CANCELLED', entity='commission'))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['code'] == 'invalid_transition'
        assert response.data['current'] == 'PAID'
        assert response.data['target'] == 'CANCELLED'

    def test_serializer_errors_become_validation(self):
        response = handle(serializers.ValidationError({'amount': ['This field is required.']}))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'validation'
        assert response.data['error'] == 'Invalid input.'
        assert 'amount' in response.data['details']

    def test_http404_becomes_not_found(self):
        response = handle(Http404())

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'not_found'

    def test_integrity_error_becomes_conflict(self):
        response = handle(IntegrityError('UNIQUE constraint failed: cards.code'))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['code'] == 'conflict'

    def test_unexpected_error_becomes_internal(self):
        response = handle(RuntimeError('boom'))

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {'error': 'Internal server error', 'code': 'internal', 'status': 500}

    def test_conflict_subclass_keeps_kind(self):
        class DuplicateThing(ConflictError):
            default_code = 'duplicate_thing'

        response = handle(DuplicateThing('Already there.'))

        assert response.data['code'] == 'conflict'
        assert response.data['error'] == 'Already there.'
