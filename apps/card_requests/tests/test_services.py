"""
Card request service tests.

Tests cover:
- Creation rules per role
- Status flow and date stamping
- Explicit stage dates
- Cancellation
- Summary aggregation
"""
from datetime import timedelta

import pytest
from django.utils import timezone

from apps.audit.models import AuditAction, AuditLog
from apps.card_requests.models import CardRequest, RequestStatus
from apps.card_requests.services import (
    CardRequestNotFoundError,
    InvalidRequestDatesError,
    RequestNotCancellableError,
    cancel_request,
    create_request,
    get_request,
    list_requests,
    summarize_requests,
    update_request,
)
from apps.core.exceptions import InvalidTransition, ScopeForbidden, ValidationFailed
from apps.franchises.services import EstablishmentNotFoundError


@pytest.fixture
def pending_request(establishment_user, establishment_scope):
    return create_request(actor=establishment_user, scope=establishment_scope, quantity=50, notes='Para o balcão')


# =============================================================================
# CREATE
# =============================================================================

@pytest.mark.django_db
class TestCreateRequest:

    def test_establishment_requests_for_itself(self, establishment_user, establishment_scope, establishment, franchisee):
        card_request = create_request(actor=establishment_user, scope=establishment_scope, quantity=50)

        assert card_request.status == RequestStatus.PENDING
        assert card_request.establishment_id == establishment.id
        assert card_request.franchisee_id == franchisee.id
        assert card_request.requested_by == establishment_user
        assert AuditLog.objects.filter(
            entity='CardRequest', entity_id=str(card_request.id), action=AuditAction.CREATE,
        ).exists()

    def test_establishment_cannot_request_for_sibling(
        self, establishment_user, establishment_scope, sibling_establishment,
    ):
        with pytest.raises(ScopeForbidden):
            create_request(
                actor=establishment_user, scope=establishment_scope,
                quantity=10, establishment_id=sibling_establishment.id,
            )

    def test_franchisee_names_establishment(self, franchisee_user, franchisee_scope, sibling_establishment):
        card_request = create_request(
            actor=franchisee_user, scope=franchisee_scope,
            quantity=10, establishment_id=sibling_establishment.id,
        )

        assert card_request.establishment_id == sibling_establishment.id

    def test_franchisee_cannot_request_for_other_network(
        self, franchisee_user, franchisee_scope, other_establishment,
    ):
        with pytest.raises(ScopeForbidden):
            create_request(
                actor=franchisee_user, scope=franchisee_scope,
                quantity=10, establishment_id=other_establishment.id,
            )

    def test_manager_must_name_establishment(self, franchisor_user, franchisor_scope):
        with pytest.raises(ValidationFailed):
            create_request(actor=franchisor_user, scope=franchisor_scope, quantity=10)

    def test_missing_establishment(self, franchisor_user, franchisor_scope):
        with pytest.raises(EstablishmentNotFoundError):
            create_request(
                actor=franchisor_user, scope=franchisor_scope, quantity=10,
                establishment_id='00000000-0000-0000-0000-000000000000',
            )

    @pytest.mark.parametrize('quantity', [0, 1001, -5])
    def test_quantity_range(self, establishment_user, establishment_scope, quantity):
        with pytest.raises(ValidationFailed):
            create_request(actor=establishment_user, scope=establishment_scope, quantity=quantity)

        assert not CardRequest.objects.exists()


# =============================================================================
# STATUS FLOW
# =============================================================================

@pytest.mark.django_db
class TestUpdateRequest:

    def test_full_flow_stamps_dates(self, pending_request, franchisee_user, franchisee_scope):
        kwargs = {'request_id': pending_request.id, 'actor': franchisee_user, 'scope': franchisee_scope}

        approved = update_request(status=RequestStatus.APPROVED, **kwargs)
        assert approved.approved_at is not None
        assert approved.shipped_at is None

        shipped = update_request(status=RequestStatus.SHIPPED, **kwargs)
        assert shipped.shipped_at >= shipped.approved_at

        delivered = update_request(status=RequestStatus.DELIVERED, **kwargs)
        assert delivered.status == RequestStatus.DELIVERED
        assert delivered.delivered_at >= delivered.shipped_at

        actions = set(
            AuditLog.objects.filter(entity_id=str(pending_request.id))
            .values_list('action', flat=True)
        )
        assert actions == {AuditAction.CREATE, AuditAction.STATUS_CHANGE}

    def test_skipping_a_stage_is_refused(self, pending_request, franchisee_user, franchisee_scope):
        with pytest.raises(InvalidTransition):
            update_request(
                request_id=pending_request.id, actor=franchisee_user,
                scope=franchisee_scope, status=RequestStatus.SHIPPED,
            )

    def test_denied_is_terminal(self, pending_request, franchisor_user, franchisor_scope):
        update_request(
            request_id=pending_request.id, actor=franchisor_user,
            scope=franchisor_scope, status=RequestStatus.DENIED,
        )

        with pytest.raises(InvalidTransition):
            update_request(
                request_id=pending_request.id, actor=franchisor_user,
                scope=franchisor_scope, status=RequestStatus.APPROVED,
            )

    def test_same_status_is_refused(self, pending_request, franchisee_user, franchisee_scope):
        with pytest.raises(InvalidTransition) as exc_info:
            update_request(
                request_id=pending_request.id, actor=franchisee_user,
                scope=franchisee_scope, status=RequestStatus.PENDING,
            )

        assert exc_info.value.current == RequestStatus.PENDING
        assert exc_info.value.target == RequestStatus.PENDING
        assert not AuditLog.objects.filter(
            entity_id=str(pending_request.id), action=AuditAction.UPDATE,
        ).exists()

    def test_denied_again_is_refused(
        self, pending_request, franchisor_user, franchisor_scope, establishment_user, establishment_scope,
    ):
        cancel_request(request_id=pending_request.id, actor=establishment_user, scope=establishment_scope)

        with pytest.raises(InvalidTransition):
            update_request(
                request_id=pending_request.id, actor=franchisor_user,
                scope=franchisor_scope, status=RequestStatus.DENIED,
            )

    def test_supplied_date_is_kept(self, pending_request, franchisee_user, franchisee_scope):
        approved_at = timezone.now() - timedelta(days=2)

        card_request = update_request(
            request_id=pending_request.id, actor=franchisee_user, scope=franchisee_scope,
            status=RequestStatus.APPROVED, approved_at=approved_at,
        )

        assert card_request.approved_at == approved_at

    def test_date_for_unreached_stage(self, pending_request, franchisee_user, franchisee_scope):
        with pytest.raises(InvalidRequestDatesError):
            update_request(
                request_id=pending_request.id, actor=franchisee_user, scope=franchisee_scope,
                status=RequestStatus.APPROVED, shipped_at=timezone.now(),
            )

        pending_request.refresh_from_db()
        assert pending_request.status == RequestStatus.PENDING

    def test_dates_out_of_order(self, pending_request, franchisee_user, franchisee_scope):
        kwargs = {'request_id': pending_request.id, 'actor': franchisee_user, 'scope': franchisee_scope}
        update_request(status=RequestStatus.APPROVED, **kwargs)

        with pytest.raises(InvalidRequestDatesError):
            update_request(
                status=RequestStatus.SHIPPED,
                shipped_at=timezone.now() - timedelta(days=10),
                **kwargs,
            )

    def test_establishment_edits_notes_only(self, pending_request, establishment_user, establishment_scope):
        card_request = update_request(
            request_id=pending_request.id, actor=establishment_user,
            scope=establishment_scope, notes='Urgente',
        )
        assert card_request.notes == 'Urgente'

        with pytest.raises(ScopeForbidden):
            update_request(
                request_id=pending_request.id, actor=establishment_user,
                scope=establishment_scope, status=RequestStatus.APPROVED,
            )

    def test_out_of_scope(self, pending_request, other_franchisee_user, other_franchisee_scope):
        with pytest.raises(ScopeForbidden):
            update_request(
                request_id=pending_request.id, actor=other_franchisee_user,
                scope=other_franchisee_scope, notes='x',
            )


# =============================================================================
# CANCEL
# =============================================================================

@pytest.mark.django_db
class TestCancelRequest:

    def test_cancel_pending(self, pending_request, establishment_user, establishment_scope):
        card_request = cancel_request(
            request_id=pending_request.id, actor=establishment_user, scope=establishment_scope,
        )

        assert card_request.status == RequestStatus.DENIED
        assert card_request.notes.startswith('Para o balcão\nCancelled by caixa@padaria.example on ')
        assert CardRequest.objects.filter(id=pending_request.id).exists()
        assert AuditLog.objects.filter(entity_id=str(pending_request.id), action=AuditAction.CANCEL).exists()

    def test_cancel_approved_is_refused(
        self, pending_request, franchisee_user, franchisee_scope, establishment_user, establishment_scope,
    ):
        update_request(
            request_id=pending_request.id, actor=franchisee_user,
            scope=franchisee_scope, status=RequestStatus.APPROVED,
        )

        with pytest.raises(RequestNotCancellableError) as exc_info:
            cancel_request(request_id=pending_request.id, actor=establishment_user, scope=establishment_scope)

        assert exc_info.value.current == RequestStatus.APPROVED


# =============================================================================
# QUERIES
# =============================================================================

@pytest.mark.django_db
class TestRequestQueries:

    def test_get_missing(self, franchisor_scope):
        with pytest.raises(CardRequestNotFoundError):
            get_request(request_id='00000000-0000-0000-0000-000000000000', scope=franchisor_scope)

    def test_sibling_establishment_cannot_read(self, pending_request, sibling_establishment_scope):
        with pytest.raises(ScopeForbidden):
            get_request(request_id=pending_request.id, scope=sibling_establishment_scope)

    def test_list_is_scoped(self, pending_request, franchisor_scope, other_franchisee_scope, sibling_establishment_scope):
        assert list(list_requests(scope=franchisor_scope)) == [pending_request]
        assert not list_requests(scope=other_franchisee_scope).exists()
        assert not list_requests(scope=sibling_establishment_scope).exists()

    def test_summary(
        self, pending_request, franchisee_user, franchisee_scope, establishment_user, establishment_scope,
    ):
        create_request(actor=establishment_user, scope=establishment_scope, quantity=20)
        kwargs = {'request_id': pending_request.id, 'actor': franchisee_user, 'scope': franchisee_scope}
        update_request(status=RequestStatus.APPROVED, **kwargs)
        update_request(status=RequestStatus.SHIPPED, **kwargs)
        update_request(status=RequestStatus.DELIVERED, **kwargs)

        summary = summarize_requests(list_requests(scope=franchisee_scope))

        assert summary['count'] == 2
        assert summary['total_quantity'] == 70
        assert summary['by_status'] == {
            'PENDING': 1, 'APPROVED': 0, 'DENIED': 0, 'SHIPPED': 0, 'DELIVERED': 1,
        }
        assert summary['average_delivery_days'] == 0.0

    def test_summary_of_nothing(self, franchisor_scope):
        summary = summarize_requests(list_requests(scope=franchisor_scope))

        assert summary['count'] == 0
        assert summary['total_quantity'] == 0
        assert summary['average_delivery_days'] is None
