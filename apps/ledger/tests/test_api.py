"""
Transaction and commission endpoint tests.

Tests cover:
- Running recharges and usages through POST /api/transactions/
- Scoped listing with summary
- Commission settlement (pay / cancel)
"""
from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status

from apps.ledger.models import Commission, CommissionStatus, Transaction
from apps.ledger.services import LedgerProcessor


def transaction_url(txn):
    return reverse('ledger:transaction-detail', args=[txn.id])


def commission_url(commission):
    return reverse('ledger:commission-detail', args=[commission.id])


@pytest.fixture
def funded_card(card, establishment_user, establishment_scope):
    LedgerProcessor().recharge(
        card_id=card.id, amount='50.00', actor=establishment_user, scope=establishment_scope,
    )
    card.refresh_from_db()
    return card


@pytest.fixture
def usage(funded_card, establishment_user, establishment_scope):
    return LedgerProcessor().use(
        card_id=funded_card.id, amount='30.00', actor=establishment_user,
        scope=establishment_scope, customer_name='Maria',
    )


# =============================================================================
# TRANSACTIONS
# =============================================================================

@pytest.mark.django_db
class TestTransactionCreate:

    def test_recharge(self, establishment_client, card):
        response = establishment_client.post(reverse('ledger:transaction-list'), {
            'kind': 'RECHARGE',
            'amount': '25.00',
            'card_id': str(card.id),
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['kind'] == 'RECHARGE'
        assert response.data['balance_after'] == '25.00'
        assert response.data['commission'] is None

    def test_usage_returns_commission(self, establishment_client, funded_card):
        response = establishment_client.post(reverse('ledger:transaction-list'), {
            'kind': 'USAGE',
            'amount': '30.00',
            'card_id': str(funded_card.id),
            'customer_name': 'Maria',
            'receipt': 'NF-123',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['balance_after'] == '20.00'
        assert response.data['receipt'] == 'NF-123'
        assert response.data['commission']['amount'] == '4.50'
        assert response.data['commission']['status'] == CommissionStatus.PENDING

    def test_manager_names_establishment(self, franchisee_client, card, establishment):
        response = franchisee_client.post(reverse('ledger:transaction-list'), {
            'kind': 'RECHARGE',
            'amount': '10.00',
            'card_id': str(card.id),
            'establishment_id': str(establishment.id),
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert str(response.data['establishment']) == str(establishment.id)

    def test_insufficient_balance(self, establishment_client, funded_card):
        response = establishment_client.post(reverse('ledger:transaction-list'), {
            'kind': 'USAGE',
            'amount': '50.01',
            'card_id': str(funded_card.id),
        }, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.data['code'] == 'insufficient_balance'
        assert Transaction.objects.count() == 1

    @pytest.mark.parametrize('payload', [
        {'kind': 'REFUND', 'amount': '1.00'},
        {'kind': 'USAGE', 'amount': '0'},
        {'kind': 'USAGE', 'amount': '-3.00'},
        {'kind': 'USAGE'},
    ])
    def test_invalid_payload(self, establishment_client, funded_card, payload):
        response = establishment_client.post(
            reverse('ledger:transaction-list'),
            {**payload, 'card_id': str(funded_card.id)},
            format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'validation'

    def test_other_franchisee_card(self, establishment_client, other_card):
        response = establishment_client.post(reverse('ledger:transaction-list'), {
            'kind': 'RECHARGE',
            'amount': '10.00',
            'card_id': str(other_card.id),
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_requires_authentication(self, api_client, card):
        response = api_client.post(reverse('ledger:transaction-list'), {}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestTransactionQueries:

    def test_list_with_summary(self, establishment_client, usage):
        response = establishment_client.get(reverse('ledger:transaction-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2
        summary = response.data['summary']
        assert summary['count'] == 2
        assert summary['volume'] == Decimal('80.00')
        assert summary['average'] == Decimal('40.00')
        assert summary['by_status']['COMPLETED']['count'] == 2
        assert summary['by_status']['FAILED'] == {'count': 0, 'volume': Decimal('0.00')}

    def test_filter_by_kind(self, establishment_client, usage):
        response = establishment_client.get(reverse('ledger:transaction-list'), {'kind': 'USAGE'})

        assert response.data['count'] == 1
        assert response.data['results'][0]['customer_name'] == 'Maria'

    def test_other_franchisee_sees_nothing(self, other_franchisee_client, usage):
        response = other_franchisee_client.get(reverse('ledger:transaction-list'))

        assert response.data['count'] == 0
        assert response.data['summary']['volume'] == Decimal('0.00')

    def test_retrieve_with_commission(self, franchisee_client, usage):
        response = franchisee_client.get(transaction_url(usage.transaction))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['commission']['amount'] == '4.50'

    def test_retrieve_out_of_scope(self, sibling_establishment_client, usage):
        response = sibling_establishment_client.get(transaction_url(usage.transaction))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_invalid_date_range(self, franchisor_client):
        response = franchisor_client.get(reverse('ledger:transaction-list'), {
            'date_from': '2026-02-01',
            'date_to': '2026-01-01',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# COMMISSIONS
# =============================================================================

@pytest.mark.django_db
class TestCommissions:

    def test_list_with_summary(self, franchisee_client, usage):
        response = franchisee_client.get(reverse('ledger:commission-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['summary']['pending_total'] == Decimal('4.50')
        assert response.data['summary']['paid_total'] == Decimal('0.00')

    def test_pay(self, franchisor_client, usage):
        commission = usage.commission

        response = franchisor_client.post(reverse('ledger:commission-pay', args=[commission.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == CommissionStatus.PAID
        assert response.data['paid_at'] is not None

    def test_paid_commission_cannot_be_cancelled(self, franchisor_client, usage):
        commission = usage.commission
        franchisor_client.post(reverse('ledger:commission-pay', args=[commission.id]))

        response = franchisor_client.delete(commission_url(commission))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['code'] == 'invalid_transition'
        assert response.data['current'] == 'PAID'
        commission.refresh_from_db()
        assert commission.status == CommissionStatus.PAID

    def test_cancel_keeps_row(self, franchisor_client, usage):
        commission = usage.commission

        response = franchisor_client.delete(commission_url(commission))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == CommissionStatus.CANCELLED
        assert Commission.objects.filter(id=commission.id, status=CommissionStatus.CANCELLED).exists()

    def test_franchisee_cannot_settle(self, franchisee_client, usage):
        response = franchisee_client.post(reverse('ledger:commission-pay', args=[usage.commission.id]))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_establishment_cannot_cancel(self, establishment_client, usage):
        response = establishment_client.delete(commission_url(usage.commission))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_missing_commission(self, franchisor_client):
        response = franchisor_client.post(
            reverse('ledger:commission-pay', args=['00000000-0000-0000-0000-000000000000'])
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
