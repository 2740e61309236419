from unittest.mock import patch

import pytest
from django.urls import reverse
from rest_framework import status

from apps.cards.models import Card
from apps.franchises.models import Establishment, Franchisee, OrganisationStatus


@pytest.fixture(autouse=True)
def no_gateway_calls():
    with patch('apps.franchises.services.network_management.schedule_external_linkage'):
        yield


# =============================================================================
# Franchisee Endpoints
# =============================================================================

@pytest.mark.django_db
class TestFranchiseeEndpoints:
    """Tests for /api/franchisees/"""

    def test_franchisor_creates_franchisee(self, franchisor_client):
        url = reverse('franchises:franchisee-list')
        response = franchisor_client.post(url, {
            'name': 'Franquia Sul',
            'cnpj': '77.777.777/0001-77',
            'email': 'sul@example.com',
            'commission_rate': '12.00',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['commission_rate'] == '12.00'
        assert response.data['external_linkage'] == 'UNLINKED'
        assert Franchisee.objects.filter(cnpj='77.777.777/0001-77').exists()

    def test_franchisee_cannot_create_franchisee(self, franchisee_client):
        url = reverse('franchises:franchisee-list')
        response = franchisee_client.post(url, {
            'name': 'Rogue',
            'cnpj': '88.888.888/0001-88',
            'email': 'rogue@example.com',
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'forbidden'

    def test_establishment_cannot_list_franchisees(self, establishment_client):
        response = establishment_client.get(reverse('franchises:franchisee-list'))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_franchisee_lists_only_itself(self, franchisee_client, franchisee, other_franchisee):
        response = franchisee_client.get(reverse('franchises:franchisee-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['id'] == str(franchisee.id)

    def test_retrieve_other_franchisee_is_forbidden(self, franchisee_client, other_franchisee):
        url = reverse('franchises:franchisee-detail', kwargs={'pk': other_franchisee.id})
        response = franchisee_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_franchisor_changes_rate(self, franchisor_client, franchisee):
        url = reverse('franchises:franchisee-detail', kwargs={'pk': franchisee.id})
        response = franchisor_client.patch(url, {'commission_rate': '18.50'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['commission_rate'] == '18.50'

    def test_rate_out_of_range(self, franchisor_client, franchisee):
        url = reverse('franchises:franchisee-detail', kwargs={'pk': franchisee.id})
        response = franchisor_client.patch(url, {'commission_rate': '150'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'validation'


    def test_franchisor_deletes_franchisee(self, franchisor_client, other_franchisee):
        url = reverse('franchises:franchisee-detail', kwargs={'pk': other_franchisee.id})
        response = franchisor_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Franchisee.objects.filter(id=other_franchisee.id).exists()

    def test_delete_franchisee_in_use(self, franchisor_client, franchisee, establishment):
        url = reverse('franchises:franchisee-detail', kwargs={'pk': franchisee.id})
        response = franchisor_client.delete(url)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['code'] == 'conflict'

    def test_franchisee_cannot_delete_itself(self, franchisee_client, franchisee):
        url = reverse('franchises:franchisee-detail', kwargs={'pk': franchisee.id})
        response = franchisee_client.delete(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

# =============================================================================
# Establishment Endpoints
# =============================================================================

@pytest.mark.django_db
class TestEstablishmentEndpoints:
    """Tests for /api/establishments/"""

    def test_franchisee_creates_establishment(self, franchisee_client, franchisee):
        url = reverse('franchises:establishment-list')
        response = franchisee_client.post(url, {
            'name': 'Farmácia Boa',
            'cnpj': '99.999.999/0001-99',
            'email': 'farmacia@example.com',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert str(response.data['franchisee']) == str(franchisee.id)

    def test_establishment_cannot_create(self, establishment_client):
        url = reverse('franchises:establishment-list')
        response = establishment_client.post(url, {
            'name': 'Farmácia Boa',
            'cnpj': '99.999.999/0001-99',
            'email': 'farmacia@example.com',
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_establishment_sees_itself_only(self, establishment_client, establishment, sibling_establishment):
        response = establishment_client.get(reverse('franchises:establishment-list'))

        assert response.data['count'] == 1
        assert response.data['results'][0]['id'] == str(establishment.id)

    def test_retrieve_missing(self, franchisor_client):
        url = reverse(
            'franchises:establishment-detail',
            kwargs={'pk': '00000000-0000-0000-0000-000000000000'},
        )
        response = franchisor_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'not_found'

    def test_establishment_updates_own_details(self, establishment_client, establishment):
        url = reverse('franchises:establishment-detail', kwargs={'pk': establishment.id})
        response = establishment_client.patch(url, {'category': 'Confeitaria'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['category'] == 'Confeitaria'

    def test_update_sibling_is_forbidden(self, establishment_client, sibling_establishment):
        url = reverse('franchises:establishment-detail', kwargs={'pk': sibling_establishment.id})
        response = establishment_client.patch(url, {'category': 'Confeitaria'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_franchisor_deactivates_establishment(self, franchisor_client, establishment):
        url = reverse('franchises:establishment-set-status', kwargs={'pk': establishment.id})
        response = franchisor_client.post(url, {'status': 'INACTIVE'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == OrganisationStatus.INACTIVE

    def test_repeated_status_is_a_conflict(self, franchisor_client, establishment):
        url = reverse('franchises:establishment-set-status', kwargs={'pk': establishment.id})
        response = franchisor_client.post(url, {'status': 'ACTIVE'}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['current'] == 'ACTIVE'

    def test_franchisee_cannot_change_status(self, franchisee_client, establishment):
        url = reverse('franchises:establishment-set-status', kwargs={'pk': establishment.id})
        response = franchisee_client.post(url, {'status': 'INACTIVE'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_franchisee_deletes_establishment(self, franchisee_client, sibling_establishment):
        url = reverse('franchises:establishment-detail', kwargs={'pk': sibling_establishment.id})
        response = franchisee_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Establishment.objects.filter(id=sibling_establishment.id).exists()

    def test_delete_establishment_in_use(self, franchisee_client, franchisee, establishment):
        Card.objects.create(code='CM-DEL-2', franchisee=franchisee, establishment=establishment)
        url = reverse('franchises:establishment-detail', kwargs={'pk': establishment.id})
        response = franchisee_client.delete(url)

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_establishment_cannot_delete(self, establishment_client, establishment):
        url = reverse('franchises:establishment-detail', kwargs={'pk': establishment.id})
        response = establishment_client.delete(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN
