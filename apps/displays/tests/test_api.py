"""
Display endpoint tests.
"""
import pytest
from django.urls import reverse
from rest_framework import status

from apps.displays.models import Display, DisplayStatus
from apps.displays.services import create_display


def display_url(display):
    return reverse('displays:display-detail', args=[display.id])


@pytest.fixture
def installed_display(franchisee_user, franchisee_scope, establishment):
    return create_display(actor=franchisee_user, scope=franchisee_scope, establishment_id=establishment.id)


@pytest.mark.django_db
class TestDisplayEndpoints:

    def test_create_in_stock(self, franchisee_client, franchisee):
        response = franchisee_client.post(reverse('displays:display-list'), {'unit_type': 'TABLE'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == DisplayStatus.AVAILABLE
        assert response.data['franchisee_name'] == franchisee.name

    def test_create_installed(self, franchisee_client, establishment):
        response = franchisee_client.post(
            reverse('displays:display-list'),
            {'establishment_id': str(establishment.id)},
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == DisplayStatus.INSTALLED
        assert response.data['establishment_name'] == establishment.name
        assert response.data['installed_at'] is not None

    def test_establishment_cannot_create(self, establishment_client):
        response = establishment_client.post(reverse('displays:display-list'), {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list_with_summary(self, franchisee_client, installed_display):
        response = franchisee_client.get(reverse('displays:display-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['summary']['by_status']['INSTALLED'] == 1

    def test_other_franchisee_cannot_read(self, other_franchisee_client, installed_display):
        response = other_franchisee_client.get(display_url(installed_display))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unbind(self, franchisee_client, installed_display):
        response = franchisee_client.patch(
            display_url(installed_display), {'establishment_id': None}, format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == DisplayStatus.AVAILABLE
        assert response.data['establishment'] is None
        assert response.data['installed_at'] is None

    def test_establishment_reports_maintenance(self, establishment_client, installed_display):
        response = establishment_client.patch(
            display_url(installed_display), {'status': 'MAINTENANCE'}, format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == DisplayStatus.MAINTENANCE

    def test_establishment_cannot_change_type(self, establishment_client, installed_display):
        response = establishment_client.patch(
            display_url(installed_display), {'unit_type': 'WALL'}, format='json',
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_install_without_establishment(self, franchisee_client):
        create = franchisee_client.post(reverse('displays:display-list'), {}, format='json')

        response = franchisee_client.put(
            reverse('displays:display-detail', args=[create.data['id']]),
            {'status': 'INSTALLED'},
            format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_delete_installed_refused(self, franchisee_client, installed_display):
        response = franchisee_client.delete(display_url(installed_display))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert Display.objects.filter(id=installed_display.id).exists()

    def test_delete_available(self, franchisor_client, installed_display):
        franchisor_client.patch(display_url(installed_display), {'status': 'AVAILABLE'}, format='json')

        response = franchisor_client.delete(display_url(installed_display))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Display.objects.filter(id=installed_display.id).exists()
