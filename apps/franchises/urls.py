from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'franchises'

router = DefaultRouter()
router.register(r'franchisees', views.FranchiseeViewSet, basename='franchisee')
router.register(r'establishments', views.EstablishmentViewSet, basename='establishment')

urlpatterns = [
    # GET    /api/franchisees/          - List franchisees
    # POST   /api/franchisees/          - Create franchisee (franchisor)
    # GET    /api/franchisees/{id}/     - Franchisee details
    # PATCH  /api/franchisees/{id}/     - Update franchisee / commission rate
    # DELETE /api/franchisees/{id}/     - Delete franchisee (franchisor)
    # GET    /api/establishments/       - List establishments
    # POST   /api/establishments/       - Create establishment
    # GET    /api/establishments/{id}/  - Establishment details
    # PATCH  /api/establishments/{id}/  - Update establishment details
    # DELETE /api/establishments/{id}/  - Delete establishment
    # POST   /api/establishments/{id}/status/ - Approve or deactivate (franchisor)
    path('', include(router.urls)),
]
