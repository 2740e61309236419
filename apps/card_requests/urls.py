from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'card_requests'

# Registered at the include root, so no API root view is wanted here.
router = SimpleRouter()
router.register(r'', views.CardRequestViewSet, basename='request')

urlpatterns = [
    # GET    /api/requests/        - List requests + summary
    # POST   /api/requests/        - Open a request
    # GET    /api/requests/{id}/   - Request details
    # PUT    /api/requests/{id}/   - Status, dates, notes
    # PATCH  /api/requests/{id}/   - Status, dates, notes
    # DELETE /api/requests/{id}/   - Cancel (pending only)
    path('', include(router.urls)),
]
