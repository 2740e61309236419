from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'displays'

# Registered at the include root, so no API root view is wanted here.
router = SimpleRouter()
router.register(r'', views.DisplayViewSet, basename='display')

urlpatterns = [
    # GET    /api/displays/        - List displays + summary
    # POST   /api/displays/        - Register a display
    # GET    /api/displays/{id}/   - Display details
    # PUT    /api/displays/{id}/   - Status, type, binding, install date
    # PATCH  /api/displays/{id}/   - Status, type, binding, install date
    # DELETE /api/displays/{id}/   - Delete (AVAILABLE only)
    path('', include(router.urls)),
]
