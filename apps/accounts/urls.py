from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from . import views

app_name = 'accounts'

urlpatterns = [
    # POST /api/auth/login/           - Email + password -> JWT pair
    # POST /api/auth/token/refresh/   - Refresh -> new access token
    # GET  /api/auth/me/              - Current account
    path('login/', views.login, name='login'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token-refresh'),
    path('me/', views.get_current_user, name='current-user'),
]
