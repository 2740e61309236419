from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'ledger'

router = DefaultRouter()
router.register(r'transactions', views.TransactionViewSet, basename='transaction')
router.register(r'commissions', views.CommissionViewSet, basename='commission')

urlpatterns = [
    # GET    /api/transactions/              - List transactions + summary
    # POST   /api/transactions/              - Recharge or usage
    # GET    /api/transactions/{id}/         - Transaction with commission
    # GET    /api/commissions/               - List commissions + totals
    # GET    /api/commissions/{id}/          - Commission details
    # POST   /api/commissions/{id}/pay/      - Mark as paid
    # DELETE /api/commissions/{id}/          - Cancel
    path('', include(router.urls)),
]
