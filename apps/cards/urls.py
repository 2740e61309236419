from django.urls import path
from . import views

app_name = 'cards'

# Card operations share the detail URL (POST ?action=...), so the routes are
# mapped explicitly instead of through a router.
card_list = views.CardViewSet.as_view({
    'get': 'list',
    'post': 'create',
})
card_detail = views.CardViewSet.as_view({
    'get': 'retrieve',
    'patch': 'partial_update',
    'delete': 'destroy',
    'post': 'perform_action',
})

urlpatterns = [
    # GET    /api/cards/                 - List cards
    # POST   /api/cards/                 - Create card
    # GET    /api/cards/{id}/            - Card details
    # PATCH  /api/cards/{id}/            - Update card
    # DELETE /api/cards/{id}/            - Delete card (no transactions)
    # POST   /api/cards/{id}/?action=... - recharge | use | block | activate | expire
    path('', card_list, name='card-list'),
    path('<uuid:pk>/', card_detail, name='card-detail'),
]
