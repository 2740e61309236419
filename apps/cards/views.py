from rest_framework import viewsets, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.accounts.permissions import IsFranchisorOrFranchisee
from apps.accounts.scope import ScopedViewMixin
from apps.core.pagination import StandardPagination
from apps.ledger.serializers import TransactionSerializer
from apps.ledger.services import LedgerProcessor

from .serializers import (
    CardActionQuerySerializer,
    CardCreateSerializer,
    CardFilterSerializer,
    CardSerializer,
    CardUpdateSerializer,
    RechargeInputSerializer,
    UseInputSerializer,
)
from .services import (
    activate_card,
    block_card,
    create_card,
    delete_card,
    expire_card,
    get_card,
    list_cards,
    update_card,
)

STATUS_ACTIONS = {
    'block': block_card,
    'activate': activate_card,
    'expire': expire_card,
}


class CardViewSet(ScopedViewMixin, viewsets.GenericViewSet):
    """
    Prepaid cards.

    list: Cards visible to the caller
    create: Issue an unfunded card (franchisor or franchisee)
    retrieve: Card details
    partial_update: Code, QR payload, customer reference, establishment binding
    destroy: Delete a card without transactions
    perform_action: POST ?action=recharge|use|block|activate|expire
    """

    serializer_class = CardSerializer
    pagination_class = StandardPagination
    permission_classes = [IsAuthenticated]
    processor_class = LedgerProcessor

    def get_permissions(self):
        if self.action in ['create', 'partial_update', 'destroy']:
            return [IsAuthenticated(), IsFranchisorOrFranchisee()]
        return super().get_permissions()

    def get_processor(self) -> LedgerProcessor:
        return self.processor_class()

    def list(self, request):
        filters = CardFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        params = filters.validated_data
        queryset = list_cards(
            scope=self.scope,
            status=params.get('status'),
            franchisee_id=params.get('franchisee'),
            establishment_id=params.get('establishment'),
            search=params.get('search'),
        )
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(CardSerializer(page, many=True).data)

    @extend_schema(request=CardCreateSerializer, responses={201: CardSerializer})
    def create(self, request):
        serializer = CardCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        card = create_card(actor=request.user, scope=self.scope, **serializer.validated_data)
        return Response(CardSerializer(card).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        card = get_card(card_id=pk, scope=self.scope)
        return Response(CardSerializer(card).data)

    @extend_schema(request=CardUpdateSerializer, responses={200: CardSerializer})
    def partial_update(self, request, pk=None):
        serializer = CardUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        card = update_card(card_id=pk, actor=request.user, scope=self.scope, **serializer.validated_data)
        return Response(CardSerializer(card).data)

    def destroy(self, request, pk=None):
        delete_card(card_id=pk, actor=request.user, scope=self.scope)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        parameters=[
            OpenApiParameter(
                'action', str, OpenApiParameter.QUERY, required=True,
                enum=['recharge', 'use', 'block', 'activate', 'expire'],
            ),
        ],
        request=UseInputSerializer,
        responses={200: CardSerializer},
    )
    def perform_action(self, request, pk=None):
        """
        Card operations.

        POST /api/cards/{id}/?action=recharge   Body: {"amount": "50.00"}
        POST /api/cards/{id}/?action=use        Body: {"amount": "30.00", "customer_name": "..."}
        POST /api/cards/{id}/?action=block|activate|expire
        """
        query = CardActionQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        card_action = query.validated_data['action']

        if card_action in STATUS_ACTIONS:
            card = STATUS_ACTIONS[card_action](card_id=pk, actor=request.user, scope=self.scope)
            return Response(CardSerializer(card).data)

        input_class = RechargeInputSerializer if card_action == 'recharge' else UseInputSerializer
        serializer = input_class(data=request.data)
        serializer.is_valid(raise_exception=True)

        processor = self.get_processor()
        operation = processor.recharge if card_action == 'recharge' else processor.use
        entry = operation(card_id=pk, actor=request.user, scope=self.scope, **serializer.validated_data)

        data = CardSerializer(entry.card).data
        data['transaction'] = TransactionSerializer(entry.transaction).data
        return Response(data)
