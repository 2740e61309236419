from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsFranchisor
from apps.accounts.scope import ScopedViewMixin
from apps.core.pagination import StandardPagination

from .serializers import (
    CommissionFilterSerializer,
    CommissionSerializer,
    TransactionCreateSerializer,
    TransactionFilterSerializer,
    TransactionSerializer,
)
from .services import (
    LedgerProcessor,
    cancel_commission,
    get_commission,
    get_transaction,
    list_commissions,
    list_transactions,
    pay_commission,
    summarize_commissions,
    summarize_transactions,
)


class TransactionViewSet(ScopedViewMixin, viewsets.GenericViewSet):
    """
    Card transactions.

    list: Page of transactions plus an aggregate summary of the filtered set
    create: Run a recharge or usage through the ledger processor
    retrieve: Transaction with its commission
    """

    serializer_class = TransactionSerializer
    pagination_class = StandardPagination
    permission_classes = [IsAuthenticated]
    processor_class = LedgerProcessor

    def get_processor(self) -> LedgerProcessor:
        return self.processor_class()

    def list(self, request):
        filters = TransactionFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        params = filters.validated_data
        queryset = list_transactions(
            scope=self.scope,
            kind=params.get('kind'),
            status=params.get('status'),
            card_id=params.get('card'),
            franchisee_id=params.get('franchisee'),
            establishment_id=params.get('establishment'),
            min_amount=params.get('min_amount'),
            max_amount=params.get('max_amount'),
            date_from=params.get('date_from'),
            date_to=params.get('date_to'),
            search=params.get('search'),
        )
        page = self.paginate_queryset(queryset)
        response = self.get_paginated_response(TransactionSerializer(page, many=True).data)
        response.data['summary'] = summarize_transactions(queryset)
        return response

    @extend_schema(request=TransactionCreateSerializer, responses={201: TransactionSerializer})
    def create(self, request):
        serializer = TransactionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry = self.get_processor().execute(
            actor=request.user,
            scope=self.scope,
            **serializer.validated_data,
        )
        return Response(TransactionSerializer(entry.transaction).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        txn = get_transaction(transaction_id=pk, scope=self.scope)
        return Response(TransactionSerializer(txn).data)


class CommissionViewSet(ScopedViewMixin, viewsets.GenericViewSet):
    """
    Franchisee commissions.

    list: Page of commissions plus totals
    retrieve: Commission details
    pay: Mark as paid (franchisor only)
    destroy: Cancel (franchisor only); paid commissions cannot be cancelled
    """

    serializer_class = CommissionSerializer
    pagination_class = StandardPagination
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        if self.action in ['pay', 'destroy']:
            return [IsAuthenticated(), IsFranchisor()]
        return super().get_permissions()

    def list(self, request):
        filters = CommissionFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        params = filters.validated_data
        queryset = list_commissions(
            scope=self.scope,
            status=params.get('status'),
            franchisee_id=params.get('franchisee'),
            establishment_id=params.get('establishment'),
            date_from=params.get('date_from'),
            date_to=params.get('date_to'),
        )
        page = self.paginate_queryset(queryset)
        response = self.get_paginated_response(CommissionSerializer(page, many=True).data)
        response.data['summary'] = summarize_commissions(queryset)
        return response

    def retrieve(self, request, pk=None):
        commission = get_commission(commission_id=pk, scope=self.scope)
        return Response(CommissionSerializer(commission).data)

    @extend_schema(request=None, responses={200: CommissionSerializer})
    @action(detail=True, methods=['post'])
    def pay(self, request, pk=None):
        """
        Mark a pending commission as paid.

        POST /api/commissions/{id}/pay/
        """
        commission = pay_commission(commission_id=pk, actor=request.user, scope=self.scope)
        return Response(CommissionSerializer(commission).data)

    @extend_schema(responses={200: CommissionSerializer})
    def destroy(self, request, pk=None):
        """Cancel a pending commission; the row is kept as CANCELLED."""
        commission = cancel_commission(commission_id=pk, actor=request.user, scope=self.scope)
        return Response(CommissionSerializer(commission).data)
