from rest_framework import viewsets, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.scope import ScopedViewMixin
from apps.core.pagination import StandardPagination

from .serializers import (
    CardRequestCreateSerializer,
    CardRequestFilterSerializer,
    CardRequestSerializer,
    CardRequestUpdateSerializer,
)
from .services import (
    cancel_request,
    create_request,
    get_request,
    list_requests,
    summarize_requests,
    update_request,
)


class CardRequestViewSet(ScopedViewMixin, viewsets.GenericViewSet):
    """
    Requests for physical cards.

    list: Requests in scope plus a summary
    create: Open a request (establishments for themselves, managers for any
        establishment in scope)
    retrieve: Request details
    update / partial_update: Move status, set stage dates, edit notes
    destroy: Cancel a pending request; the row is kept as DENIED
    """

    serializer_class = CardRequestSerializer
    pagination_class = StandardPagination
    permission_classes = [IsAuthenticated]

    def list(self, request):
        filters = CardRequestFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        params = filters.validated_data
        queryset = list_requests(
            scope=self.scope,
            status=params.get('status'),
            franchisee_id=params.get('franchisee'),
            establishment_id=params.get('establishment'),
        )
        page = self.paginate_queryset(queryset)
        response = self.get_paginated_response(CardRequestSerializer(page, many=True).data)
        response.data['summary'] = summarize_requests(queryset)
        return response

    @extend_schema(request=CardRequestCreateSerializer, responses={201: CardRequestSerializer})
    def create(self, request):
        serializer = CardRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        card_request = create_request(actor=request.user, scope=self.scope, **serializer.validated_data)
        return Response(CardRequestSerializer(card_request).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        card_request = get_request(request_id=pk, scope=self.scope)
        return Response(CardRequestSerializer(card_request).data)

    @extend_schema(request=CardRequestUpdateSerializer, responses={200: CardRequestSerializer})
    def update(self, request, pk=None):
        serializer = CardRequestUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        card_request = update_request(
            request_id=pk,
            actor=request.user,
            scope=self.scope,
            **serializer.validated_data,
        )
        return Response(CardRequestSerializer(card_request).data)

    @extend_schema(request=CardRequestUpdateSerializer, responses={200: CardRequestSerializer})
    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    @extend_schema(responses={200: CardRequestSerializer})
    def destroy(self, request, pk=None):
        card_request = cancel_request(request_id=pk, actor=request.user, scope=self.scope)
        return Response(CardRequestSerializer(card_request).data)
