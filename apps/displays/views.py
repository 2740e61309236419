from rest_framework import viewsets, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsFranchisorOrFranchisee
from apps.accounts.scope import ScopedViewMixin
from apps.core.pagination import StandardPagination

from .serializers import (
    DisplayCreateSerializer,
    DisplayFilterSerializer,
    DisplaySerializer,
    DisplayUpdateSerializer,
)
from .services import (
    create_display,
    delete_display,
    get_display,
    list_displays,
    summarize_displays,
    update_display,
)


class DisplayViewSet(ScopedViewMixin, viewsets.GenericViewSet):
    """
    Point-of-sale display units.

    list: Displays in scope plus per-status and per-type counts
    create: Register a unit (franchisor or franchisee)
    retrieve: Display details
    update / partial_update: Status, type, establishment binding, install date
    destroy: Delete a unit that is AVAILABLE
    """

    serializer_class = DisplaySerializer
    pagination_class = StandardPagination
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        if self.action in ['create', 'destroy']:
            return [IsAuthenticated(), IsFranchisorOrFranchisee()]
        return super().get_permissions()

    def list(self, request):
        filters = DisplayFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        params = filters.validated_data
        queryset = list_displays(
            scope=self.scope,
            status=params.get('status'),
            unit_type=params.get('unit_type'),
            franchisee_id=params.get('franchisee'),
            establishment_id=params.get('establishment'),
        )
        page = self.paginate_queryset(queryset)
        response = self.get_paginated_response(DisplaySerializer(page, many=True).data)
        response.data['summary'] = summarize_displays(queryset)
        return response

    @extend_schema(request=DisplayCreateSerializer, responses={201: DisplaySerializer})
    def create(self, request):
        serializer = DisplayCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        display = create_display(actor=request.user, scope=self.scope, **serializer.validated_data)
        return Response(DisplaySerializer(display).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        display = get_display(display_id=pk, scope=self.scope)
        return Response(DisplaySerializer(display).data)

    @extend_schema(request=DisplayUpdateSerializer, responses={200: DisplaySerializer})
    def update(self, request, pk=None):
        serializer = DisplayUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        display = update_display(
            display_id=pk,
            actor=request.user,
            scope=self.scope,
            **serializer.validated_data,
        )
        return Response(DisplaySerializer(display).data)

    @extend_schema(request=DisplayUpdateSerializer, responses={200: DisplaySerializer})
    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        delete_display(display_id=pk, actor=request.user, scope=self.scope)
        return Response(status=status.HTTP_204_NO_CONTENT)
