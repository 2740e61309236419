from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsFranchisor, IsFranchisorOrFranchisee
from apps.accounts.scope import ScopedViewMixin
from apps.core.pagination import StandardPagination

from .serializers import (
    EstablishmentCreateSerializer,
    EstablishmentFilterSerializer,
    EstablishmentSerializer,
    EstablishmentStatusSerializer,
    EstablishmentUpdateSerializer,
    FranchiseeCreateSerializer,
    FranchiseeFilterSerializer,
    FranchiseeSerializer,
    FranchiseeUpdateSerializer,
)
from .services import (
    create_establishment,
    create_franchisee,
    delete_establishment,
    delete_franchisee,
    get_establishment,
    get_franchisee,
    list_establishments,
    list_franchisees,
    set_establishment_status,
    update_establishment,
    update_franchisee,
)


class FranchiseeViewSet(ScopedViewMixin, viewsets.GenericViewSet):
    """
    Franchisees of the network.

    list: Franchisees visible to the caller
    create: Register a franchisee (franchisor only)
    retrieve: Franchisee details
    partial_update: Contact details; commission rate (franchisor only)
    destroy: Delete a franchisee without dependent records (franchisor only)
    """

    serializer_class = FranchiseeSerializer
    pagination_class = StandardPagination
    permission_classes = [IsAuthenticated, IsFranchisorOrFranchisee]

    def get_permissions(self):
        if self.action in ['create', 'destroy']:
            return [IsAuthenticated(), IsFranchisor()]
        return super().get_permissions()

    def list(self, request):
        filters = FranchiseeFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        queryset = list_franchisees(scope=self.scope, **filters.validated_data)
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(FranchiseeSerializer(page, many=True).data)

    @extend_schema(request=FranchiseeCreateSerializer, responses={201: FranchiseeSerializer})
    def create(self, request):
        serializer = FranchiseeCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        franchisee = create_franchisee(
            actor=request.user,
            scope=self.scope,
            **serializer.validated_data,
        )
        return Response(FranchiseeSerializer(franchisee).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        franchisee = get_franchisee(franchisee_id=pk, scope=self.scope)
        return Response(FranchiseeSerializer(franchisee).data)

    @extend_schema(request=FranchiseeUpdateSerializer, responses={200: FranchiseeSerializer})
    def partial_update(self, request, pk=None):
        serializer = FranchiseeUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        franchisee = update_franchisee(
            franchisee_id=pk,
            actor=request.user,
            scope=self.scope,
            **serializer.validated_data,
        )
        return Response(FranchiseeSerializer(franchisee).data)

    def destroy(self, request, pk=None):
        delete_franchisee(franchisee_id=pk, actor=request.user, scope=self.scope)
        return Response(status=status.HTTP_204_NO_CONTENT)


class EstablishmentViewSet(ScopedViewMixin, viewsets.GenericViewSet):
    """
    Establishments of the network.

    list: Establishments visible to the caller
    create: Register an establishment (franchisor or franchisee)
    retrieve: Establishment details
    partial_update: Contact details
    destroy: Delete an establishment without dependent records
    set_status: Approve or deactivate (franchisor only)
    """

    serializer_class = EstablishmentSerializer
    pagination_class = StandardPagination
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        if self.action in ['create', 'destroy']:
            return [IsAuthenticated(), IsFranchisorOrFranchisee()]
        if self.action == 'set_status':
            return [IsAuthenticated(), IsFranchisor()]
        return super().get_permissions()

    def list(self, request):
        filters = EstablishmentFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        params = filters.validated_data
        queryset = list_establishments(
            scope=self.scope,
            franchisee_id=params.get('franchisee'),
            search=params.get('search'),
            status=params.get('status'),
        )
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(EstablishmentSerializer(page, many=True).data)

    @extend_schema(request=EstablishmentCreateSerializer, responses={201: EstablishmentSerializer})
    def create(self, request):
        serializer = EstablishmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        establishment = create_establishment(
            actor=request.user,
            scope=self.scope,
            **serializer.validated_data,
        )
        return Response(EstablishmentSerializer(establishment).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        establishment = get_establishment(establishment_id=pk, scope=self.scope)
        return Response(EstablishmentSerializer(establishment).data)

    @extend_schema(request=EstablishmentUpdateSerializer, responses={200: EstablishmentSerializer})
    def partial_update(self, request, pk=None):
        serializer = EstablishmentUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        establishment = update_establishment(
            establishment_id=pk,
            actor=request.user,
            scope=self.scope,
            **serializer.validated_data,
        )
        return Response(EstablishmentSerializer(establishment).data)

    def destroy(self, request, pk=None):
        delete_establishment(establishment_id=pk, actor=request.user, scope=self.scope)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=EstablishmentStatusSerializer, responses={200: EstablishmentSerializer})
    @action(detail=True, methods=['post'], url_path='status')
    def set_status(self, request, pk=None):
        """
        Approve or deactivate an establishment.

        POST /api/establishments/{id}/status/   Body: {"status": "ACTIVE"}
        """
        serializer = EstablishmentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        establishment = set_establishment_status(
            establishment_id=pk,
            status=serializer.validated_data['status'],
            actor=request.user,
            scope=self.scope,
        )
        return Response(EstablishmentSerializer(establishment).data)
