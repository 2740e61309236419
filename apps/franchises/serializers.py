from rest_framework import serializers
from .models import Establishment, Franchisee, OrganisationStatus


class FranchiseeSerializer(serializers.ModelSerializer):
    """Franchisee with its gateway linkage state."""

    class Meta:
        model = Franchisee
        fields = [
            'id',
            'franchisor',
            'name',
            'cnpj',
            'email',
            'phone',
            'region',
            'commission_rate',
            'status',
            'external_linkage',
            'external_customer_id',
            'external_link_error',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class EstablishmentSerializer(serializers.ModelSerializer):
    franchisee_name = serializers.CharField(source='franchisee.name', read_only=True)

    class Meta:
        model = Establishment
        fields = [
            'id',
            'franchisee',
            'franchisee_name',
            'name',
            'cnpj',
            'email',
            'phone',
            'address',
            'category',
            'status',
            'external_linkage',
            'external_customer_id',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


# =============================================================================
# Input Serializers
# =============================================================================

class FranchiseeCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    cnpj = serializers.CharField(max_length=18)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    region = serializers.CharField(max_length=100, required=False, allow_blank=True)
    commission_rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False
    )
    franchisor_id = serializers.UUIDField(required=False)
    login_password = serializers.CharField(
        required=False, write_only=True, min_length=8, style={'input_type': 'password'}
    )


class FranchiseeUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    email = serializers.EmailField(required=False)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    region = serializers.CharField(max_length=100, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=OrganisationStatus.choices, required=False)
    commission_rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False
    )


class FranchiseeFilterSerializer(serializers.Serializer):
    search = serializers.CharField(required=False)
    region = serializers.CharField(required=False)
    status = serializers.ChoiceField(choices=OrganisationStatus.choices, required=False)


class EstablishmentCreateSerializer(serializers.Serializer):
    franchisee_id = serializers.UUIDField(required=False)
    name = serializers.CharField(max_length=200)
    cnpj = serializers.CharField(max_length=18)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True)
    login_password = serializers.CharField(
        required=False, write_only=True, min_length=8, style={'input_type': 'password'}
    )


class EstablishmentFilterSerializer(serializers.Serializer):
    franchisee = serializers.UUIDField(required=False)
    search = serializers.CharField(required=False)
    status = serializers.ChoiceField(choices=OrganisationStatus.choices, required=False)


class EstablishmentUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    email = serializers.EmailField(required=False)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True)


class EstablishmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrganisationStatus.choices)
