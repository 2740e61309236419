from rest_framework import serializers
from .models import CardRequest, RequestStatus


class CardRequestSerializer(serializers.ModelSerializer):
    establishment_name = serializers.CharField(source='establishment.name', read_only=True)
    franchisee_name = serializers.CharField(source='franchisee.name', read_only=True)
    requested_by_email = serializers.EmailField(
        source='requested_by.email', read_only=True, default=None
    )

    class Meta:
        model = CardRequest
        fields = [
            'id',
            'establishment',
            'establishment_name',
            'franchisee',
            'franchisee_name',
            'quantity',
            'status',
            'notes',
            'requested_by_email',
            'approved_at',
            'shipped_at',
            'delivered_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


# =============================================================================
# Input Serializers
# =============================================================================

class CardRequestCreateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, max_value=1000)
    establishment_id = serializers.UUIDField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class CardRequestUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=RequestStatus.choices, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    approved_at = serializers.DateTimeField(required=False)
    shipped_at = serializers.DateTimeField(required=False)
    delivered_at = serializers.DateTimeField(required=False)


class CardRequestFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=RequestStatus.choices, required=False)
    franchisee = serializers.UUIDField(required=False)
    establishment = serializers.UUIDField(required=False)
