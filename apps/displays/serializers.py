from rest_framework import serializers
from .models import Display, DisplayStatus, UnitType


class DisplaySerializer(serializers.ModelSerializer):
    franchisee_name = serializers.CharField(source='franchisee.name', read_only=True)
    establishment_name = serializers.CharField(
        source='establishment.name', read_only=True, default=None
    )

    class Meta:
        model = Display
        fields = [
            'id',
            'unit_type',
            'status',
            'franchisee',
            'franchisee_name',
            'establishment',
            'establishment_name',
            'installed_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


# =============================================================================
# Input Serializers
# =============================================================================

class DisplayCreateSerializer(serializers.Serializer):
    unit_type = serializers.ChoiceField(choices=UnitType.choices, required=False)
    franchisee_id = serializers.UUIDField(required=False)
    establishment_id = serializers.UUIDField(required=False, allow_null=True)
    installed_at = serializers.DateTimeField(required=False, allow_null=True)


class DisplayUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=DisplayStatus.choices, required=False)
    unit_type = serializers.ChoiceField(choices=UnitType.choices, required=False)
    establishment_id = serializers.UUIDField(required=False, allow_null=True)
    installed_at = serializers.DateTimeField(required=False, allow_null=True)


class DisplayFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=DisplayStatus.choices, required=False)
    unit_type = serializers.ChoiceField(choices=UnitType.choices, required=False)
    franchisee = serializers.UUIDField(required=False)
    establishment = serializers.UUIDField(required=False)
