from decimal import Decimal
from rest_framework import serializers
from .models import Card, CardStatus


class CardSerializer(serializers.ModelSerializer):
    franchisee_name = serializers.CharField(source='franchisee.name', read_only=True)
    establishment_name = serializers.CharField(
        source='establishment.name', read_only=True, default=None
    )

    class Meta:
        model = Card
        fields = [
            'id',
            'code',
            'qr_code',
            'balance',
            'status',
            'franchisee',
            'franchisee_name',
            'establishment',
            'establishment_name',
            'customer_reference',
            'activated_at',
            'used_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


# =============================================================================
# Input Serializers
# =============================================================================

class CardCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    qr_code = serializers.CharField(max_length=255, required=False, allow_blank=True)
    franchisee_id = serializers.UUIDField(required=False)
    establishment_id = serializers.UUIDField(required=False, allow_null=True)
    customer_reference = serializers.CharField(max_length=100, required=False, allow_blank=True)


class CardUpdateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50, required=False)
    qr_code = serializers.CharField(max_length=255, required=False, allow_blank=True)
    establishment_id = serializers.UUIDField(required=False, allow_null=True)
    customer_reference = serializers.CharField(max_length=100, required=False, allow_blank=True)


class CardFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=CardStatus.choices, required=False)
    franchisee = serializers.UUIDField(required=False)
    establishment = serializers.UUIDField(required=False)
    search = serializers.CharField(required=False)


class CardActionQuerySerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=['recharge', 'use', 'block', 'activate', 'expire'])


class RechargeInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    establishment_id = serializers.UUIDField(required=False)


class UseInputSerializer(RechargeInputSerializer):
    customer_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    customer_phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    receipt = serializers.CharField(max_length=64, required=False, allow_blank=True)
