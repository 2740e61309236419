from decimal import Decimal
from rest_framework import serializers
from .models import (
    Commission,
    CommissionStatus,
    Transaction,
    TransactionKind,
    TransactionStatus,
)


class CommissionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Commission
        fields = [
            'id',
            'amount',
            'rate',
            'status',
            'franchisee',
            'establishment',
            'transaction',
            'paid_at',
            'cancelled_at',
            'created_at',
        ]
        read_only_fields = fields


class TransactionSerializer(serializers.ModelSerializer):
    """Transaction with its commission nested (null for recharges)."""

    card_code = serializers.CharField(source='card.code', read_only=True)
    establishment_name = serializers.CharField(source='establishment.name', read_only=True)
    commission = serializers.SerializerMethodField()

    class Meta:
        model = Transaction
        fields = [
            'id',
            'kind',
            'amount',
            'status',
            'card',
            'card_code',
            'establishment',
            'establishment_name',
            'balance_after',
            'customer_name',
            'customer_phone',
            'receipt',
            'commission',
            'created_at',
        ]
        read_only_fields = fields

    def get_commission(self, obj):
        commission = getattr(obj, 'commission', None)
        if commission is None:
            return None
        return CommissionSerializer(commission).data


# =============================================================================
# Input Serializers
# =============================================================================

class TransactionCreateSerializer(serializers.Serializer):
    """
    Validate a transaction request.

    Body:
        kind (str): RECHARGE or USAGE
        amount (decimal): Positive, two decimal places
        card_id (UUID): Card to charge or fund
        establishment_id (UUID): Where it happens (implicit for establishments)
        customer_name, customer_phone, receipt (str): Usage details
    """

    kind = serializers.ChoiceField(choices=TransactionKind.choices)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    card_id = serializers.UUIDField()
    establishment_id = serializers.UUIDField(required=False)
    customer_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    customer_phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    receipt = serializers.CharField(max_length=64, required=False, allow_blank=True)


class TransactionFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for transaction filtering.

    Query Parameters:
        kind, status (str): Exact filters
        card, franchisee, establishment (UUID): Owner filters
        min_amount, max_amount (decimal): Amount range
        date_from, date_to (date): Creation date range
        search (str): Card code, customer name/phone or receipt
    """

    kind = serializers.ChoiceField(choices=TransactionKind.choices, required=False)
    status = serializers.ChoiceField(choices=TransactionStatus.choices, required=False)
    card = serializers.UUIDField(required=False)
    franchisee = serializers.UUIDField(required=False)
    establishment = serializers.UUIDField(required=False)
    min_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    max_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    search = serializers.CharField(required=False)

    def validate(self, attrs):
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({
                'date_to': 'End date must be after start date'
            })
        return attrs


class CommissionFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=CommissionStatus.choices, required=False)
    franchisee = serializers.UUIDField(required=False)
    establishment = serializers.UUIDField(required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
