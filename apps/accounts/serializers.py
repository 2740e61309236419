from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Account with the organisation it acts for."""

    organisation_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'full_name',
            'role',
            'franchisor',
            'franchisee',
            'establishment',
            'organisation_name',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields

    def get_organisation_name(self, obj):
        organisation = obj.establishment or obj.franchisee or obj.franchisor
        return organisation.name if organisation else None


# =============================================================================
# Input Serializers
# =============================================================================

class UserLoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})
