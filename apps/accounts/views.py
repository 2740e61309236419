from rest_framework import serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, inline_serializer

from .serializers import UserLoginSerializer, UserSerializer
from .services import authenticate_user, issue_tokens


ErrorResponse = inline_serializer('ErrorResponse', {
    'error': serializers.CharField(),
    'code': serializers.CharField(),
    'status': serializers.IntegerField(),
})


@extend_schema(
    request=UserLoginSerializer,
    responses={
        200: inline_serializer('LoginResponse', {
            'user': UserSerializer(),
            'tokens': inline_serializer('Tokens', {
                'refresh': serializers.CharField(),
                'access': serializers.CharField(),
            }),
        }),
        400: ErrorResponse,
        401: ErrorResponse,
        403: ErrorResponse,
    },
    description="Exchange email and password for a JWT pair. The access token "
                "carries role, franchisor_id, franchisee_id and establishment_id claims.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """
    Log in a franchisor, franchisee or establishment account.

    POST /api/auth/login/
    """
    serializer = UserLoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = authenticate_user(**serializer.validated_data)

    return Response({
        'user': UserSerializer(user).data,
        'tokens': issue_tokens(user),
    })


@extend_schema(
    responses={200: UserSerializer, 401: ErrorResponse},
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Profile of the authenticated account."""
    return Response(UserSerializer(request.user).data)
