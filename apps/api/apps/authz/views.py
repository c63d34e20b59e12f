"""
Authz views: admin login and current user.
"""
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from apps.authz.permissions import IsAdmin
from apps.authz.serializers import AdminTokenObtainPairSerializer, UserProfileSerializer


class AdminLoginView(TokenObtainPairView):
    """
    POST /api/auth/login/

    {
        "email": "admin@admin.com",
        "password": "..."
    }

    Returns access + refresh tokens and the admin profile.
    Non-admin accounts receive 401.
    """
    serializer_class = AdminTokenObtainPairSerializer


class MeView(APIView):
    """
    GET /api/auth/me/

    Returns the authenticated admin's profile.
    """
    permission_classes = [IsAdmin]

    def get(self, request):
        serializer = UserProfileSerializer(request.user)
        return Response({'success': True, 'data': {'user': serializer.data}}, status=status.HTTP_200_OK)
