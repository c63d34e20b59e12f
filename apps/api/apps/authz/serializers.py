"""
Authz serializers: admin login tokens and profile.
"""
from rest_framework import exceptions, serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from apps.authz.models import User


class AdminTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Token pair issuance restricted to admin accounts.

    Non-admin credentials are rejected exactly like bad credentials so the
    login form does not reveal which accounts exist.
    """
    default_error_messages = {
        'no_active_account': 'Invalid credentials or insufficient permissions',
    }

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['role'] = user.role
        token['email'] = user.email
        return token

    def validate(self, attrs):
        data = super().validate(attrs)

        if not self.user.is_admin:
            raise exceptions.AuthenticationFailed(
                self.error_messages['no_active_account'],
                'no_active_account',
            )

        data['user'] = UserProfileSerializer(self.user).data
        return data


class UserProfileSerializer(serializers.ModelSerializer):
    """Current user profile."""

    class Meta:
        model = User
        fields = ['id', 'email', 'username', 'role', 'created_at']
        read_only_fields = fields
