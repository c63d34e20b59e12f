"""
Core views - API index.
"""
from django.conf import settings
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.donors.models import BloodTypeChoices


class ApiIndexView(APIView):
    """
    Self-describing API index for the admin console and public page.

    GET /api/
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response({
            'success': True,
            'message': 'Blood Donor Registry API',
            'version': getattr(settings, 'VERSION', 'unknown'),
            'endpoints': {
                'authentication': {
                    'POST /api/auth/login/': 'Admin login (returns access + refresh tokens)',
                    'POST /api/auth/token/refresh/': 'Refresh access token',
                    'GET /api/auth/me/': 'Current admin user',
                },
                'donors': {
                    'GET /api/donors/': 'List donors with filtering and pagination (Public)',
                    'GET /api/donors/{id}/': 'Donor with donation history (Public)',
                    'GET /api/donors/blood-type/{blood_type}/': 'Donors by blood type (Public)',
                    'GET /api/donors/public-stats/': 'Public donor statistics (Public)',
                    'GET /api/donors/stats/': 'Donor statistics (Admin)',
                    'POST /api/donors/': 'Register donor (Admin)',
                    'PATCH /api/donors/{id}/': 'Update donor (Admin)',
                    'DELETE /api/donors/{id}/': 'Deactivate donor (Admin)',
                    'POST /api/donors/{id}/donation/': 'Record donation (Admin)',
                    'DELETE /api/donors/{id}/donation/{donation_id}/': 'Delete donation (Admin)',
                },
            },
            'blood_types': list(BloodTypeChoices.values),
        }, status=status.HTTP_200_OK)
