"""Donor views."""
from django.utils import timezone
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.authz.permissions import IsAdmin
from apps.core.observability import get_sanitized_logger

from .models import BloodTypeChoices, DonationRecord, Donor
from .serializers import (
    DonationCreateSerializer,
    DonationResultSerializer,
    DonorCreateSerializer,
    DonorDetailSerializer,
    DonorSerializer,
    DonorStatsSerializer,
    DonorUpdateSerializer,
    PublicStatsSerializer,
)
from .services import (
    DonationNotFoundError,
    DonorNotFoundError,
    DuplicateDonorError,
    InactiveDonorError,
    LedgerTransactionError,
    deactivate_donor,
    delete_donation,
    record_donation,
    register_donor,
    update_donor,
)

logger = get_sanitized_logger(__name__)

PUBLIC_ACTIONS = {'list', 'retrieve', 'by_blood_type', 'public_stats'}


def _parse_bool(value):
    return str(value).lower() in ('true', '1', 'yes')


class DonorViewSet(viewsets.ModelViewSet):
    """
    ViewSet for donors and their donation ledger.

    Endpoints:
    - GET    /api/donors/                                  - List active donors (public)
    - GET    /api/donors/{id}/                             - Donor + donation history (public)
    - GET    /api/donors/blood-type/{blood_type}/          - Donors by blood type (public)
    - GET    /api/donors/public-stats/                     - Public statistics (public)
    - GET    /api/donors/stats/                            - Dashboard statistics (Admin)
    - POST   /api/donors/                                  - Register donor (Admin)
    - PUT    /api/donors/{id}/, PATCH                      - Update donor (Admin)
    - DELETE /api/donors/{id}/                             - Soft delete (Admin)
    - POST   /api/donors/{id}/donation/                    - Record donation (Admin)
    - DELETE /api/donors/{id}/donation/{donation_id}/      - Delete donation (Admin)

    Query parameters (list):
    - ?search=term - donor_name / contact_number contains
    - ?blood_type=A+ - exact blood type
    - ?is_active=false - inactive donors instead of active ones
    - ?available_only=true - only donors eligible today
    """
    queryset = Donor.objects.all()
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['donor_name', 'contact_number']
    ordering_fields = ['donor_name', 'next_donation_date', 'created_at']
    ordering = ['donor_name']

    def get_permissions(self):
        if self.action in PUBLIC_ACTIONS:
            return [AllowAny()]
        return [IsAdmin()]

    def get_queryset(self):
        queryset = Donor.objects.all()

        if self.action not in ('list', 'by_blood_type'):
            return queryset

        params = self.request.query_params

        is_active = params.get('is_active', '')
        if is_active != '':
            queryset = queryset.filter(is_active=_parse_bool(is_active))
        else:
            queryset = queryset.active()

        blood_type = params.get('blood_type') or self.kwargs.get('blood_type')
        if blood_type:
            queryset = queryset.filter(blood_type=blood_type)

        if _parse_bool(params.get('available_only', 'false')):
            queryset = queryset.available()

        return queryset

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return DonorDetailSerializer
        if self.action == 'create':
            return DonorCreateSerializer
        if self.action in ('update', 'partial_update'):
            return DonorUpdateSerializer
        if self.action == 'add_donation':
            return DonationCreateSerializer
        return DonorSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            donor = register_donor(serializer.validated_data, registered_by=request.user)
        except DuplicateDonorError as e:
            return Response(
                {'success': False, 'message': str(e)},
                status=status.HTTP_409_CONFLICT
            )

        output = DonorDetailSerializer(donor)
        return Response(output.data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        donor = self.get_object()
        serializer = self.get_serializer(donor, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            donor = update_donor(donor.pk, serializer.validated_data)
        except DuplicateDonorError as e:
            return Response(
                {'success': False, 'message': str(e)},
                status=status.HTTP_409_CONFLICT
            )

        logger.info(
            'Donor updated',
            extra={'donor_id': str(donor.id), 'fields': sorted(serializer.validated_data.keys())}
        )
        return Response(DonorSerializer(donor).data, status=status.HTTP_200_OK)

    def destroy(self, request, *args, **kwargs):
        """Soft delete - set is_active to False instead of deleting."""
        try:
            donor = deactivate_donor(kwargs['pk'])
        except DonorNotFoundError:
            return Response(
                {'success': False, 'message': 'Donor not found or already deactivated'},
                status=status.HTTP_404_NOT_FOUND
            )

        return Response(
            {
                'success': True,
                'message': 'Donor deactivated successfully',
                'data': {'donor_id': str(donor.id)},
            },
            status=status.HTTP_200_OK
        )

    @action(detail=False, methods=['get'], url_path=r'blood-type/(?P<blood_type>[^/]+)')
    def by_blood_type(self, request, blood_type=None):
        """
        GET /api/donors/blood-type/{blood_type}/?available_only=true

        Returns:
        - 200: Paginated active donors of that blood type
        - 400: Unknown blood type
        """
        if blood_type not in BloodTypeChoices.values:
            return Response(
                {
                    'success': False,
                    'message': 'Invalid blood type',
                    'errors': [f"Blood type must be one of: {', '.join(BloodTypeChoices.values)}"],
                },
                status=status.HTTP_400_BAD_REQUEST
            )

        return self.list(request)

    @action(detail=False, methods=['get'], url_path='public-stats')
    def public_stats(self, request):
        """GET /api/donors/public-stats/ - landing page counters."""
        data = {
            'totalDonors': Donor.objects.active().count(),
            'totalDonations': DonationRecord.objects.count(),
            'availableDonors': Donor.objects.active().available().count(),
        }
        return Response(PublicStatsSerializer(data).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'], url_path='stats')
    def stats(self, request):
        """GET /api/donors/stats/ - admin dashboard counters."""
        today = timezone.localdate()
        total_donors = Donor.objects.count()
        active_donors = Donor.objects.active().count()

        data = {
            'totalDonors': total_donors,
            'activeDonors': active_donors,
            'inactiveDonors': total_donors - active_donors,
            'totalDonations': DonationRecord.objects.count(),
            'thisMonthDonations': DonationRecord.objects.filter(
                donation_date__year=today.year,
                donation_date__month=today.month,
            ).count(),
            'availableDonors': Donor.objects.active().available(today).count(),
        }
        return Response(DonorStatsSerializer(data).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=['post'], url_path='donation')
    def add_donation(self, request, pk=None):
        """
        Record a donation for a donor.

        POST /api/donors/{id}/donation/
        {
            "donation_date": "2024-06-01",
            "blood_units": "1.0",          // optional
            "donation_center": "City Hospital",  // optional
            "notes": "..."                 // optional
        }

        Returns:
        - 201: Donation recorded, summary recomputed
        - 400: Validation error
        - 404: Donor not found or inactive
        - 500: Ledger transaction rolled back
        """
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payload = serializer.validated_data

        try:
            result = record_donation(
                donor_id=pk,
                donation_date=payload['donation_date'],
                blood_units=payload.get('blood_units'),
                donation_center=payload.get('donation_center') or '',
                notes=payload.get('notes') or '',
                recorded_by=request.user,
            )
        except DonorNotFoundError:
            return Response(
                {'success': False, 'message': 'Donor not found'},
                status=status.HTTP_404_NOT_FOUND
            )
        except InactiveDonorError:
            return Response(
                {'success': False, 'message': 'Donor not found or inactive'},
                status=status.HTTP_404_NOT_FOUND
            )
        except LedgerTransactionError:
            return Response(
                {'success': False, 'message': 'Donation could not be recorded'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response(
            {
                'success': True,
                'message': 'Donation recorded successfully',
                'data': DonationResultSerializer(result).data,
            },
            status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=['delete'], url_path=r'donation/(?P<donation_id>[^/.]+)')
    def remove_donation(self, request, pk=None, donation_id=None):
        """
        Delete a donation from the donor's history.

        DELETE /api/donors/{id}/donation/{donation_id}/

        Returns:
        - 200: Donation deleted, summary recomputed (possibly both null)
        - 404: Donation not found or belongs to another donor
        - 500: Ledger transaction rolled back
        """
        try:
            result = delete_donation(donor_id=pk, donation_id=donation_id)
        except (DonorNotFoundError, DonationNotFoundError):
            return Response(
                {'success': False, 'message': 'Donation not found or does not belong to this donor'},
                status=status.HTTP_404_NOT_FOUND
            )
        except LedgerTransactionError:
            return Response(
                {'success': False, 'message': 'Donation could not be deleted'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response(
            {
                'success': True,
                'message': 'Donation deleted successfully',
                'data': DonationResultSerializer(result).data,
            },
            status=status.HTTP_200_OK
        )
