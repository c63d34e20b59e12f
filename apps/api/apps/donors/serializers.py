"""Donor serializers."""
from decimal import Decimal

from django.core.validators import RegexValidator
from django.utils import timezone
from rest_framework import serializers

from .models import BloodTypeChoices, DonationRecord, Donor

contact_number_validator = RegexValidator(
    regex=r'^\+?[1-9]\d{0,15}$',
    message='Please provide a valid contact number'
)


class DonationRecordSerializer(serializers.ModelSerializer):
    """Ledger entry as shown in a donor's donation history."""

    class Meta:
        model = DonationRecord
        fields = [
            'id', 'donation_date', 'blood_units', 'donation_center',
            'notes', 'created_at',
        ]
        read_only_fields = fields


class DonorSerializer(serializers.ModelSerializer):
    """
    Donor with read-only ledger summary.

    date_of_last_donation / next_donation_date are derived from the ledger
    and never accepted from clients.
    """
    is_eligible_now = serializers.ReadOnlyField()

    class Meta:
        model = Donor
        fields = [
            'id',
            'donor_name',
            'blood_type',
            'contact_number',
            'is_active',
            'date_of_last_donation',
            'next_donation_date',
            'is_eligible_now',
            'created_at',
            'updated_at',
        ]
        read_only_fields = [
            'id', 'is_active', 'date_of_last_donation', 'next_donation_date',
            'is_eligible_now', 'created_at', 'updated_at',
        ]


class DonorDetailSerializer(DonorSerializer):
    """Donor plus full donation history (newest first)."""
    donation_history = serializers.SerializerMethodField()

    class Meta(DonorSerializer.Meta):
        fields = DonorSerializer.Meta.fields + ['donation_history']

    def get_donation_history(self, obj):
        records = obj.donations.order_by('-donation_date', '-created_at')
        return DonationRecordSerializer(records, many=True).data


class DonorCreateSerializer(serializers.Serializer):
    """
    Donor registration payload.

    date_of_last_donation is optional; when present it seeds the ledger
    with a historical donation record.
    """
    donor_name = serializers.CharField(min_length=2, max_length=100)
    blood_type = serializers.ChoiceField(choices=BloodTypeChoices.choices)
    contact_number = serializers.CharField(max_length=20, validators=[contact_number_validator])
    date_of_last_donation = serializers.DateField(required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False, default=True)

    def to_internal_value(self, data):
        # Admin console sends '' for an untouched date input
        if hasattr(data, 'get') and data.get('date_of_last_donation') == '':
            data = data.copy()
            data['date_of_last_donation'] = None
        return super().to_internal_value(data)

    def validate_date_of_last_donation(self, value):
        if value and value > timezone.localdate():
            raise serializers.ValidationError('Last donation date cannot be in the future')
        return value


class DonorUpdateSerializer(serializers.ModelSerializer):
    """
    Donor update payload (all fields optional, at least one required).

    Ledger summary fields are not updatable here; use the donation
    endpoints instead.
    """
    donor_name = serializers.CharField(min_length=2, max_length=100, required=False)
    blood_type = serializers.ChoiceField(choices=BloodTypeChoices.choices, required=False)
    contact_number = serializers.CharField(
        max_length=20, required=False, validators=[contact_number_validator]
    )
    is_active = serializers.BooleanField(required=False)

    class Meta:
        model = Donor
        fields = ['donor_name', 'blood_type', 'contact_number', 'is_active']

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('At least one field must be provided for update')
        return attrs


class DonationCreateSerializer(serializers.Serializer):
    """Record-donation payload."""
    donation_date = serializers.DateField()
    blood_units = serializers.DecimalField(
        max_digits=3,
        decimal_places=1,
        min_value=Decimal('0.1'),
        required=False,
        default=Decimal('1.0')
    )
    donation_center = serializers.CharField(
        max_length=100, required=False, allow_blank=True, allow_null=True, default=''
    )
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')


class DonationResultSerializer(serializers.Serializer):
    """Outcome of a ledger mutation (record or delete)."""
    donor_id = serializers.UUIDField()
    donation_id = serializers.UUIDField()
    donation_date = serializers.DateField(allow_null=True)
    date_of_last_donation = serializers.DateField(allow_null=True)
    next_donation_date = serializers.DateField(allow_null=True)


class DonorStatsSerializer(serializers.Serializer):
    """Admin dashboard statistics."""
    totalDonors = serializers.IntegerField()
    activeDonors = serializers.IntegerField()
    inactiveDonors = serializers.IntegerField()
    totalDonations = serializers.IntegerField()
    thisMonthDonations = serializers.IntegerField()
    availableDonors = serializers.IntegerField()


class PublicStatsSerializer(serializers.Serializer):
    """Public landing page statistics."""
    totalDonors = serializers.IntegerField()
    totalDonations = serializers.IntegerField()
    availableDonors = serializers.IntegerField()
