"""
Donor models: donors, donation_history

The donation_history table is the ledger; the donor's
date_of_last_donation / next_donation_date columns are a cache of it and are
only written by apps.donors.services.
"""
import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .eligibility import is_eligible_now


class BloodTypeChoices(models.TextChoices):
    A_POS = 'A+', 'A+'
    A_NEG = 'A-', 'A-'
    B_POS = 'B+', 'B+'
    B_NEG = 'B-', 'B-'
    AB_POS = 'AB+', 'AB+'
    AB_NEG = 'AB-', 'AB-'
    O_POS = 'O+', 'O+'
    O_NEG = 'O-', 'O-'


class DonorQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True)

    def available(self, today=None):
        """Donors whose eligibility window has elapsed (or who never donated)."""
        today = today or timezone.localdate()
        return self.filter(
            Q(next_donation_date__isnull=True) | Q(next_donation_date__lte=today)
        )


class Donor(models.Model):
    """
    Registered blood donor.

    Business Rules:
    - is_active=False is a soft delete; the row and its ledger are retained
    - date_of_last_donation == max(donations.donation_date), or NULL
    - next_donation_date == next_eligible_date(date_of_last_donation)
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    donor_name = models.CharField(_('Donor name'), max_length=100)
    blood_type = models.CharField(
        _('Blood type'),
        max_length=3,
        choices=BloodTypeChoices.choices
    )
    contact_number = models.CharField(_('Contact number'), max_length=20)
    is_active = models.BooleanField(_('Active'), default=True)

    # Ledger cache (derived, never client-writable)
    date_of_last_donation = models.DateField(
        _('Date of last donation'),
        null=True,
        blank=True,
        help_text=_('Most recent donation_date in the donor ledger')
    )
    next_donation_date = models.DateField(
        _('Next donation date'),
        null=True,
        blank=True,
        help_text=_('First date the donor is eligible to donate again')
    )

    created_at = models.DateTimeField(_('Created At'), auto_now_add=True)
    updated_at = models.DateTimeField(_('Updated At'), auto_now=True)

    objects = DonorQuerySet.as_manager()

    class Meta:
        db_table = 'donors'
        verbose_name = _('Donor')
        verbose_name_plural = _('Donors')
        ordering = ['donor_name']
        indexes = [
            models.Index(fields=['blood_type'], name='idx_donor_blood_type'),
            models.Index(fields=['next_donation_date'], name='idx_donor_next_donation'),
            models.Index(fields=['is_active'], name='idx_donor_is_active'),
            models.Index(fields=['contact_number'], name='idx_donor_contact'),
        ]

    def __str__(self):
        return f"{self.donor_name} ({self.blood_type})"

    @property
    def is_eligible_now(self) -> bool:
        return is_eligible_now(self.next_donation_date)


class DonationRecord(models.Model):
    """
    One entry of a donor's donation ledger.

    Ledger entries are inserted and deleted individually; they are never
    edited in place.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    donor = models.ForeignKey(
        Donor,
        on_delete=models.CASCADE,
        related_name='donations',
        verbose_name=_('Donor')
    )
    donation_date = models.DateField(_('Donation date'))
    blood_units = models.DecimalField(
        _('Blood units'),
        max_digits=3,
        decimal_places=1,
        default=Decimal('1.0'),
        validators=[MinValueValidator(Decimal('0.1'))]
    )
    donation_center = models.CharField(_('Donation center'), max_length=100, blank=True)
    notes = models.TextField(_('Notes'), blank=True)
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='recorded_donations',
        verbose_name=_('Recorded by')
    )
    created_at = models.DateTimeField(_('Created At'), auto_now_add=True)

    class Meta:
        db_table = 'donation_history'
        verbose_name = _('Donation record')
        verbose_name_plural = _('Donation history')
        ordering = ['-donation_date', '-created_at']
        indexes = [
            models.Index(fields=['donor', '-donation_date'], name='idx_donation_donor_date'),
            models.Index(fields=['donation_date'], name='idx_donation_date'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(blood_units__gt=0),
                name='donation_blood_units_positive',
            ),
        ]

    def __str__(self):
        return f"{self.donor_id} | {self.donation_date}"
