"""
Donor registry services - Business logic for the donation ledger.

The donor summary fields (date_of_last_donation, next_donation_date) are a
cache of the donation_history ledger. Every ledger mutation re-derives them
from MAX(donation_date) inside the same transaction:

- Donor row locked (select_for_update) for the whole mutation
- Insert/delete and recompute commit together or not at all
- Recompute always reads the full remaining ledger (records arrive and
  leave out of chronological order)
"""
import time
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Max

from apps.core.observability import metrics, get_sanitized_logger
from apps.core.observability.events import (
    log_consistency_checkpoint,
    log_donation_deleted,
    log_donation_recorded,
    log_donor_deactivated,
    log_donor_registered,
    log_ledger_transaction_failed,
)

from .eligibility import LedgerSummary, coerce_date, summarize_ledger
from .models import DonationRecord, Donor

logger = get_sanitized_logger(__name__)

HISTORICAL_DONATION_CENTER = 'Historical record'


class DonorRegistryError(Exception):
    """Base class for donor registry service errors."""
    pass


class DonorNotFoundError(DonorRegistryError):
    """Raised when the referenced donor does not exist."""
    pass


class DonationNotFoundError(DonorRegistryError):
    """Raised when a donation does not exist or belongs to another donor."""
    pass


class InactiveDonorError(DonorRegistryError):
    """Raised when mutating the ledger of a soft-deleted donor."""
    pass


class DuplicateDonorError(DonorRegistryError):
    """Raised when an active donor already uses the contact number."""
    pass


class LedgerTransactionError(DonorRegistryError):
    """
    Raised when a ledger transaction fails and is rolled back.

    The underlying exception is chained as __cause__.
    """
    pass


@dataclass(frozen=True)
class DonationResult:
    """Outcome of a ledger mutation."""
    donor_id: UUID
    donation_id: UUID
    donation_date: Optional[date]
    date_of_last_donation: Optional[date]
    next_donation_date: Optional[date]


def _lock_donor(donor_id) -> Donor:
    try:
        return Donor.objects.select_for_update().get(id=donor_id)
    except (Donor.DoesNotExist, ValidationError, ValueError):
        raise DonorNotFoundError(f"Donor {donor_id} not found")


def recalculate_donor_summary(donor: Donor, trigger: str = 'maintenance') -> LedgerSummary:
    """
    Recompute and persist the donor summary from the ledger.

    Always reads MAX(donation_date) from the database (ignores cached values).
    Transactional: must be called inside the same transaction as the ledger
    insert/delete.

    Returns:
        LedgerSummary with both fields None when the ledger is empty
    """
    latest = DonationRecord.objects.filter(donor_id=donor.pk).aggregate(
        latest=Max('donation_date')
    )['latest']

    summary = summarize_ledger([latest])

    donor.date_of_last_donation = summary.date_of_last_donation
    donor.next_donation_date = summary.next_donation_date
    donor.save(update_fields=['date_of_last_donation', 'next_donation_date', 'updated_at'])

    metrics.donor_summary_recalculations_total.labels(trigger=trigger).inc()
    return summary


def _run_ledger_transaction(operation: str, donor_id, body):
    """
    Execute ``body`` inside one atomic block.

    Domain errors propagate unchanged. Anything else rolls back and is
    re-raised as LedgerTransactionError.
    """
    start_time = time.time()
    try:
        with transaction.atomic():
            result = body()
    except DonorRegistryError:
        raise
    except Exception as e:
        metrics.ledger_transaction_rollback_total.labels(operation=operation).inc()
        metrics.exceptions_total.labels(
            exception_type=e.__class__.__name__,
            location=f'{operation}_donation'
        ).inc()
        log_ledger_transaction_failed(operation, donor_id, e)
        raise LedgerTransactionError(
            f"Could not {operation} donation for donor {donor_id}: transaction rolled back"
        ) from e
    finally:
        metrics.ledger_transaction_duration_seconds.labels(operation=operation).observe(
            time.time() - start_time
        )
    return result, int((time.time() - start_time) * 1000)


def record_donation(
    donor_id,
    donation_date: date,
    blood_units: Decimal = Decimal('1.0'),
    donation_center: str = '',
    notes: str = '',
    recorded_by=None,
) -> DonationResult:
    """
    Append a donation to the donor's ledger and refresh the donor summary.

    TRANSACTION: insert + recompute are atomic.

    Args:
        donor_id: Donor UUID
        donation_date: Date of the donation (future dates are not rejected here)
        blood_units: Units collected
        donation_center: Free-text center name
        notes: Optional notes
        recorded_by: User recording the donation

    Returns:
        DonationResult with the new record id and the recomputed summary

    Raises:
        ValueError: donation_date missing
        DonorNotFoundError: Donor does not exist
        InactiveDonorError: Donor is soft-deleted
        LedgerTransactionError: Insert or recompute failed (rolled back)
    """
    donation_date = coerce_date(donation_date)
    if donation_date is None:
        raise ValueError("donation_date is required")

    def body():
        donor = _lock_donor(donor_id)
        if not donor.is_active:
            raise InactiveDonorError(f"Donor {donor_id} is inactive")

        record = DonationRecord.objects.create(
            donor=donor,
            donation_date=donation_date,
            blood_units=blood_units if blood_units is not None else Decimal('1.0'),
            donation_center=donation_center or '',
            notes=notes or '',
            recorded_by=recorded_by,
        )
        summary = recalculate_donor_summary(donor, trigger='record')
        return record, summary

    try:
        (record, summary), duration_ms = _run_ledger_transaction('record', donor_id, body)
    except DonorNotFoundError:
        metrics.donations_recorded_total.labels(result='donor_not_found').inc()
        raise
    except InactiveDonorError:
        metrics.donations_recorded_total.labels(result='inactive_donor').inc()
        logger.warning(
            'Donation refused - donor inactive',
            extra={'donor_id': str(donor_id)}
        )
        raise
    except LedgerTransactionError:
        metrics.donations_recorded_total.labels(result='failure').inc()
        raise

    metrics.donations_recorded_total.labels(result='success').inc()
    log_donation_recorded(record, summary, duration_ms=duration_ms)
    log_consistency_checkpoint(
        'donor_summary_matches_ledger',
        entity_ids={'donor_id': str(record.donor_id)},
        checks_passed={
            'last_donation_not_before_new_record': (
                summary.date_of_last_donation is not None
                and summary.date_of_last_donation >= record.donation_date
            ),
        },
    )

    return DonationResult(
        donor_id=record.donor_id,
        donation_id=record.id,
        donation_date=record.donation_date,
        date_of_last_donation=summary.date_of_last_donation,
        next_donation_date=summary.next_donation_date,
    )


def delete_donation(donor_id, donation_id) -> DonationResult:
    """
    Remove a donation from the donor's ledger and refresh the donor summary.

    TRANSACTION: delete + recompute are atomic. When the last record is
    removed both summary fields become None.

    Raises:
        DonorNotFoundError: Donor does not exist
        DonationNotFoundError: Donation missing or owned by another donor
        LedgerTransactionError: Delete or recompute failed (rolled back)
    """
    def body():
        donor = _lock_donor(donor_id)
        try:
            record = DonationRecord.objects.get(id=donation_id, donor=donor)
        except (DonationRecord.DoesNotExist, ValidationError, ValueError):
            raise DonationNotFoundError(
                f"Donation {donation_id} not found or does not belong to donor {donor_id}"
            )

        deleted_date = record.donation_date
        record.delete()
        summary = recalculate_donor_summary(donor, trigger='delete')
        return donor, deleted_date, summary

    try:
        (donor, deleted_date, summary), duration_ms = _run_ledger_transaction('delete', donor_id, body)
    except (DonorNotFoundError, DonationNotFoundError):
        metrics.donations_deleted_total.labels(result='not_found').inc()
        raise
    except LedgerTransactionError:
        metrics.donations_deleted_total.labels(result='failure').inc()
        raise

    metrics.donations_deleted_total.labels(result='success').inc()
    log_donation_deleted(donor.id, donation_id, summary, duration_ms=duration_ms)

    return DonationResult(
        donor_id=donor.id,
        donation_id=donation_id,
        donation_date=deleted_date,
        date_of_last_donation=summary.date_of_last_donation,
        next_donation_date=summary.next_donation_date,
    )


@transaction.atomic
def register_donor(validated_data: dict, registered_by=None) -> Donor:
    """
    Create a donor.

    A historical date_of_last_donation supplied at registration is written
    to the ledger as a seed record; the summary is then derived from the
    ledger like any other mutation.

    Raises:
        DuplicateDonorError: An active donor already has this contact number
    """
    data = dict(validated_data)
    historical_date = data.pop('date_of_last_donation', None)
    data.pop('next_donation_date', None)

    contact_number = data.get('contact_number')
    if Donor.objects.active().filter(contact_number=contact_number).exists():
        metrics.donors_registered_total.labels(result='duplicate').inc()
        raise DuplicateDonorError("Donor with this contact number already exists")

    donor = Donor.objects.create(**data)

    if historical_date:
        DonationRecord.objects.create(
            donor=donor,
            donation_date=historical_date,
            donation_center=HISTORICAL_DONATION_CENTER,
            recorded_by=registered_by,
        )
        recalculate_donor_summary(donor, trigger='register')

    metrics.donors_registered_total.labels(result='success').inc()
    log_donor_registered(donor, seeded_donation=bool(historical_date))
    return donor


@transaction.atomic
def deactivate_donor(donor_id) -> Donor:
    """
    Soft delete a donor. The ledger is retained.

    Raises:
        DonorNotFoundError: Donor missing or already inactive
    """
    donor = _lock_donor(donor_id)
    if not donor.is_active:
        raise DonorNotFoundError(f"Donor {donor_id} not found or already deactivated")

    donor.is_active = False
    donor.save(update_fields=['is_active', 'updated_at'])

    metrics.donors_deactivated_total.inc()
    log_donor_deactivated(donor)
    return donor


@transaction.atomic
def update_donor(donor_id, validated_data: dict) -> Donor:
    """
    Apply a profile update to a donor.

    An update that leaves the donor active (reactivation or a new contact
    number) is checked against the other active donors the same way
    registration is.

    Raises:
        DonorNotFoundError: Donor does not exist
        DuplicateDonorError: Another active donor already has the contact number
    """
    donor = _lock_donor(donor_id)

    is_active = validated_data.get('is_active', donor.is_active)
    contact_number = validated_data.get('contact_number', donor.contact_number)
    if is_active:
        duplicate = Donor.objects.active().filter(
            contact_number=contact_number
        ).exclude(pk=donor.pk).exists()
        if duplicate:
            raise DuplicateDonorError("Donor with this contact number already exists")

    for field, value in validated_data.items():
        setattr(donor, field, value)
    donor.save(update_fields=[*validated_data.keys(), 'updated_at'])
    return donor
