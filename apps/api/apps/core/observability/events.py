"""
Domain events logging helpers.

Provides structured event logging for registry operations.
"""
from typing import Dict, Optional
from .logging import get_sanitized_logger, sanitize_dict

logger = get_sanitized_logger(__name__)


def log_domain_event(
    event_name: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    entity_ids: Optional[Dict[str, str]] = None,
    result: str = 'success',
    **extra_fields
):
    """
    Log a domain event with structured data.

    Args:
        event_name: Name of the event (e.g., 'donation_recorded')
        entity_type: Type of entity (e.g., 'Donor', 'DonationRecord')
        entity_id: ID of primary entity
        entity_ids: Dictionary of related entity IDs
        result: Result of operation (success, failure, etc.)
        **extra_fields: Additional fields to log (will be sanitized)

    Example:
        log_domain_event(
            'donation_recorded',
            entity_type='DonationRecord',
            entity_id=str(record.id),
            entity_ids={'donor_id': str(donor.id)},
            next_donation_date='2024-09-01',
        )
    """
    event_data = {
        'event': event_name,
        'result': result,
    }

    if entity_type:
        event_data['entity_type'] = entity_type

    if entity_id:
        event_data['entity_id'] = entity_id

    if entity_ids:
        event_data.update(entity_ids)

    event_data.update(sanitize_dict(extra_fields))

    if result in ['failure', 'error']:
        logger.error(f'Domain event: {event_name}', extra=event_data)
    elif result in ['warning', 'blocked', 'rejected']:
        logger.warning(f'Domain event: {event_name}', extra=event_data)
    else:
        logger.info(f'Domain event: {event_name}', extra=event_data)


def log_consistency_checkpoint(
    checkpoint_name: str,
    entity_ids: Dict[str, str],
    checks_passed: Dict[str, bool],
    **extra_fields
):
    """
    Log a consistency checkpoint event.

    Used to verify data integrity at critical points, e.g. that the donor
    summary matches the ledger maximum after a mutation.
    """
    all_passed = all(checks_passed.values())

    event_data = {
        'event': 'consistency_checkpoint',
        'checkpoint': checkpoint_name,
        'status': 'passed' if all_passed else 'failed',
        'checks': checks_passed,
    }
    event_data.update(entity_ids)
    event_data.update(sanitize_dict(extra_fields))

    if all_passed:
        logger.info(f'Checkpoint passed: {checkpoint_name}', extra=event_data)
    else:
        logger.error(f'Checkpoint FAILED: {checkpoint_name}', extra=event_data)


def _iso(value):
    return value.isoformat() if value else None


def log_donation_recorded(record, summary, duration_ms=None):
    """Log insertion of a donation into a donor's ledger."""
    extra = {
        'donation_date': _iso(record.donation_date),
        'date_of_last_donation': _iso(summary.date_of_last_donation),
        'next_donation_date': _iso(summary.next_donation_date),
    }
    if duration_ms is not None:
        extra['duration_ms'] = duration_ms

    log_domain_event(
        'donation_recorded',
        entity_type='DonationRecord',
        entity_id=str(record.id),
        entity_ids={'donor_id': str(record.donor_id)},
        **extra
    )


def log_donation_deleted(donor_id, donation_id, summary, duration_ms=None):
    """Log removal of a donation from a donor's ledger."""
    extra = {
        'date_of_last_donation': _iso(summary.date_of_last_donation),
        'next_donation_date': _iso(summary.next_donation_date),
    }
    if duration_ms is not None:
        extra['duration_ms'] = duration_ms

    log_domain_event(
        'donation_deleted',
        entity_type='DonationRecord',
        entity_id=str(donation_id),
        entity_ids={'donor_id': str(donor_id)},
        **extra
    )


def log_ledger_transaction_failed(operation, donor_id, error):
    """Log a rolled back ledger transaction."""
    log_domain_event(
        'ledger_transaction_failed',
        entity_type='Donor',
        entity_id=str(donor_id),
        entity_ids={'donor_id': str(donor_id)},
        result='failure',
        operation=operation,
        exception_type=error.__class__.__name__,
        error=str(error),
    )


def log_donor_registered(donor, seeded_donation=False):
    """Log donor registration."""
    log_domain_event(
        'donor_registered',
        entity_type='Donor',
        entity_id=str(donor.id),
        entity_ids={'donor_id': str(donor.id)},
        blood_type=donor.blood_type,
        seeded_donation=seeded_donation,
    )


def log_donor_deactivated(donor):
    """Log donor soft deletion."""
    log_domain_event(
        'donor_deactivated',
        entity_type='Donor',
        entity_id=str(donor.id),
        entity_ids={'donor_id': str(donor.id)},
    )
