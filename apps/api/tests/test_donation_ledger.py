"""
Tests for the donation ledger services.

Invariant after every committed mutation:
    donor.date_of_last_donation == MAX(donation_history.donation_date)
    donor.next_donation_date   == next_eligible_date(date_of_last_donation)
"""
from datetime import date
from decimal import Decimal

import pytest
from django.db.models import Max

from apps.donors.eligibility import next_eligible_date, summarize_ledger
from apps.donors.models import DonationRecord, Donor
from apps.donors.services import (
    HISTORICAL_DONATION_CENTER,
    DonationNotFoundError,
    DonorNotFoundError,
    DuplicateDonorError,
    InactiveDonorError,
    deactivate_donor,
    delete_donation,
    recalculate_donor_summary,
    record_donation,
    register_donor,
    update_donor,
)


def assert_summary_matches_ledger(donor):
    donor.refresh_from_db()
    latest = DonationRecord.objects.filter(donor=donor).aggregate(latest=Max('donation_date'))['latest']
    assert donor.date_of_last_donation == latest
    assert donor.next_donation_date == next_eligible_date(latest)


@pytest.mark.django_db
class TestRecordDonation:

    def test_first_donation_sets_summary(self, donor, admin_user):
        result = record_donation(
            donor_id=donor.id,
            donation_date=date(2024, 3, 1),
            blood_units=Decimal('1.5'),
            donation_center='City Hospital',
            notes='No issues',
            recorded_by=admin_user,
        )

        assert result.donor_id == donor.id
        assert result.date_of_last_donation == date(2024, 3, 1)
        assert result.next_donation_date == date(2024, 6, 1)

        record = DonationRecord.objects.get(id=result.donation_id)
        assert record.blood_units == Decimal('1.5')
        assert record.donation_center == 'City Hospital'
        assert record.recorded_by == admin_user
        assert_summary_matches_ledger(donor)

    def test_out_of_order_insert_keeps_latest(self, donor, donation_factory):
        donation_factory(donor, '2024-06-01')
        result = donation_factory(donor, '2024-03-01')

        assert result.date_of_last_donation == date(2024, 6, 1)
        assert result.next_donation_date == date(2024, 9, 1)
        assert DonationRecord.objects.filter(donor=donor).count() == 2
        assert_summary_matches_ledger(donor)

    def test_newer_donation_advances_summary(self, donor, donation_factory):
        donation_factory(donor, '2024-01-31')
        donor.refresh_from_db()
        assert donor.next_donation_date == date(2024, 5, 1)

        donation_factory(donor, '2024-05-15')
        assert_summary_matches_ledger(donor)
        assert donor.next_donation_date == date(2024, 8, 15)

    def test_accepts_iso_string_date(self, donor):
        result = record_donation(donor_id=donor.id, donation_date='2024-02-10')
        assert result.donation_date == date(2024, 2, 10)
        assert_summary_matches_ledger(donor)

    def test_default_blood_units(self, donor):
        result = record_donation(donor_id=donor.id, donation_date=date(2024, 2, 10), blood_units=None)
        assert DonationRecord.objects.get(id=result.donation_id).blood_units == Decimal('1.0')

    def test_missing_date_raises(self, donor):
        with pytest.raises(ValueError):
            record_donation(donor_id=donor.id, donation_date=None)
        assert DonationRecord.objects.count() == 0

    def test_unknown_donor(self, db):
        with pytest.raises(DonorNotFoundError):
            record_donation(donor_id='00000000-0000-0000-0000-000000000000', donation_date=date(2024, 1, 1))

    def test_malformed_donor_id(self, db):
        with pytest.raises(DonorNotFoundError):
            record_donation(donor_id='not-a-uuid', donation_date=date(2024, 1, 1))

    def test_inactive_donor_rejected(self, donor_factory):
        inactive = donor_factory(is_active=False)

        with pytest.raises(InactiveDonorError):
            record_donation(donor_id=inactive.id, donation_date=date(2024, 1, 1))

        inactive.refresh_from_db()
        assert inactive.date_of_last_donation is None
        assert DonationRecord.objects.filter(donor=inactive).count() == 0


@pytest.mark.django_db
class TestDeleteDonation:

    def test_deleting_latest_falls_back_to_previous(self, donor, donation_factory):
        donation_factory(donor, '2024-03-01')
        latest = donation_factory(donor, '2024-06-01')

        result = delete_donation(donor_id=donor.id, donation_id=latest.donation_id)

        assert result.donation_date == date(2024, 6, 1)
        assert result.date_of_last_donation == date(2024, 3, 1)
        assert result.next_donation_date == date(2024, 6, 1)
        assert_summary_matches_ledger(donor)

    def test_deleting_older_keeps_summary(self, donor, donation_factory):
        older = donation_factory(donor, '2024-03-01')
        donation_factory(donor, '2024-06-01')

        result = delete_donation(donor_id=donor.id, donation_id=older.donation_id)

        assert result.date_of_last_donation == date(2024, 6, 1)
        assert_summary_matches_ledger(donor)

    def test_deleting_only_donation_clears_summary(self, donor, donation_factory):
        only = donation_factory(donor, '2024-03-01')

        result = delete_donation(donor_id=donor.id, donation_id=only.donation_id)

        assert result.date_of_last_donation is None
        assert result.next_donation_date is None
        donor.refresh_from_db()
        assert donor.date_of_last_donation is None
        assert donor.next_donation_date is None
        assert donor.is_eligible_now is True

    def test_donation_of_another_donor(self, donor, donor_factory, donation_factory):
        other = donor_factory(donor_name='Other Donor')
        foreign = donation_factory(other, '2024-03-01')

        with pytest.raises(DonationNotFoundError):
            delete_donation(donor_id=donor.id, donation_id=foreign.donation_id)

        assert DonationRecord.objects.filter(id=foreign.donation_id).exists()
        assert_summary_matches_ledger(other)

    def test_unknown_donation(self, donor):
        with pytest.raises(DonationNotFoundError):
            delete_donation(donor_id=donor.id, donation_id='00000000-0000-0000-0000-000000000000')

    def test_malformed_donation_id(self, donor):
        with pytest.raises(DonationNotFoundError):
            delete_donation(donor_id=donor.id, donation_id='42')

    def test_unknown_donor(self, db):
        with pytest.raises(DonorNotFoundError):
            delete_donation(
                donor_id='00000000-0000-0000-0000-000000000000',
                donation_id='00000000-0000-0000-0000-000000000001'
            )


@pytest.mark.django_db
class TestRecalculateDonorSummary:

    def test_repairs_drifted_summary(self, donor, donation_factory):
        donation_factory(donor, '2024-06-01')
        Donor.objects.filter(id=donor.id).update(
            date_of_last_donation=date(2020, 1, 1),
            next_donation_date=date(2020, 4, 1),
        )
        donor.refresh_from_db()

        summary = recalculate_donor_summary(donor)

        assert summary.date_of_last_donation == date(2024, 6, 1)
        assert_summary_matches_ledger(donor)

    def test_is_idempotent(self, donor, donation_factory):
        donation_factory(donor, '2024-06-01')
        first = recalculate_donor_summary(donor)
        second = recalculate_donor_summary(donor)
        assert first == second

    def test_empty_ledger(self, donor):
        summary = recalculate_donor_summary(donor)
        assert summary.date_of_last_donation is None
        assert summary.next_donation_date is None

    def test_agrees_with_ledger_reduction(self, donor, donation_factory):
        dates = [date(2023, 11, 30), date(2024, 1, 31), date(2023, 6, 15)]
        for d in dates:
            donation_factory(donor, d)

        summary = recalculate_donor_summary(donor)

        assert summary == summarize_ledger(dates)
        assert summary.next_donation_date == date(2024, 5, 1)


@pytest.mark.django_db
class TestRegisterDonor:

    def test_register_without_history(self, admin_user):
        donor = register_donor(
            {'donor_name': 'New Donor', 'blood_type': 'A-', 'contact_number': '+15550001'},
            registered_by=admin_user,
        )

        assert donor.is_active is True
        assert donor.date_of_last_donation is None
        assert donor.next_donation_date is None
        assert donor.donations.count() == 0

    def test_historical_date_seeds_ledger(self, admin_user):
        donor = register_donor(
            {
                'donor_name': 'Returning Donor',
                'blood_type': 'B+',
                'contact_number': '+15550002',
                'date_of_last_donation': date(2024, 1, 31),
            },
            registered_by=admin_user,
        )

        donor.refresh_from_db()
        assert donor.date_of_last_donation == date(2024, 1, 31)
        assert donor.next_donation_date == date(2024, 5, 1)

        seed = donor.donations.get()
        assert seed.donation_date == date(2024, 1, 31)
        assert seed.donation_center == HISTORICAL_DONATION_CENTER
        assert seed.recorded_by == admin_user

    def test_client_supplied_next_date_ignored(self):
        donor = register_donor({
            'donor_name': 'Sneaky Donor',
            'blood_type': 'O-',
            'contact_number': '+15550003',
            'next_donation_date': date(2000, 1, 1),
        })
        donor.refresh_from_db()
        assert donor.next_donation_date is None

    def test_duplicate_active_contact(self, donor):
        with pytest.raises(DuplicateDonorError):
            register_donor({
                'donor_name': 'Copy',
                'blood_type': 'O+',
                'contact_number': donor.contact_number,
            })
        assert Donor.objects.filter(contact_number=donor.contact_number).count() == 1

    def test_inactive_contact_can_be_reused(self, donor_factory):
        old = donor_factory(is_active=False)
        donor = register_donor({
            'donor_name': 'Reused Number',
            'blood_type': 'AB+',
            'contact_number': old.contact_number,
        })
        assert donor.id != old.id


@pytest.mark.django_db
class TestDeactivateDonor:

    def test_soft_delete_keeps_ledger(self, donor, donation_factory):
        donation_factory(donor, '2024-03-01')

        deactivate_donor(donor.id)

        donor.refresh_from_db()
        assert donor.is_active is False
        assert donor.donations.count() == 1
        assert donor.date_of_last_donation == date(2024, 3, 1)

    def test_already_inactive(self, donor_factory):
        inactive = donor_factory(is_active=False)
        with pytest.raises(DonorNotFoundError):
            deactivate_donor(inactive.id)

    def test_unknown_donor(self, db):
        with pytest.raises(DonorNotFoundError):
            deactivate_donor('00000000-0000-0000-0000-000000000000')


@pytest.mark.django_db
class TestUpdateDonor:

    def test_updates_profile_fields(self, donor):
        updated = update_donor(donor.id, {'donor_name': 'Jane Smith', 'blood_type': 'A+'})

        donor.refresh_from_db()
        assert updated.donor_name == 'Jane Smith'
        assert donor.blood_type == 'A+'

    def test_keeping_own_contact_number(self, donor):
        update_donor(donor.id, {'contact_number': donor.contact_number, 'is_active': True})

        donor.refresh_from_db()
        assert donor.is_active is True

    def test_reactivation_with_contact_in_use(self, donor_factory):
        old = donor_factory(is_active=False)
        current = donor_factory(contact_number=old.contact_number)

        with pytest.raises(DuplicateDonorError):
            update_donor(old.id, {'is_active': True})

        old.refresh_from_db()
        assert old.is_active is False
        assert Donor.objects.active().filter(contact_number=current.contact_number).count() == 1

    def test_reactivation_with_free_contact(self, donor_factory):
        old = donor_factory(is_active=False)

        update_donor(old.id, {'is_active': True})

        old.refresh_from_db()
        assert old.is_active is True

    def test_contact_change_to_number_in_use(self, donor, donor_factory):
        other = donor_factory()

        with pytest.raises(DuplicateDonorError):
            update_donor(donor.id, {'contact_number': other.contact_number})

        donor.refresh_from_db()
        assert donor.contact_number != other.contact_number

    def test_inactive_donor_may_share_contact(self, donor, donor_factory):
        old = donor_factory(is_active=False)

        update_donor(old.id, {'contact_number': donor.contact_number})

        old.refresh_from_db()
        assert old.contact_number == donor.contact_number

    def test_unknown_donor(self, db):
        with pytest.raises(DonorNotFoundError):
            update_donor('00000000-0000-0000-0000-000000000000', {'donor_name': 'Nobody'})
