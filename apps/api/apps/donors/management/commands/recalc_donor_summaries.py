from django.core.management.base import BaseCommand
from django.db import transaction
from django.db.models import Max

from apps.donors.eligibility import summarize_ledger
from apps.donors.models import Donor
from apps.donors.services import recalculate_donor_summary


class Command(BaseCommand):
    help = 'Recalculate cached donor summaries (last / next donation date) from the donation ledger.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report drifted donors without writing changes',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        self.stdout.write(self.style.NOTICE('Recalculating donor summaries from donation_history...'))

        donors = Donor.objects.annotate(ledger_latest=Max('donations__donation_date')).order_by('pk')
        total = 0
        updated = 0
        for donor in donors.iterator():
            total += 1
            expected = summarize_ledger([donor.ledger_latest])
            changed = (
                donor.date_of_last_donation != expected.date_of_last_donation or
                donor.next_donation_date != expected.next_donation_date
            )
            if not changed:
                continue

            updated += 1
            self.stdout.write(
                f'  {donor.pk}: {donor.date_of_last_donation}/{donor.next_donation_date}'
                f' -> {expected.date_of_last_donation}/{expected.next_donation_date}'
            )
            if dry_run:
                continue

            with transaction.atomic():
                locked = Donor.objects.select_for_update().get(pk=donor.pk)
                recalculate_donor_summary(locked, trigger='maintenance')

        label = 'to update' if dry_run else 'updated'
        self.stdout.write(self.style.SUCCESS(f'Processed: {total}, {label}: {updated}'))
