# Generated migration for donors app

import decimal
import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Donor',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('donor_name', models.CharField(max_length=100, verbose_name='Donor name')),
                ('blood_type', models.CharField(choices=[('A+', 'A+'), ('A-', 'A-'), ('B+', 'B+'), ('B-', 'B-'), ('AB+', 'AB+'), ('AB-', 'AB-'), ('O+', 'O+'), ('O-', 'O-')], max_length=3, verbose_name='Blood type')),
                ('contact_number', models.CharField(max_length=20, verbose_name='Contact number')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('date_of_last_donation', models.DateField(blank=True, help_text='Most recent donation_date in the donor ledger', null=True, verbose_name='Date of last donation')),
                ('next_donation_date', models.DateField(blank=True, help_text='First date the donor is eligible to donate again', null=True, verbose_name='Next donation date')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated At')),
            ],
            options={
                'verbose_name': 'Donor',
                'verbose_name_plural': 'Donors',
                'db_table': 'donors',
                'ordering': ['donor_name'],
                'indexes': [
                    models.Index(fields=['blood_type'], name='idx_donor_blood_type'),
                    models.Index(fields=['next_donation_date'], name='idx_donor_next_donation'),
                    models.Index(fields=['is_active'], name='idx_donor_is_active'),
                    models.Index(fields=['contact_number'], name='idx_donor_contact'),
                ],
            },
        ),
        migrations.CreateModel(
            name='DonationRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('donation_date', models.DateField(verbose_name='Donation date')),
                ('blood_units', models.DecimalField(decimal_places=1, default=decimal.Decimal('1.0'), max_digits=3, validators=[django.core.validators.MinValueValidator(decimal.Decimal('0.1'))], verbose_name='Blood units')),
                ('donation_center', models.CharField(blank=True, max_length=100, verbose_name='Donation center')),
                ('notes', models.TextField(blank=True, verbose_name='Notes')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created At')),
                ('donor', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='donations', to='donors.donor', verbose_name='Donor')),
                ('recorded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='recorded_donations', to=settings.AUTH_USER_MODEL, verbose_name='Recorded by')),
            ],
            options={
                'verbose_name': 'Donation record',
                'verbose_name_plural': 'Donation history',
                'db_table': 'donation_history',
                'ordering': ['-donation_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['donor', '-donation_date'], name='idx_donation_donor_date'),
                    models.Index(fields=['donation_date'], name='idx_donation_date'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('blood_units__gt', 0)), name='donation_blood_units_positive'),
                ],
            },
        ),
    ]
