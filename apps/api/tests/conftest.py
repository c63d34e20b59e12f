"""
Global test fixtures for pytest.

Provides reusable fixtures for API testing:
- Authenticated API clients by role
- Donor and donation ledger instances
"""
import itertools
from datetime import date
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from apps.authz.models import User, RoleChoices
from apps.donors.models import Donor
from apps.donors.services import record_donation


# ============================================================================
# API Clients
# ============================================================================

@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    """Admin user (without authenticated client)."""
    return User.objects.create_user(
        email='admin@test.com',
        username='admin',
        password='testpass123',
        role=RoleChoices.ADMIN,
        is_staff=True,
        is_active=True
    )


@pytest.fixture
def regular_user(db):
    """Authenticated account without the admin role."""
    return User.objects.create_user(
        email='user@test.com',
        username='viewer',
        password='testpass123',
        role=RoleChoices.USER,
        is_active=True
    )


@pytest.fixture
def admin_client(admin_user):
    """
    Authenticated API client with Admin role.
    Admin may register donors and mutate the donation ledger.
    """
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def user_client(regular_user):
    """
    Authenticated API client with User role.
    Should receive 403 on every admin-only endpoint.
    """
    client = APIClient()
    client.force_authenticate(user=regular_user)
    return client


# ============================================================================
# Donor Fixtures
# ============================================================================

_contact_numbers = itertools.count(5550100)


@pytest.fixture
def donor_factory(db):
    """Create donors with unique contact numbers. Summary fields start empty."""
    def create(**kwargs):
        defaults = {
            'donor_name': 'Test Donor',
            'blood_type': 'O+',
            'contact_number': f'+1{next(_contact_numbers)}',
            'is_active': True,
        }
        defaults.update(kwargs)
        return Donor.objects.create(**defaults)
    return create


@pytest.fixture
def donor(donor_factory):
    """Active O+ donor with an empty ledger."""
    return donor_factory(donor_name='Jane Doe', blood_type='O+')


@pytest.fixture
def donation_factory(db):
    """Record donations through the ledger service so the summary stays consistent."""
    def create(donor, donation_date, blood_units=Decimal('1.0'), donation_center='City Hospital'):
        if isinstance(donation_date, str):
            donation_date = date.fromisoformat(donation_date)
        return record_donation(
            donor_id=donor.id,
            donation_date=donation_date,
            blood_units=blood_units,
            donation_center=donation_center,
        )
    return create
