"""Donors app configuration."""
from django.apps import AppConfig


class DonorsConfig(AppConfig):
    """Configuration for donors app."""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.donors'
    verbose_name = 'Blood Donors'
