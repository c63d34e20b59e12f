"""
Django management command to create (or reset) an admin console account.

Usage:
    python manage.py create_admin
    python manage.py create_admin --email ops@example.org --password 'S3cret!'

Defaults:
    Email:    admin@admin.com
    Username: admin
    Password: Admin123!

Idempotent: an existing account gets its password reset and admin role restored.
"""
from django.core.management.base import BaseCommand

from apps.authz.models import RoleChoices, User


class Command(BaseCommand):
    help = 'Create or reset an admin console account'

    def add_arguments(self, parser):
        parser.add_argument('--email', default='admin@admin.com')
        parser.add_argument('--username', default='admin')
        parser.add_argument('--password', default='Admin123!')

    def handle(self, *args, **options):
        email = options['email']
        username = options['username']
        password = options['password']

        user = User.objects.filter(email__iexact=email).first()
        if user:
            self.stdout.write(self.style.WARNING(f'User "{email}" already exists'))
            user.set_password(password)
            user.username = username
            user.role = RoleChoices.ADMIN
            user.is_staff = True
            user.is_active = True
            user.save()
            self.stdout.write(self.style.SUCCESS(f'✓ Updated password and role for "{email}"'))
        else:
            user = User.objects.create_user(
                email=email,
                password=password,
                username=username,
                role=RoleChoices.ADMIN,
                is_staff=True,
                is_active=True,
            )
            self.stdout.write(self.style.SUCCESS(f'✓ Created admin "{email}"'))

        self.stdout.write('')
        self.stdout.write('=' * 70)
        self.stdout.write(self.style.SUCCESS('✓ ADMIN ACCOUNT READY'))
        self.stdout.write('=' * 70)
        self.stdout.write(f'  Email:    {user.email}')
        self.stdout.write(f'  Username: {user.username}')
        self.stdout.write(f'  Role:     {user.get_role_display()}')
        self.stdout.write('=' * 70)
