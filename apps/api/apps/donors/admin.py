"""Donor admin with inline donation ledger."""
from django.contrib import admin
from .models import Donor, DonationRecord
from .services import deactivate_donor


class DonationRecordInline(admin.TabularInline):
    model = DonationRecord
    extra = 0
    fields = ['donation_date', 'blood_units', 'donation_center', 'notes', 'recorded_by', 'created_at']
    readonly_fields = ['donation_date', 'blood_units', 'donation_center', 'notes', 'recorded_by', 'created_at']
    can_delete = False
    ordering = ['-donation_date']

    def has_add_permission(self, request, obj=None):
        # Ledger writes go through the donation endpoints
        return False


@admin.register(Donor)
class DonorAdmin(admin.ModelAdmin):
    list_display = [
        'donor_name', 'blood_type', 'contact_number', 'is_active',
        'date_of_last_donation', 'next_donation_date', 'is_eligible_now'
    ]
    list_filter = ['blood_type', 'is_active', 'next_donation_date']
    search_fields = ['donor_name', 'contact_number']
    readonly_fields = ['is_active', 'date_of_last_donation', 'next_donation_date', 'created_at', 'updated_at']
    ordering = ['donor_name']
    inlines = [DonationRecordInline]
    actions = ['deactivate_selected']

    fieldsets = (
        ('Donor', {
            'fields': ('donor_name', 'blood_type', 'contact_number', 'is_active')
        }),
        ('Eligibility', {
            'fields': ('date_of_last_donation', 'next_donation_date')
        }),
        ('Audit', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def is_eligible_now(self, obj):
        return obj.is_eligible_now
    is_eligible_now.boolean = True

    @admin.action(description='Deactivate selected donors')
    def deactivate_selected(self, request, queryset):
        count = 0
        for donor in queryset.filter(is_active=True):
            deactivate_donor(donor.pk)
            count += 1
        self.message_user(request, f'{count} donor(s) deactivated.')

    def has_delete_permission(self, request, obj=None):
        # Donors are soft deleted; a hard delete would cascade the ledger
        return False

    def get_actions(self, request):
        actions = super().get_actions(request)
        actions.pop('delete_selected', None)
        return actions


@admin.register(DonationRecord)
class DonationRecordAdmin(admin.ModelAdmin):
    list_display = ['donor', 'donation_date', 'blood_units', 'donation_center', 'recorded_by', 'created_at']
    list_filter = ['donation_date', 'donation_center']
    search_fields = ['donor__donor_name', 'donor__contact_number', 'donation_center']
    readonly_fields = ['donor', 'donation_date', 'blood_units', 'donation_center', 'notes', 'recorded_by', 'created_at']
    date_hierarchy = 'donation_date'
    ordering = ['-donation_date']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
