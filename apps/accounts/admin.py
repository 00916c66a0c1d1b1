# ==========================================
# apps/accounts/admin.py
# ==========================================

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from .models import User, Profile


class ProfileInline(admin.StackedInline):
    """Bank profile shown on the user page."""
    model = Profile
    can_delete = False
    extra = 0
    fields = [
        'display_name',
        'email',
        'bank_code',
        'bank_account_number',
        'bank_owner_name',
    ]


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Custom admin interface for User model.

    Provides user listing with key fields, filtering by status and
    search by email and display name.
    """

    list_display = [
        'email',
        'display_name',
        'is_active_badge',
        'payment_ready_badge',
        'created_at',
        'last_login',
    ]

    list_filter = [
        'is_active',
        'is_staff',
        'is_superuser',
        'created_at',
    ]

    search_fields = [
        'email',
        'display_name',
    ]

    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    # Remove username field references from BaseUserAdmin
    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'display_name', 'password')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'display_name', 'password1', 'password2'),
        }),
    )

    readonly_fields = ['created_at', 'last_login']
    filter_horizontal = ['groups', 'user_permissions']
    inlines = [ProfileInline]

    def is_active_badge(self, obj):
        """Display active status as colored badge."""
        if obj.is_active:
            return format_html(
                '<span style="background: #2E7D5B; color: white; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">Active</span>'
            )
        return format_html(
            '<span style="background: #B85C5C; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">Inactive</span>'
        )
    is_active_badge.short_description = 'Status'
    is_active_badge.admin_order_field = 'is_active'

    def payment_ready_badge(self, obj):
        """Whether the user can receive QR payments."""
        profile = Profile.objects.filter(user=obj).first()
        if profile and profile.is_payment_ready:
            return format_html(
                '<span style="background: #2E7D5B; color: white; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">Bank ready</span>'
            )
        return format_html(
            '<span style="background: #E5C49A; color: #2C1810; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">No bank info</span>'
        )
    payment_ready_badge.short_description = 'Payments'


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    """Bank profiles."""

    list_display = ['user', 'display_name', 'bank_code', 'bank_account_number', 'updated_at']
    search_fields = ['display_name', 'email', 'bank_owner_name']
    readonly_fields = ['created_at', 'updated_at']
