from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    User admin configuration
    """
    list_display = (
        'username', 'email', 'display_name', 'role',
        'total_earnings', 'total_views', 'is_active', 'created_at'
    )
    list_filter = ('role', 'is_active', 'is_staff', 'is_superuser', 'created_at')
    search_fields = ('username', 'email', 'display_name', 'first_name', 'last_name', 'paypal_email')
    ordering = ('-created_at',)
    readonly_fields = ('created_at', 'updated_at')

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Marketplace', {
            'fields': ('role', 'display_name', 'bio', 'avatar', 'paypal_email')
        }),
        ('Balances', {
            'fields': ('total_earnings', 'total_views')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Marketplace', {
            'fields': ('email', 'role', 'display_name', 'paypal_email')
        }),
    )
