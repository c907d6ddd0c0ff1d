from django.contrib import admin
from django.utils.html import format_html
from .models import Category, Merchant, MerchantLocation, GiftItem, LocationQRCode, MerchantStatus


class MerchantLocationInline(admin.TabularInline):
    """Inline admin for merchant locations."""
    model = MerchantLocation
    extra = 0
    fields = ['name', 'address', 'city', 'county', 'is_active']


@admin.register(Merchant)
class MerchantAdmin(admin.ModelAdmin):
    list_display = [
        'name',
        'contact_email',
        'county',
        'status_badge',
        'is_active',
        'brontie_fee_active',
        'commission_rate',
        'stripe_is_connected',
        'created_at',
    ]
    list_filter = ['status', 'is_active', 'brontie_fee_active', 'stripe_is_connected', 'county']
    search_fields = ['name', 'contact_email', 'stripe_account_id']
    readonly_fields = [
        'id',
        'password',
        'temp_password',
        'reset_token_hash',
        'reset_token_expires_at',
        'stripe_account_id',
        'brontie_fee_activated_at',
        'brontie_fee_deactivated_at',
        'created_at',
        'updated_at',
    ]
    inlines = [MerchantLocationInline]

    def status_badge(self, obj):
        """Display approval status as colored badge."""
        colors = {
            MerchantStatus.PENDING: ('#E5C49A', '#2C1810'),
            MerchantStatus.APPROVED: ('#6B8E5E', 'white'),
            MerchantStatus.DENIED: ('#B85C5C', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'is_active', 'display_order']
    list_editable = ['is_active', 'display_order']
    prepopulated_fields = {'slug': ('name',)}


@admin.register(GiftItem)
class GiftItemAdmin(admin.ModelAdmin):
    list_display = ['name', 'merchant', 'category', 'price', 'is_active']
    list_filter = ['is_active', 'category']
    search_fields = ['name', 'merchant__name']
    filter_horizontal = ['locations']
    raw_id_fields = ['merchant']


@admin.register(LocationQRCode)
class LocationQRCodeAdmin(admin.ModelAdmin):
    list_display = ['short_id', 'merchant', 'location', 'is_active', 'expires_at']
    list_filter = ['is_active']
    search_fields = ['short_id', 'merchant__name', 'location__name']
    readonly_fields = ['short_id', 'created_at']
