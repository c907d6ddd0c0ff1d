from django.contrib import admin
from django.utils.html import format_html
from .models import Voucher, VoucherStatus, Transaction, RedemptionLog, PayoutItem


@admin.register(Voucher)
class VoucherAdmin(admin.ModelAdmin):
    list_display = [
        'redemption_code',
        'gift_item',
        'amount',
        'status_badge',
        'sender_name',
        'recipient_name',
        'created_at',
        'redeemed_at',
    ]
    list_filter = ['status', 'created_at']
    search_fields = ['redemption_code', 'payment_intent_id', 'email', 'recipient_email']
    readonly_fields = [
        'redemption_code',
        'payment_intent_id',
        'recipient_token',
        'issued_at',
        'confirmed_at',
        'redeemed_at',
        'refunded_at',
        'disputed_at',
        'created_at',
        'updated_at',
    ]
    raw_id_fields = ['gift_item']
    filter_horizontal = ['valid_locations']

    def status_badge(self, obj):
        """Display voucher status as colored badge."""
        colors = {
            VoucherStatus.UNREDEEMED: ('#6B8E5E', 'white'),
            VoucherStatus.REDEEMED: ('#A47449', 'white'),
            VoucherStatus.REFUNDED: ('#B85C5C', 'white'),
            VoucherStatus.DISPUTED: ('#B85C5C', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#E5C49A', '#2C1810'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """Ledger entries are append-only, so the admin is read-only."""

    list_display = ['created_at', 'type', 'status', 'merchant', 'amount', 'stripe_fee', 'brontie_commission']
    list_filter = ['type', 'status']
    search_fields = ['stripe_payment_intent_id', 'voucher__redemption_code', 'merchant__name']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(RedemptionLog)
class RedemptionLogAdmin(admin.ModelAdmin):
    list_display = ['voucher', 'merchant_location', 'timestamp']
    raw_id_fields = ['voucher', 'merchant_location']


@admin.register(PayoutItem)
class PayoutItemAdmin(admin.ModelAdmin):
    list_display = ['merchant', 'amount_payable', 'brontie_fee', 'stripe_fee', 'status', 'paid_out_at']
    list_filter = ['status']
    search_fields = ['merchant__name', 'transfer_id']
    raw_id_fields = ['voucher', 'merchant']
