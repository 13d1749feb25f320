"""QRoyal admin.

Administrators manage businesses, customers, memberships and discounts
here. Passwords are never edited as plain fields; point balances change
through the ledger (see AwardService.adjust_points).
"""

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html

from qroyal.models import (
    Business,
    Customer,
    Discount,
    Membership,
    PointTransaction,
)
from qroyal.services import business as business_service
from qroyal.services import customer as customer_service


# ===========================================
# Inline Classes (must be defined before the admins using them)
# ===========================================


class MembershipInline(admin.TabularInline):
    model = Membership
    extra = 0
    fields = ["business", "points", "rewards_earned", "last_reward_at"]
    readonly_fields = ["points", "rewards_earned", "last_reward_at"]
    raw_id_fields = ["business"]


class PointTransactionInline(admin.TabularInline):
    model = PointTransaction
    extra = 0
    fields = ["transaction_type", "points", "balance_after", "description", "created_by", "created_at"]
    readonly_fields = fields
    ordering = ["-created_at", "-id"]
    max_num = 20
    verbose_name_plural = "Ledger (last 20)"

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ===========================================
# Business Admin
# ===========================================


@admin.register(Business)
class BusinessAdmin(admin.ModelAdmin):
    list_display = [
        "name",
        "email",
        "points_per_scan",
        "reward_threshold",
        "member_count",
        "is_active",
    ]
    list_filter = ["is_active"]
    search_fields = ["name", "public_name", "email", "token"]
    list_editable = ["is_active"]
    readonly_fields = ["token", "qr_preview", "created_at", "updated_at"]
    actions = ["rerender_qr"]

    fieldsets = [
        ("Identification", {"fields": ["token", "name", "public_name", "email"]}),
        ("Loyalty", {"fields": ["points_per_scan", "reward_threshold", "reward_message"]}),
        (
            "QR style",
            {"fields": ["qr_logo_url", "qr_color", "qr_eye_shape", "qr_dot_style", "qr_preview"]},
        ),
        ("System", {"fields": ["is_active", "created_at", "updated_at"], "classes": ["collapse"]}),
    ]

    def member_count(self, obj):
        return obj.memberships.count()

    member_count.short_description = "Members"

    def qr_preview(self, obj):
        if not obj.qr_data_url:
            return "-"
        return format_html('<img src="{}" width="160" height="160">', obj.qr_data_url)

    qr_preview.short_description = "QR code"

    @admin.action(description="Re-render QR codes")
    def rerender_qr(self, request, queryset):
        for business in queryset:
            business_service.render_qr(business)
        self.message_user(request, f"Re-rendered {queryset.count()} QR codes.")


# ===========================================
# Customer Admin
# ===========================================


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = [
        "token",
        "name",
        "phone",
        "needs_setup_badge",
        "is_active",
        "created_at",
    ]
    list_filter = ["is_active"]
    search_fields = ["token", "name", "phone"]
    list_editable = ["is_active"]
    readonly_fields = ["token", "qr_preview", "created_at", "updated_at"]
    inlines = [MembershipInline]
    actions = ["rerender_qr"]

    fieldsets = [
        ("Identification", {"fields": ["token", "name", "phone", "qr_preview"]}),
        ("System", {"fields": ["is_active", "created_at", "updated_at"], "classes": ["collapse"]}),
    ]

    def needs_setup_badge(self, obj):
        if obj.needs_setup:
            return format_html('<span style="color: orange;">setup</span>')
        return format_html('<span style="color: green;">ok</span>')

    needs_setup_badge.short_description = "Profile"

    def qr_preview(self, obj):
        if not obj.qr_data_url:
            return "-"
        return format_html('<img src="{}" width="160" height="160">', obj.qr_data_url)

    qr_preview.short_description = "QR code"

    @admin.action(description="Re-render QR codes")
    def rerender_qr(self, request, queryset):
        for customer in queryset:
            customer_service.render_qr(customer)
        self.message_user(request, f"Re-rendered {queryset.count()} QR codes.")


# ===========================================
# Membership Admin
# ===========================================


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = [
        "customer_link",
        "business",
        "points",
        "rewards_earned",
        "last_reward_at",
        "updated_at",
    ]
    list_filter = ["business"]
    search_fields = ["customer__token", "customer__name", "customer__phone", "business__name"]
    raw_id_fields = ["customer", "business"]
    readonly_fields = ["points", "rewards_earned", "last_reward_at", "created_at", "updated_at"]
    inlines = [PointTransactionInline]

    def customer_link(self, obj):
        url = reverse("admin:qroyal_customer_change", args=[obj.customer.pk])
        return format_html(
            '<a href="{}">{}</a>',
            url,
            obj.customer.name,
        )

    customer_link.short_description = "Customer"


# ===========================================
# Discount Admin
# ===========================================


@admin.register(Discount)
class DiscountAdmin(admin.ModelAdmin):
    list_display = [
        "name",
        "business",
        "percentage",
        "price",
        "expiry_date",
        "active",
    ]
    list_filter = ["active", "business"]
    search_fields = ["name", "description"]
    list_editable = ["active"]
    raw_id_fields = ["business"]
