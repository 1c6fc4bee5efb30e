"""Admin classes for entitlement records and redemptions."""

from django.contrib import admin
from django.http import HttpRequest
from unfold.admin import ModelAdmin, TabularInline

from entitlements import models


class RedemptionInline(TabularInline):  # type: ignore[misc]
    model = models.Redemption
    extra = 0
    can_delete = False
    fields = ["created_at", "kind", "remaining_after", "redeemed_by"]
    readonly_fields = fields

    def has_add_permission(self, request: HttpRequest, obj: models.EntitlementRecord | None = None) -> bool:
        return False


@admin.register(models.EntitlementRecord)
class EntitlementRecordAdmin(ModelAdmin):  # type: ignore[misc]
    """Admin view for EntitlementRecord.

    Counters are read-only: they only move through redemptions.
    """

    list_display = [
        "attendee_name",
        "email",
        "event_id",
        "remaining_drinks",
        "remaining_meals",
        "luma_verified",
        "last_redemption_type",
        "last_redemption_at",
        "created_at",
    ]
    list_filter = ["luma_verified", "last_redemption_type", "event_id"]
    search_fields = ["attendee_name", "email", "public_key"]
    readonly_fields = [
        "public_key",
        "remaining_drinks",
        "remaining_meals",
        "luma_verified",
        "last_redemption_type",
        "last_redemption_at",
        "created_at",
        "updated_at",
    ]
    inlines = [RedemptionInline]

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def has_delete_permission(self, request: HttpRequest, obj: models.EntitlementRecord | None = None) -> bool:
        return False


@admin.register(models.Redemption)
class RedemptionAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["created_at", "record", "kind", "remaining_after", "redeemed_by"]
    list_filter = ["kind"]
    search_fields = ["record__attendee_name", "record__email", "record__public_key"]
    list_select_related = ["record", "redeemed_by"]

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def has_change_permission(self, request: HttpRequest, obj: models.Redemption | None = None) -> bool:
        return False
