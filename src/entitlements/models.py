import typing as t

from django.conf import settings
from django.db import models

from common.models import TimeStampedModel


class RedemptionKind(models.TextChoices):
    DRINK = "drink", "Drink"
    MEAL = "meal", "Meal"


REMAINING_FIELDS: dict[str, str] = {
    RedemptionKind.DRINK: "remaining_drinks",
    RedemptionKind.MEAL: "remaining_meals",
}


class EntitlementRecord(TimeStampedModel):
    """Remaining drinks and meals of one Lu.ma guest, keyed by the guest's public key.

    Counters only ever go down, one unit per redemption, and never below zero.
    Identity fields are a snapshot from the first scan and are not refreshed.
    """

    public_key = models.CharField(max_length=255, unique=True, editable=False)
    event_id = models.CharField(max_length=255, db_index=True, blank=True, default="")
    email = models.CharField(max_length=320, db_index=True, blank=True, default="")
    attendee_name = models.CharField(max_length=255, blank=True, default="")
    remaining_drinks = models.PositiveIntegerField()
    remaining_meals = models.PositiveIntegerField()
    luma_verified = models.BooleanField(default=False)
    last_redemption_type = models.CharField(
        max_length=10, choices=RedemptionKind.choices, null=True, blank=True, default=None
    )
    last_redemption_at = models.DateTimeField(null=True, blank=True, default=None)

    class Meta:
        ordering = ["-created_at"]
        permissions = [("redeem_entitlements", "Can redeem guest entitlements at a POS terminal")]

    def __str__(self) -> str:
        name = self.attendee_name or self.email or self.public_key
        return f"{name} ({self.remaining_drinks}D/{self.remaining_meals}M)"

    def remaining(self, kind: str) -> int:
        """Remaining units of the given kind."""
        return t.cast(int, getattr(self, REMAINING_FIELDS[kind]))


class Redemption(TimeStampedModel):
    """Audit row for one successful redemption."""

    record = models.ForeignKey(EntitlementRecord, on_delete=models.CASCADE, related_name="redemptions")
    kind = models.CharField(max_length=10, choices=RedemptionKind.choices)
    remaining_after = models.PositiveIntegerField()
    redeemed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="redemptions",
    )

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.kind} for {self.record_id} ({self.remaining_after} left)"
