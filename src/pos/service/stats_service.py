from django.db.models import Count, Q, QuerySet
from django.utils import timezone

from entitlements.models import EntitlementRecord, Redemption, RedemptionKind
from pos.schema import PosStatsSchema


def recent_redemptions() -> QuerySet[Redemption]:
    """Redemptions across all terminals, newest first."""
    return Redemption.objects.select_related("record").order_by("-created_at")


def get_stats() -> PosStatsSchema:
    """Counters shown on top of the POS screen."""
    today = timezone.localdate()
    today_counts = Redemption.objects.filter(created_at__date=today).aggregate(
        total=Count("id"),
        drinks=Count("id", filter=Q(kind=RedemptionKind.DRINK)),
        meals=Count("id", filter=Q(kind=RedemptionKind.MEAL)),
    )
    record_counts = EntitlementRecord.objects.aggregate(
        total=Count("id"),
        verified=Count("id", filter=Q(luma_verified=True)),
    )
    return PosStatsSchema(
        today_redemptions=today_counts["total"],
        today_drinks=today_counts["drinks"],
        today_meals=today_counts["meals"],
        verified_records=record_counts["verified"],
        total_records=record_counts["total"],
    )
