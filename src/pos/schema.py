import typing as t

from ninja import ModelSchema, Schema

from common.schema import ScanText
from entitlements.models import EntitlementRecord, Redemption, RedemptionKind
from luma.schema import ResolvedGuest

from .state import ScanResult, ScanState, TerminalSnapshot

__all__ = [
    "EntitlementRecordSchema",
    "PosStatsSchema",
    "RedemptionSchema",
    "ScanOutcomeSchema",
    "ScanRequestSchema",
    "ScanResult",
    "ScanState",
    "TerminalSnapshot",
]


class ScanRequestSchema(Schema):
    text: ScanText
    kind: RedemptionKind = RedemptionKind.DRINK


class EntitlementRecordSchema(ModelSchema):
    class Meta:
        model = EntitlementRecord
        fields = [
            "id",
            "public_key",
            "event_id",
            "email",
            "attendee_name",
            "remaining_drinks",
            "remaining_meals",
            "luma_verified",
            "created_at",
            "last_redemption_type",
            "last_redemption_at",
        ]


class ScanOutcomeSchema(Schema):
    status: t.Literal["accepted"] = "accepted"
    kind: RedemptionKind
    created: bool
    guest: ResolvedGuest
    record: EntitlementRecordSchema


class RedemptionSchema(ModelSchema):
    attendee_name: str
    email: str
    luma_verified: bool

    class Meta:
        model = Redemption
        fields = ["id", "kind", "remaining_after", "created_at"]

    @staticmethod
    def resolve_attendee_name(obj: Redemption) -> str:
        return obj.record.attendee_name

    @staticmethod
    def resolve_email(obj: Redemption) -> str:
        return obj.record.email

    @staticmethod
    def resolve_luma_verified(obj: Redemption) -> bool:
        return obj.record.luma_verified


class PosStatsSchema(Schema):
    today_redemptions: int
    today_drinks: int
    today_meals: int
    verified_records: int
    total_records: int
