"""Entitlement ledger: find-or-create guest records and redeem single units.

Consistency rests on the database rather than on the caller:

- the unique constraint on ``public_key`` turns find-or-create into an
  insert-if-absent, so concurrent first scans of a guest converge on one record;
- a redemption is one conditional ``UPDATE ... WHERE remaining > 0``, so
  concurrent scans across terminals can never redeem more units than remain.
"""

import typing as t
from dataclasses import dataclass
from uuid import UUID

import structlog
from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser
from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from entitlements.exceptions import (
    AlreadyExhaustedError,
    LedgerTimeoutError,
    LedgerWriteFailedError,
    RecordVanishedError,
)
from entitlements.models import REMAINING_FIELDS, EntitlementRecord, Redemption, RedemptionKind

logger = structlog.get_logger(__name__)

# PostgreSQL SQLSTATE for statements cancelled by statement_timeout.
QUERY_CANCELED = "57014"


@dataclass(frozen=True)
class EntitlementLimits:
    drinks: int = 3
    meals: int = 1

    def __post_init__(self) -> None:
        if self.drinks < 0 or self.meals < 0:
            raise ValueError("Entitlement limits cannot be negative.")

    @classmethod
    def from_settings(cls) -> t.Self:
        """Build the limits from Django settings."""
        return cls(drinks=settings.DRINKS_LIMIT, meals=settings.MEALS_LIMIT)


def _clip(value: str, field_name: str) -> str:
    """Cut a display-only value to the column size."""
    max_length = EntitlementRecord._meta.get_field(field_name).max_length
    return value[:max_length] if max_length else value


def _write_failure(exc: DatabaseError) -> LedgerWriteFailedError:
    if getattr(exc.__cause__, "sqlstate", None) == QUERY_CANCELED:
        return LedgerTimeoutError()
    return LedgerWriteFailedError()


class EntitlementLedger:
    def __init__(self, limits: EntitlementLimits) -> None:
        self.limits = limits

    def get(self, record_id: UUID) -> EntitlementRecord:
        """Read a record fresh from the database.

        Raises:
            RecordVanishedError: If the record does not exist.
        """
        try:
            return EntitlementRecord.objects.get(pk=record_id)
        except EntitlementRecord.DoesNotExist as e:
            raise RecordVanishedError(record_id) from e

    def find_or_create(
        self,
        *,
        public_key: str,
        email: str,
        display_name: str,
        verified: bool,
        event_id: str = "",
    ) -> tuple[EntitlementRecord, bool]:
        """Return the record of a guest, creating it with full entitlements on first sight.

        An existing record is returned untouched: counters, name and email are never
        overwritten by later scans.

        Returns:
            The record and whether it was created by this call.
        """
        try:
            return EntitlementRecord.objects.get(public_key=public_key), False
        except EntitlementRecord.DoesNotExist:
            pass

        try:
            with transaction.atomic():
                record = EntitlementRecord.objects.create(
                    public_key=public_key,
                    event_id=_clip(event_id, "event_id"),
                    email=_clip(email, "email"),
                    attendee_name=_clip(display_name, "attendee_name"),
                    remaining_drinks=self.limits.drinks,
                    remaining_meals=self.limits.meals,
                    luma_verified=verified,
                )
        except (IntegrityError, ValidationError) as e:
            # Only a unique-key conflict is recoverable: another terminal won the insert race.
            existing = EntitlementRecord.objects.filter(public_key=public_key).first()
            if existing is None:
                logger.error("entitlement_record_rejected", public_key=public_key, error=str(e))
                raise LedgerWriteFailedError() from e
            logger.info("entitlement_record_insert_race", public_key=public_key)
            return existing, False
        except DatabaseError as e:
            logger.error("entitlement_record_create_failed", public_key=public_key, exc_info=True)
            raise _write_failure(e) from e

        logger.info(
            "entitlement_record_created",
            record_id=str(record.pk),
            public_key=public_key,
            event_id=event_id,
            remaining_drinks=record.remaining_drinks,
            remaining_meals=record.remaining_meals,
        )
        return record, True

    def redeem(
        self,
        record_id: UUID,
        kind: RedemptionKind | str,
        *,
        redeemed_by: AbstractBaseUser | None = None,
    ) -> EntitlementRecord:
        """Redeem one unit of ``kind`` and return the updated record.

        The decrement, the last-redemption fields and the audit row are written in
        one transaction; on any failure nothing is changed.

        Raises:
            RecordVanishedError: If the record no longer exists.
            AlreadyExhaustedError: If no unit of ``kind`` is left.
            LedgerWriteFailedError: If the database rejects the write.
        """
        kind = RedemptionKind(kind)
        field = REMAINING_FIELDS[kind]
        now = timezone.now()
        try:
            with transaction.atomic():
                updated = EntitlementRecord.objects.filter(pk=record_id, **{f"{field}__gt": 0}).update(
                    **{field: F(field) - 1},
                    last_redemption_type=kind,
                    last_redemption_at=now,
                    updated_at=now,
                )
                if not updated:
                    current = EntitlementRecord.objects.filter(pk=record_id).first()
                    if current is None:
                        raise RecordVanishedError(record_id)
                    raise AlreadyExhaustedError(kind, current)
                record = EntitlementRecord.objects.get(pk=record_id)
                Redemption.objects.create(
                    record=record,
                    kind=kind,
                    remaining_after=record.remaining(kind),
                    redeemed_by=redeemed_by,
                )
        except DatabaseError as e:
            logger.error("entitlement_redeem_failed", record_id=str(record_id), kind=kind.value, exc_info=True)
            raise _write_failure(e) from e

        logger.info(
            "entitlement_redeemed",
            record_id=str(record_id),
            kind=kind.value,
            remaining=record.remaining(kind),
        )
        return record
