"""The scan pipeline run for every code scanned at a POS terminal.

decode -> resolve guest on Lu.ma -> find-or-create ledger record
       -> check remaining -> redeem one unit

Every failure rejects the scan as a whole; nothing is retried automatically.
"""

import typing as t
from dataclasses import dataclass

import structlog
from django.contrib.auth.models import AbstractBaseUser
from django.utils import timezone

from entitlements.exceptions import AlreadyExhaustedError, LedgerError
from entitlements.models import EntitlementRecord, RedemptionKind
from entitlements.service.ledger import EntitlementLedger, EntitlementLimits
from luma.client import LumaClient
from luma.exceptions import ResolutionError
from luma.resolver import GuestResolver, ResolverOptions
from luma.schema import ResolvedGuest
from pos.exceptions import TerminalError
from pos.state import ScanResult, ScanTerminal

logger = structlog.get_logger(__name__)

INTERNAL_ERROR_CODE = "internal_error"


@dataclass(frozen=True)
class ScanOutcome:
    guest: ResolvedGuest
    record: EntitlementRecord
    kind: RedemptionKind
    created: bool


class ScanPipeline:
    """Runs one scan on one terminal."""

    def __init__(self, *, terminal: ScanTerminal, resolver: GuestResolver, ledger: EntitlementLedger) -> None:
        self.terminal = terminal
        self.resolver = resolver
        self.ledger = ledger

    @classmethod
    def for_operator(cls, operator: AbstractBaseUser) -> t.Self:
        """Wire a pipeline for the operator's terminal from Django settings."""
        return cls(
            terminal=ScanTerminal(operator.pk),
            resolver=GuestResolver(LumaClient.from_settings(), ResolverOptions.from_settings()),
            ledger=EntitlementLedger(EntitlementLimits.from_settings()),
        )

    def run(
        self,
        scanned_text: str,
        kind: RedemptionKind | str = RedemptionKind.DRINK,
        operator: AbstractBaseUser | None = None,
    ) -> ScanOutcome:
        """Process a scan end to end.

        Raises:
            TerminalBusyError: If the terminal is already processing a scan.
            ResolutionError: If the scan cannot be resolved to a verified guest.
            LedgerError: If the entitlement cannot be redeemed.
        """
        kind = RedemptionKind(kind)
        self.terminal.submit()
        try:
            outcome = self._process(scanned_text, kind, operator)
        except (ResolutionError, LedgerError, TerminalError) as e:
            self._reject(kind, code=e.code, detail=str(e))
            raise
        except Exception:
            self._reject(kind, code=INTERNAL_ERROR_CODE, detail="The scan could not be processed.")
            raise

        self.terminal.finish(
            ScanResult(
                accepted=True,
                code="redeemed",
                detail=f"{outcome.guest.name}: {outcome.record.remaining(kind)} {kind.label.lower()}s remaining",
                kind=kind,
                public_key=outcome.guest.public_key,
                record_id=outcome.record.pk,
                finished_at=timezone.now(),
            )
        )
        logger.info(
            "scan_accepted",
            kind=kind.value,
            public_key=outcome.guest.public_key,
            record_id=str(outcome.record.pk),
            created=outcome.created,
            remaining=outcome.record.remaining(kind),
        )
        return outcome

    def _process(self, scanned_text: str, kind: RedemptionKind, operator: AbstractBaseUser | None) -> ScanOutcome:
        guest = self.resolver.resolve(scanned_text)
        self.terminal.resolved()

        record, created = self.ledger.find_or_create(
            public_key=guest.public_key,
            email=guest.email,
            display_name=guest.name,
            verified=True,
            event_id=guest.event_id,
        )
        # Re-read right before redeeming; an exhausted counter is rejected without touching the ledger.
        current = self.ledger.get(record.pk)
        if current.remaining(kind) <= 0:
            raise AlreadyExhaustedError(kind, current)

        record = self.ledger.redeem(current.pk, kind, redeemed_by=operator)
        return ScanOutcome(guest=guest, record=record, kind=kind, created=created)

    def _reject(self, kind: RedemptionKind, *, code: str, detail: str) -> None:
        self.terminal.finish(
            ScanResult(accepted=False, code=code, detail=detail, kind=kind, finished_at=timezone.now())
        )
        logger.info("scan_rejected", kind=kind.value, code=code)
