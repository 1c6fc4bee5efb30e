from unittest import mock

import httpx
import pytest
from django.contrib.auth.models import AbstractUser
from django.db import DatabaseError

from conftest import CHECK_IN_BASE, LumaStub
from entitlements.exceptions import AlreadyExhaustedError, LedgerWriteFailedError
from entitlements.models import EntitlementRecord, Redemption, RedemptionKind
from entitlements.service.ledger import EntitlementLedger, EntitlementLimits
from luma.exceptions import EventMismatchError, GuestNotVerifiableError, ProviderTimeoutError, UnrecognizedFormatError
from luma.resolver import GuestResolver, ResolverOptions
from pos.exceptions import TerminalBusyError
from pos.service.scan_service import ScanPipeline
from pos.state import ScanState, ScanTerminal

pytestmark = pytest.mark.django_db

SCAN = "https://lu.ma/check-in/evt_123?pk=abc"


@pytest.fixture
def stub() -> LumaStub:
    stub = LumaStub()
    stub.add_guest("abc", email="Alice@Example.com", name="Alice Liddell")
    return stub


@pytest.fixture
def ledger() -> EntitlementLedger:
    return EntitlementLedger(EntitlementLimits(drinks=3, meals=1))


@pytest.fixture
def pipeline(stub: LumaStub, ledger: EntitlementLedger) -> ScanPipeline:
    return ScanPipeline(
        terminal=ScanTerminal("t1"),
        resolver=GuestResolver(
            stub.client(), ResolverOptions(check_in_bases=(CHECK_IN_BASE,), configured_event_id="evt_123")
        ),
        ledger=ledger,
    )


def test_first_and_second_scan(pipeline: ScanPipeline, operator: AbstractUser) -> None:
    first = pipeline.run(SCAN, operator=operator)

    assert first.created is True
    assert first.record.remaining_drinks == 2
    assert first.record.email == "alice@example.com"
    assert first.record.attendee_name == "Alice Liddell"
    assert first.record.luma_verified is True
    assert first.record.event_id == "evt_123"

    pipeline.terminal.reset()
    second = pipeline.run(SCAN, operator=operator)

    assert second.created is False
    assert second.record.pk == first.record.pk
    assert second.record.remaining_drinks == 1
    assert Redemption.objects.filter(record=second.record, redeemed_by=operator).count() == 2

    snapshot = pipeline.terminal.snapshot()
    assert snapshot.state == ScanState.RESULT
    assert snapshot.last_result is not None
    assert snapshot.last_result.accepted is True
    assert snapshot.last_result.record_id == first.record.pk
    assert "1 drinks remaining" in snapshot.last_result.detail


def test_guest_without_email_creates_no_record(pipeline: ScanPipeline, stub: LumaStub) -> None:
    stub.add_guest("abc", email=None)

    with pytest.raises(GuestNotVerifiableError):
        pipeline.run(SCAN)

    assert not EntitlementRecord.objects.exists()
    snapshot = pipeline.terminal.snapshot()
    assert snapshot.state == ScanState.RESULT
    assert snapshot.last_result is not None
    assert snapshot.last_result.accepted is False
    assert snapshot.last_result.code == "guest_not_verifiable"


def test_exhausted_meal_is_rejected_before_redeem(pipeline: ScanPipeline, ledger: EntitlementLedger) -> None:
    pipeline.run(SCAN, RedemptionKind.MEAL)
    pipeline.terminal.reset()
    record = EntitlementRecord.objects.get(public_key="abc")
    before = record.updated_at

    with mock.patch.object(ledger, "redeem", wraps=ledger.redeem) as redeem:
        with pytest.raises(AlreadyExhaustedError):
            pipeline.run(SCAN, "meal")
    redeem.assert_not_called()

    record.refresh_from_db()
    assert record.remaining_meals == 0
    assert record.remaining_drinks == 3
    assert record.updated_at == before
    assert pipeline.terminal.snapshot().last_result.code == "already_exhausted"  # type: ignore[union-attr]


@pytest.mark.parametrize(
    "text,error",
    [
        ("just some text", UnrecognizedFormatError),
        ("https://lu.ma/check-in/evt_other?pk=abc", EventMismatchError),
    ],
)
def test_rejected_before_any_call(
    pipeline: ScanPipeline, stub: LumaStub, text: str, error: type[Exception]
) -> None:
    with pytest.raises(error):
        pipeline.run(text)

    assert stub.calls == []
    assert not EntitlementRecord.objects.exists()


def test_provider_timeout_is_not_retried(pipeline: ScanPipeline, stub: LumaStub) -> None:
    stub.guests["abc"] = httpx.ReadTimeout("too slow")

    with pytest.raises(ProviderTimeoutError):
        pipeline.run(SCAN)

    assert len(stub.calls) == 1
    assert pipeline.terminal.snapshot().last_result.code == "provider_timeout"  # type: ignore[union-attr]


def test_ledger_write_failure_releases_terminal(pipeline: ScanPipeline) -> None:
    with mock.patch.object(Redemption.objects, "create", side_effect=DatabaseError("gone")):
        with pytest.raises(LedgerWriteFailedError):
            pipeline.run(SCAN)

    assert EntitlementRecord.objects.get(public_key="abc").remaining_drinks == 3
    snapshot = pipeline.terminal.snapshot()
    assert snapshot.state == ScanState.RESULT
    assert pipeline.run(SCAN).record.remaining_drinks == 2


def test_unexpected_error_is_reported_and_reraised(pipeline: ScanPipeline, ledger: EntitlementLedger) -> None:
    with mock.patch.object(ledger, "find_or_create", side_effect=RuntimeError("boom")):
        with pytest.raises(RuntimeError):
            pipeline.run(SCAN)

    assert pipeline.terminal.snapshot().last_result.code == "internal_error"  # type: ignore[union-attr]


def test_busy_terminal_rejects_scan(pipeline: ScanPipeline, stub: LumaStub) -> None:
    pipeline.terminal.submit()

    with pytest.raises(TerminalBusyError):
        pipeline.run(SCAN)

    assert stub.calls == []
    assert pipeline.terminal.snapshot().state == ScanState.RESOLVING


def test_guest_identity_outside_column_rules_still_redeems(pipeline: ScanPipeline, stub: LumaStub) -> None:
    """Lu.ma identity is a display snapshot: unusual emails and long names are stored, not validated."""
    stub.add_guest("abc", email="José@Example.com", name="N" * 300)

    outcome = pipeline.run(SCAN)

    assert outcome.created is True
    assert outcome.record.remaining_drinks == 2
    record = EntitlementRecord.objects.get(public_key="abc")
    assert record.email == "josé@example.com"
    assert record.attendee_name == "N" * 255
    assert pipeline.terminal.snapshot().last_result.accepted is True  # type: ignore[union-attr]
