import pytest

from entitlements.models import EntitlementRecord
from entitlements.service.ledger import EntitlementLedger, EntitlementLimits


@pytest.fixture
def ledger() -> EntitlementLedger:
    return EntitlementLedger(EntitlementLimits(drinks=3, meals=1))


@pytest.fixture
def record(ledger: EntitlementLedger) -> EntitlementRecord:
    record, _ = ledger.find_or_create(
        public_key="g-abc",
        email="alice@example.com",
        display_name="Alice Liddell",
        verified=True,
        event_id="evt-popup",
    )
    return record
