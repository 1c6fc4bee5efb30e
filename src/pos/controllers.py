from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate
from ninja_jwt.authentication import JWTAuth

from common.controllers import UserAwareController
from common.permissions import IsOperator
from common.schema import ErrorResponse
from common.throttling import ScanThrottle, UserDefaultThrottle
from entitlements.models import EntitlementRecord, Redemption
from entitlements.service.ledger import EntitlementLedger, EntitlementLimits

from . import schema
from .service import stats_service
from .service.scan_service import ScanOutcome, ScanPipeline
from .state import ScanTerminal

TERMINAL_RESPONSES = {200: schema.TerminalSnapshot, 409: ErrorResponse}


@api_controller("/pos", auth=JWTAuth(), permissions=[IsOperator], tags=["POS"], throttle=UserDefaultThrottle())
class PosController(UserAwareController):
    """Endpoints used by POS terminals to redeem guest drinks and meals."""

    def terminal(self) -> ScanTerminal:
        """The terminal of the authenticated operator."""
        return ScanTerminal(self.user().pk)

    @route.get("/terminal", url_name="pos_terminal", response=schema.TerminalSnapshot)
    def get_terminal(self) -> schema.TerminalSnapshot:
        """Current state of this operator's terminal and the result of its last scan."""
        return self.terminal().snapshot()

    @route.post("/terminal/start", url_name="pos_terminal_start", response=TERMINAL_RESPONSES)
    def start_scanning(self) -> schema.TerminalSnapshot:
        """Open the scanner (IDLE or RESULT -> SCANNING)."""
        return self.terminal().start()

    @route.post("/terminal/cancel", url_name="pos_terminal_cancel", response=TERMINAL_RESPONSES)
    def cancel_scanning(self) -> schema.TerminalSnapshot:
        """Close the scanner without scanning. Only possible while SCANNING."""
        return self.terminal().cancel()

    @route.post("/terminal/reset", url_name="pos_terminal_reset", response=TERMINAL_RESPONSES)
    def reset_terminal(self) -> schema.TerminalSnapshot:
        """Dismiss the last result (RESULT -> IDLE)."""
        return self.terminal().reset()

    @route.post(
        "/scan",
        url_name="pos_scan",
        response={
            200: schema.ScanOutcomeSchema,
            400: ErrorResponse,
            403: ErrorResponse,
            409: ErrorResponse,
            410: ErrorResponse,
            422: ErrorResponse,
            502: ErrorResponse,
            503: ErrorResponse,
            504: ErrorResponse,
        },
        throttle=ScanThrottle(),
    )
    def scan(self, payload: schema.ScanRequestSchema) -> ScanOutcome:
        """Redeem one drink or meal for the guest whose Lu.ma check-in code was scanned.

        The guest is verified against the Lu.ma guest list, their entitlement record is
        created on first scan with the configured limits, and one unit is redeemed.
        Every rejection carries a `code` and a human readable `detail` for the operator.
        """
        self.bind_user_context()
        operator = self.user()
        return ScanPipeline.for_operator(operator).run(payload.text, payload.kind, operator=operator)

    @route.get(
        "/records/{record_id}",
        url_name="pos_get_record",
        response={200: schema.EntitlementRecordSchema, 410: ErrorResponse},
    )
    def get_record(self, record_id: UUID) -> EntitlementRecord:
        """Fresh view of a guest's remaining entitlements."""
        return EntitlementLedger(EntitlementLimits.from_settings()).get(record_id)

    @route.get(
        "/redemptions",
        url_name="pos_list_redemptions",
        response=PaginatedResponseSchema[schema.RedemptionSchema],
    )
    @paginate(PageNumberPaginationExtra, page_size=10)
    def list_redemptions(self) -> QuerySet[Redemption]:
        """Recent redemptions across all terminals, newest first."""
        return stats_service.recent_redemptions()

    @route.get("/stats", url_name="pos_stats", response=schema.PosStatsSchema)
    def stats(self) -> schema.PosStatsSchema:
        """Today's redemptions and guest record totals."""
        return stats_service.get_stats()
