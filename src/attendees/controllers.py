from ninja_extra import ControllerBase, api_controller, route

from common.schema import ErrorResponse
from common.throttling import PassRequestThrottle

from .schema import AttendeePassSchema, PassRequestSchema
from .service.pass_service import AttendeePass, issue_pass


@api_controller("/passes", tags=["Attendee Passes"], throttle=PassRequestThrottle())
class AttendeePassController(ControllerBase):
    @route.post(
        "",
        url_name="issue_attendee_pass",
        response={200: AttendeePassSchema, 400: ErrorResponse, 404: ErrorResponse},
    )
    def issue(self, payload: PassRequestSchema) -> AttendeePass:
        """Get a drinks pass by email.

        The returned `qr_data` is shown as a QR code to a volunteer at the bar.
        """
        return issue_pass(payload.email)
