class AttendeePassError(Exception):
    """Base class for refused attendee pass requests."""

    code = "attendee_pass_error"


class InvalidEmailError(AttendeePassError):
    code = "invalid_email"

    def __init__(self, message: str = "Please enter a valid email address.") -> None:
        super().__init__(message)


class AttendeeNotFoundError(AttendeePassError):
    code = "attendee_not_found"

    def __init__(self, message: str = "Email not found in our database.") -> None:
        super().__init__(message)


class AttendeeIneligibleError(AttendeePassError):
    """Raised when the participant exists but has no role assigned."""

    code = "attendee_ineligible"

    def __init__(self, message: str = "This email does not have a role assigned.") -> None:
        super().__init__(message)
