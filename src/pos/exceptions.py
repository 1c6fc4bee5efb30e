class TerminalError(Exception):
    """Base class for POS terminal state errors."""

    code = "terminal_error"

    def __init__(self, message: str, state: str) -> None:
        super().__init__(message)
        self.state = state


class TerminalBusyError(TerminalError):
    """Raised when a scan is submitted while the terminal is still processing one."""

    code = "terminal_busy"

    def __init__(self, state: str) -> None:
        super().__init__("A scan is already being processed on this terminal.", state)


class InvalidTransitionError(TerminalError):
    """Raised when a terminal event is not allowed in the current state."""

    code = "invalid_transition"

    def __init__(self, event: str, state: str) -> None:
        super().__init__(f"Cannot {event} while the terminal is {state.lower()}.", state)
        self.event = event
