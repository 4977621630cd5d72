class SurveyError(Exception):
    """Base exception for the survey."""


class InvalidConfiguration(SurveyError):
    """A required survey parameter is missing or malformed."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class AuthenticationError(SurveyError):
    """The telephony provider client could not be set up with the given credentials."""


class StoreError(SurveyError):
    """The result store could not be opened, queried or written."""


class NumbersSourceError(SurveyError):
    """The list of numbers to call could not be read."""


class DialError(SurveyError):
    """The telephony provider rejected or failed to process a call."""

    def __init__(self, destination: str, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.destination = destination
        self.status = status
