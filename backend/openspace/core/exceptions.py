"""Domain exceptions raised by services and translated at the API boundary."""

from fastapi import status


class OpenSpaceError(Exception):
    """Base class for errors that map onto a failure envelope."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidPeriod(OpenSpaceError):
    """Unrecognized period selector."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, period: str) -> None:
        super().__init__(
            f"Invalid period '{period}'. Use one of: today, week, month, year, all"
        )
        self.period = period


class InvalidMonth(OpenSpaceError):
    """Month number outside 1..12."""

    def __init__(self, month: object) -> None:
        super().__init__(f"Month must be an integer between 1 and 12, got {month!r}")
        self.month = month


class DataUnavailable(OpenSpaceError):
    """The earnings store could not be queried."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True


class NotFound(OpenSpaceError):
    status_code = status.HTTP_404_NOT_FOUND


class PayoutRejected(OpenSpaceError):
    """Payout request failed validation."""

    status_code = status.HTTP_400_BAD_REQUEST
