from typing import Optional


class BingersError(Exception):
    """Base class for errors reported to the user."""


class ApiError(BingersError):
    """Raised when a TVmaze request fails."""

    def __init__(self, message: str, status: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.url = url


class UserDataError(BingersError):
    """Raised when the user data file cannot be read or written."""


class VersionMismatchError(UserDataError):
    def __init__(self, expected: int, actual: int):
        super().__init__(f"User data version mismatch [Expected: <= {expected}, actual: {actual}]")
        self.expected = expected
        self.actual = actual


class ShowNotFoundError(BingersError):
    pass


class SelectionAborted(BingersError):
    pass
