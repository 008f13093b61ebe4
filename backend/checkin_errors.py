# checkin_errors.py
from typing import Optional

NAV_NONE = "none"
NAV_BACK = "back"
NAV_HOME = "home"


class CheckinError(Exception):
    """Client-facing failure of a check-in step, rendered as an HTML error page."""

    status_code = 400
    message = "Request failed."
    nav = NAV_HOME

    def __init__(self, message: Optional[str] = None, nav: Optional[str] = None):
        if message is not None:
            self.message = message
        if nav is not None:
            self.nav = nav
        super().__init__(self.message)


class FormatInvalid(CheckinError):
    status_code = 400
    message = "Invalid format."


class RateLimited(CheckinError):
    status_code = 429
    message = "Rate limit: wait 10 seconds before retrying."
    nav = NAV_BACK

    def __init__(self, window_sec: int = 10):
        super().__init__(message=f"Rate limit: wait {window_sec} seconds before retrying.")


class AlreadyUsed(CheckinError):
    status_code = 409
    message = "Token already used."


class NotFound(CheckinError):
    status_code = 404
    message = "Invalid token."


class RecordWriteFailed(CheckinError):
    # token is rolled back into the pool before this is raised
    status_code = 500
    message = "Could not record the sign-in. Please try again."
    nav = NAV_BACK
