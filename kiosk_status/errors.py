"""
Error types raised by the kiosk status services
"""


class KioskStatusError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(KioskStatusError):
    """Malformed or missing input (coordinates, status, required fields)"""

    status_code = 400


class NotFound(KioskStatusError):
    """Referenced entity does not exist"""

    status_code = 404


class UpstreamUnavailable(KioskStatusError):
    """The geodata provider timed out or failed"""

    status_code = 503
