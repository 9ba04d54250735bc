"""Service-level error types.

Storage and conversion code raise these instead of HTTPException so they stay
HTTP-agnostic; the handlers registered in app.main map each one to a JSON
``{"error": ...}`` body with its status code.
"""


class ShareError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(ShareError):
    """A required field or file part is missing or unusable."""

    status_code = 400


class NotFoundError(ShareError):
    """The referenced file does not exist in the incoming directory."""

    status_code = 404


class PayloadTooLargeError(ShareError):
    status_code = 413


class InternalError(ShareError):
    """Filesystem or subprocess failure."""

    status_code = 500


class ConversionFailedError(InternalError):
    """The compression tool could not be started or exited non-zero."""
