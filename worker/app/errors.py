# worker/app/errors.py
"""
Error taxonomy for the analyze pipeline.

Every error carries the HTTP status it maps to and the message that is safe to
show a caller. Internal detail goes in the exception args / __cause__ and is
only ever logged.
"""

GENERIC_FAILURE = (
    "Failed to analyze image. Please try again later or contact support "
    "if the problem persists."
)
AUTH_FAILURE = (
    "Invalid API key or authentication error. Please check your OpenAI API "
    "key configuration."
)


class AnalyzeError(Exception):
    status_code = 500
    public_message = GENERIC_FAILURE


class ValidationError(AnalyzeError):
    """Bad or missing upload. The message itself is returned to the caller."""

    status_code = 400

    @property
    def public_message(self) -> str:  # type: ignore[override]
        return str(self)


class FileTooLargeError(ValidationError):
    def __init__(self, message: str = "File size is too large. Max size is 5MB."):
        super().__init__(message)


class AuthError(AnalyzeError):
    status_code = 401
    public_message = AUTH_FAILURE


class RemoteAPIError(AnalyzeError):
    pass


class ParseError(AnalyzeError):
    pass
