"""Error taxonomy shared by the auth layer and the resource services.

Every error is raised synchronously by the component that detects it and
propagates unchanged to the HTTP layer, which maps ``status_code`` onto the
response (see taskhub.api.error_handlers). Nothing here retries.
"""


class TaskhubError(Exception):
    """Base class for all expected, client-facing failures."""

    status_code: int = 500
    code: str = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"message": self.message, "code": self.code}


class ValidationError(TaskhubError):
    """Malformed or missing input."""

    status_code = 400
    code = "validation_error"


class ConflictError(TaskhubError):
    """A uniqueness invariant would be violated (e.g. duplicate email)."""

    status_code = 400
    code = "conflict"


class AuthenticationError(TaskhubError):
    """Missing, malformed, badly signed or expired credential."""

    status_code = 401
    code = "authentication_error"


class InvalidCredentialsError(AuthenticationError):
    """Failed login. Same message whether the email or the password was wrong."""

    status_code = 400
    code = "invalid_credentials"

    def __init__(self, message: str = "invalid credentials"):
        super().__init__(message)


class AuthorizationError(TaskhubError):
    """Authenticated, but not allowed to act on this record."""

    status_code = 403
    code = "forbidden"


class NotFoundError(TaskhubError):
    """The record, or the User the caller's token refers to, does not exist."""

    status_code = 404
    code = "not_found"
