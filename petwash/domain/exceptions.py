"""Custom business exception classes.

Each exception maps to a specific HTTP status code, rendered as the
uniform ``{error, details?}`` body.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details=None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ResourceNotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource: str, resource_id: int | str):
        super().__init__(
            message=f"{resource} with id {resource_id} not found",
            status_code=404,
        )


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str, details: list | None = None):
        super().__init__(
            message=message,
            status_code=400,
            details=details or [],
        )


class AuthenticationError(AppError):
    """Raised when a request lacks valid admin credentials."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message=message,
            status_code=401,
        )


class ConflictError(AppError):
    """Raised when a write conflicts with the current state of a record."""

    def __init__(self, message: str, details=None):
        super().__init__(
            message=message,
            status_code=409,
            details=details,
        )


class BusinessRuleError(AppError):
    """Raised when a well-formed request breaks a domain rule."""

    def __init__(self, message: str, details=None):
        super().__init__(
            message=message,
            status_code=422,
            details=details,
        )


class IntegrationError(AppError):
    """Raised when an upstream partner API call fails."""

    def __init__(self, message: str, details=None):
        super().__init__(
            message=message,
            status_code=502,
            details=details,
        )
