"""ReportDesk API exceptions.

Every gate and service failure is raised as one of these classes. The
application maps them to HTTP responses carrying a stable ``{"message": ...}``
body, so routes never build error responses by hand.
"""


class ReportDeskError(Exception):
    """Base exception for all request-level failures.

    Attributes:
        message: Client-facing error message
        status_code: HTTP status code the error maps to
        headers: Optional extra response headers
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.headers = headers
        super().__init__(message)


class UnauthenticatedError(ReportDeskError):
    """Credential is missing, invalid or expired, or the user is inactive."""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(ReportDeskError):
    """Authenticated, but not allowed to perform the operation.

    This is raised when:
    - The caller's role is not allowed on the route
    - The target resource belongs to another organization
    - The caller's report permission is below the required level
    - The operation would escalate a role
    """

    status_code = 403


class NotFoundError(ReportDeskError):
    """Resource does not exist (or is hidden from the caller)."""

    status_code = 404


class ConflictError(ReportDeskError):
    """Uniqueness or lifecycle conflict."""

    status_code = 409


class ValidationError(ReportDeskError):
    """Input violates an entity's field constraints."""

    status_code = 400


class BadRequestError(ValidationError):
    """Request is missing a parameter the caller's role requires."""
