"""Custom HTTP exception classes module.

Pre-configured HTTPException subclasses for the error kinds of the
approval workflow. Services raise them at the failing guard and FastAPI
renders the detail message verbatim to the caller.

Usage:
    from shopshift.utils.exceptions import NotFoundError, ConflictError
    raise NotFoundError("Assignment not found")
    raise ConflictError("Only pending assignments can be rejected")
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found exception.

    Raised when a user, template, assignment or request does not exist.

    Args:
        detail: Error message (default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """409 Conflict exception.

    Raised when the current state of a record does not allow the requested
    transition (e.g. approving an assignment that is not pending).

    Args:
        detail: Error message (default: "Conflict with current state")
    """

    def __init__(self, detail: str = "Conflict with current state") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class DuplicateError(ConflictError):
    """409 Conflict exception for uniqueness violations.

    Raised when creating a record would violate a uniqueness rule
    (e.g. a second active assignment for the same worker, template and date).

    Args:
        detail: Error message (default: "Resource already exists")
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(detail=detail)


class ForbiddenError(HTTPException):
    """403 Forbidden exception.

    Raised when the caller lacks the capability combination an operation
    requires, or is not a party eligible for the transition.

    Args:
        detail: Error message (default: "Insufficient permissions")
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized exception.

    Raised when authentication is missing, invalid, or expired.

    Args:
        detail: Error message (default: "Not authenticated")
    """

    def __init__(self, detail: str = "Not authenticated") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request exception.

    Raised when the request data is invalid beyond what Pydantic validation
    catches (malformed hour range, hours outside template bounds).

    Args:
        detail: Error message (default: "Bad request")
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidStateError(HTTPException):
    """500 exception for branches the permission guards make unreachable.

    Args:
        detail: Error message (default: "Invalid state")
    """

    def __init__(self, detail: str = "Invalid state") -> None:
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
