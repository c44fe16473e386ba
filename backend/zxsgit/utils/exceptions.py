"""Custom exceptions and error handling utilities."""
from fastapi import HTTPException, status
from typing import Optional


class AppException(Exception):
    """Base exception for application errors."""

    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppException):
    """Raised when a required field is missing or invalid."""
    default_message = "Invalid input"


class ConflictError(AppException):
    """Raised on duplicate emails and writes against the protected admin."""
    default_message = "Conflicting record"


class NotFoundError(AppException):
    """Raised when a resource is not found."""
    default_message = "Not found"


class StorageFullError(AppException):
    """Raised when the local store quota would be exceeded."""
    default_message = "Local storage is full"


class NetworkError(AppException):
    """Raised when the remote store could not be reached or answered with a server error."""
    default_message = "Server unavailable"


class AuthenticationError(AppException):
    """Raised when authentication fails."""
    default_message = "Invalid credentials"


class ForbiddenError(AppException):
    """Raised when the signed-in user may not modify a record."""
    default_message = "Access denied"


# Status codes returned by the REST service for each rejection
STATUS_ERRORS = {
    400: ValidationError,
    401: AuthenticationError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
    413: ValidationError,
    422: ValidationError,
}


def error_for_status(status_code: int, message: Optional[str] = None) -> AppException:
    """
    Map an HTTP status code to an application error.

    Client errors become the typed rejection they denote; anything else is
    treated as the remote store being unavailable.

    Args:
        status_code: HTTP status code of the response
        message: Message from the response envelope

    Returns:
        Exception instance (not raised)
    """
    error_class = STATUS_ERRORS.get(status_code, NetworkError)
    return error_class(message)


def handle_storage_error(error: Exception, operation: str) -> HTTPException:
    """
    Convert data file errors to HTTP exceptions.

    Args:
        error: The error raised while reading or writing a document
        operation: Description of the operation that failed

    Returns:
        HTTPException with 500 status
    """
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Storage error during {operation}: {error}",
    )


def not_found_error(resource: str, identifier: Optional[str] = None) -> HTTPException:
    """
    Create a standardized 404 error.

    Args:
        resource: Name of the resource (e.g., "User", "Company")
        identifier: Optional identifier that was not found

    Returns:
        HTTPException with 404 status
    """
    message = f"{resource} not found"
    if identifier:
        message += f": {identifier}"
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)


def validation_error(message: str) -> HTTPException:
    """
    Create a standardized 400 validation error.

    Args:
        message: Validation error message

    Returns:
        HTTPException with 400 status
    """
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def conflict_error(message: str) -> HTTPException:
    """
    Create a standardized 409 conflict error.

    Args:
        message: Conflict error message

    Returns:
        HTTPException with 409 status
    """
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=message)


def authentication_error(message: str = "Invalid credentials") -> HTTPException:
    """
    Create a standardized 401 authentication error.

    Args:
        message: Authentication error message

    Returns:
        HTTPException with 401 status
    """
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=message)


def forbidden_error(message: str = "Access denied") -> HTTPException:
    """
    Create a standardized 403 forbidden error.

    Args:
        message: Forbidden error message

    Returns:
        HTTPException with 403 status
    """
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=message)


def http_error_from(error: AppException) -> HTTPException:
    """Convert an application error raised by shared rules into an HTTP error."""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
    if isinstance(error, ConflictError):
        return conflict_error(error.message)
    if isinstance(error, AuthenticationError):
        return authentication_error(error.message)
    if isinstance(error, ForbiddenError):
        return forbidden_error(error.message)
    return validation_error(error.message)
