"""Domain errors raised by services and mapped to HTTP responses by the API."""

from typing import Any, Dict

from fastapi import status


class AppError(Exception):
    """Base application error."""

    def __init__(self, message: str, code: str, http_status: int = 400):
        """Initialize error."""
        self.message = message
        self.code = code
        self.http_status = http_status
        super().__init__(message)


class ApartmentNotFoundError(AppError):
    """No apartment with the requested id."""

    def __init__(self, apartment_id: int):
        self.apartment_id = apartment_id
        super().__init__("Apartment not found", "not_found", status.HTTP_404_NOT_FOUND)


class InvalidApartmentIdError(AppError):
    """Apartment id is not a positive integer."""

    def __init__(self, apartment_id: Any):
        self.apartment_id = apartment_id
        super().__init__("Invalid apartment ID", "invalid_apartment_id", status.HTTP_400_BAD_REQUEST)


class ExportLimitExceededError(AppError):
    """Filtered export would return more rows than allowed."""

    def __init__(self, limit: int, total: int):
        self.limit = limit
        self.total = total
        super().__init__(
            f"Export limit of {limit} rows exceeded. Narrow your filters and try again.",
            "export_limit_exceeded",
            status.HTTP_400_BAD_REQUEST,
        )


def error_response(error: AppError) -> Dict[str, Any]:
    """Create a standardized error response body."""
    return {
        "success": False,
        "error": error.code,
        "message": error.message,
    }


__all__ = [
    "AppError",
    "ApartmentNotFoundError",
    "InvalidApartmentIdError",
    "ExportLimitExceededError",
    "error_response",
]
