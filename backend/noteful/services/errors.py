from __future__ import annotations

from typing import Optional


class NotefulError(Exception):
    """Base for errors that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        return {"detail": self.message, "field": self.field}


class ValidationError(NotefulError):
    status_code = 400


class AccountValidationError(ValidationError):
    status_code = 422


class InvalidReferenceError(NotefulError):
    status_code = 400

    def __init__(self, field: str):
        super().__init__(f"The `{field}` does not reference an existing item", field=field)


class DuplicateNameError(NotefulError):
    status_code = 400


class NotFoundError(NotefulError):
    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message)
