"""Error taxonomy shared by the repository and the HTTP layer."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError


class HRMSError(Exception):
    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationFailedError(HRMSError):
    code = "VALIDATION_ERROR"
    status_code = 400

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> ValidationFailedError:
        return cls("Invalid input data", details=format_error_details(exc.errors()))


class NotFoundError(HRMSError):
    code = "NOT_FOUND"
    status_code = 404


class StorageError(HRMSError):
    code = "DATABASE_ERROR"
    status_code = 500


class InternalError(HRMSError):
    code = "INTERNAL_ERROR"
    status_code = 500


def format_error_details(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    details: list[dict[str, Any]] = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        details.append(
            {
                "field": ".".join(loc),
                "message": err.get("msg", ""),
                "type": err.get("type", ""),
            }
        )
    return details
