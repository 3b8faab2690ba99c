# rollcall/core/exceptions.py
from dataclasses import dataclass
from typing import List, Optional


class RollCallError(Exception):
    """Base exception for roll-call failures surfaced to callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class RowError:
    row: int  # 1-based position in the uploaded batch
    message: str

    def as_dict(self) -> dict:
        return {"row": self.row, "message": self.message}


class ValidationError(RollCallError):
    """Raised when input is malformed; lists every offending row of a batch."""

    status_code = 400

    def __init__(self, message: str, rows: Optional[List[RowError]] = None):
        super().__init__(message)
        self.rows = list(rows or [])


class NotFoundError(RollCallError):
    """Raised for an unknown staff code or access code."""

    status_code = 404


class StorageError(RollCallError):
    """Raised when the storage collaborator fails. Not retried."""

    status_code = 500
