"""
Domain errors raised by the row store layer.
Asset-layer failures never surface as exceptions; see services/cloudinary_service.py.
"""
from typing import Optional


class RowStoreError(Exception):
    """A read or write against the primary data store failed."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code or "row_store_error"

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.message}


class RowNotFoundError(RowStoreError):
    """The requested row does not exist."""

    def __init__(self, table: str, row_id: str):
        super().__init__(f"{table} row {row_id} does not exist", code="not_found")
        self.table = table
        self.row_id = row_id
