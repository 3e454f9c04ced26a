"""ImportBatch document model for tracking spreadsheet imports."""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from beanie import Document
from pydantic import Field

from leasedesk.models.timestamps import utc_now


class ImportStatus(str, Enum):
    """Terminal status of an import batch."""

    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"
    FAILED = "failed"


class ImportBatch(Document):
    """One upload attempt with its aggregate row counts.

    Created as ``failed`` with zero counts before any row is processed and
    updated once when the import finishes.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    filename: str
    status: ImportStatus = ImportStatus.FAILED
    total_rows: int = 0
    imported_rows: int = 0
    skipped_rows: int = 0
    uploaded_by: str | None = None
    created_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "import_batches"
        indexes = [
            "created_at",
        ]
