"""Pydantic schemas for spreadsheet import functionality."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from leasedesk.models import ImportBatch, ImportRowError, ImportStatus
from leasedesk.schemas.common import CamelModel


class ImportSummary(CamelModel):
    """Row counts of an import batch."""

    total_rows: int = 0
    imported_rows: int = 0
    skipped_rows: int = 0


class ImportErrorItem(CamelModel):
    """A single error as echoed back in an import response."""

    row_number: int
    field: Optional[str] = None
    message: str


class ImportResult(CamelModel):
    """Outcome of one workbook import."""

    import_batch_id: str
    status: ImportStatus
    summary: ImportSummary
    errors: list[ImportErrorItem] = Field(default_factory=list)


class ImportBatchResponse(CamelModel):
    """Import batch as returned by the listing/detail endpoints."""

    id: str
    filename: str
    status: ImportStatus
    total_rows: int
    imported_rows: int
    skipped_rows: int
    uploaded_by: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_document(cls, batch: ImportBatch) -> "ImportBatchResponse":
        return cls(
            id=batch.id,
            filename=batch.filename,
            status=batch.status,
            total_rows=batch.total_rows,
            imported_rows=batch.imported_rows,
            skipped_rows=batch.skipped_rows,
            uploaded_by=batch.uploaded_by,
            created_at=batch.created_at,
        )


class ImportErrorResponse(CamelModel):
    """Persisted import error."""

    id: str
    import_batch_id: str
    row_number: int
    field: Optional[str] = None
    message: str
    created_at: datetime

    @classmethod
    def from_document(cls, error: ImportRowError) -> "ImportErrorResponse":
        return cls(
            id=str(error.id),
            import_batch_id=error.import_batch_id,
            row_number=error.row_number,
            field=error.field,
            message=error.message,
            created_at=error.created_at,
        )


class ImportBatchListResponse(CamelModel):
    items: list[ImportBatchResponse]


class ImportBatchDetailResponse(CamelModel):
    import_batch: ImportBatchResponse
    errors: list[ImportErrorResponse]


class ClearImportsResponse(CamelModel):
    """Counts of documents removed by a bulk clear."""

    message: str = "All imported data deleted"
    import_batches_deleted: int
    import_errors_deleted: int
    vehicle_offers_deleted: int
