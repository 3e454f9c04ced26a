"""Persistence of import batches, the error ledger and imported offers."""

import logging
from typing import Optional, Protocol

from leasedesk.models import ImportBatch, ImportRowError, ImportStatus, VehicleOffer

from .converters import CanonicalOfferRow

logger = logging.getLogger(__name__)

DEFAULT_BATCH_LIST_LIMIT = 20
MAX_BATCH_LIST_LIMIT = 100


class ImportLedger(Protocol):
    """Storage operations the import orchestrator depends on.

    Every operation either succeeds or raises; callers do not retry.
    """

    async def create_batch(self, batch_id: str, filename: str, status: ImportStatus) -> None: ...

    async def update_batch_summary(
        self,
        batch_id: str,
        status: ImportStatus,
        total_rows: int,
        imported_rows: int,
        skipped_rows: int,
    ) -> None: ...

    async def insert_error(
        self, batch_id: str, row_number: int, field: Optional[str], message: str
    ) -> None: ...

    async def insert_offer(self, batch_id: str, row: CanonicalOfferRow) -> None: ...


class BeanieImportLedger:
    """ImportLedger backed by the Beanie documents."""

    def __init__(self, uploaded_by: Optional[str] = None):
        self.uploaded_by = uploaded_by

    async def create_batch(self, batch_id: str, filename: str, status: ImportStatus) -> None:
        batch = ImportBatch(
            id=batch_id,
            filename=filename,
            status=status,
            uploaded_by=self.uploaded_by,
        )
        await batch.insert()

    async def update_batch_summary(
        self,
        batch_id: str,
        status: ImportStatus,
        total_rows: int,
        imported_rows: int,
        skipped_rows: int,
    ) -> None:
        batch = await ImportBatch.get(batch_id)
        if batch is None:
            raise LookupError(f"Import batch {batch_id} not found")
        batch.status = status
        batch.total_rows = total_rows
        batch.imported_rows = imported_rows
        batch.skipped_rows = skipped_rows
        await batch.save()

    async def insert_error(
        self, batch_id: str, row_number: int, field: Optional[str], message: str
    ) -> None:
        await ImportRowError(
            import_batch_id=batch_id,
            row_number=row_number,
            field=field,
            message=message,
        ).insert()

    async def insert_offer(self, batch_id: str, row: CanonicalOfferRow) -> None:
        await VehicleOffer.from_row(batch_id, row).insert()


async def list_batches(limit: int = DEFAULT_BATCH_LIST_LIMIT) -> list[ImportBatch]:
    """Most recent import batches first.

    A non-positive limit falls back to the default; larger ones are capped at 100.
    """
    limit = min(limit, MAX_BATCH_LIST_LIMIT) if limit > 0 else DEFAULT_BATCH_LIST_LIMIT
    return await ImportBatch.find_all().sort("-created_at").limit(limit).to_list()


async def get_batch(batch_id: str) -> Optional[ImportBatch]:
    return await ImportBatch.get(batch_id)


async def get_batch_errors(batch_id: str) -> list[ImportRowError]:
    """All errors of a batch in the order they were recorded."""
    return await (
        ImportRowError.find(ImportRowError.import_batch_id == batch_id)
        .sort("+created_at", "+_id")
        .to_list()
    )


async def clear_imported_data() -> dict[str, int]:
    """Delete every offer, error and batch. Returns deleted counts."""
    offers = await VehicleOffer.find_all().delete()
    errors = await ImportRowError.find_all().delete()
    batches = await ImportBatch.find_all().delete()

    counts = {
        "vehicleOffersDeleted": offers.deleted_count if offers else 0,
        "importErrorsDeleted": errors.deleted_count if errors else 0,
        "importBatchesDeleted": batches.deleted_count if batches else 0,
    }
    logger.warning("Cleared imported data: %s", counts)
    return counts
