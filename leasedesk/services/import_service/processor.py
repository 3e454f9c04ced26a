"""Workbook import orchestration."""

import logging
from typing import Callable, Optional
from uuid import uuid4

from leasedesk.models.import_batch import ImportStatus
from leasedesk.schemas.import_schemas import ImportErrorItem, ImportResult, ImportSummary

from .constants import MAX_RESPONSE_ERRORS
from .converters import normalize_row
from .ledger import BeanieImportLedger, ImportLedger
from .mapping import resolve_column_map
from .parsers import SheetData, parse_xlsx
from .validation import validate_row

logger = logging.getLogger(__name__)

# Header occupies row 1, so the first data row is row 2
HEADER_ROW_NUMBER = 1
FIRST_DATA_ROW_NUMBER = 2
# Row number for failures not tied to any row
NO_ROW_NUMBER = 0


async def import_workbook(
    filename: str,
    file_content: bytes,
    *,
    ledger: Optional[ImportLedger] = None,
    reader: Callable[[bytes], SheetData] = parse_xlsx,
    uploaded_by: Optional[str] = None,
    max_response_errors: int = MAX_RESPONSE_ERRORS,
) -> ImportResult:
    """Import a workbook of vehicle offers as a single batch.

    The batch is recorded as ``failed`` before anything else happens and is
    updated exactly once on the way out, whatever the outcome. Rows are
    processed in order; each row is either stored as an offer or recorded
    in the error ledger, never both.

    Args:
        filename: Original upload name, kept on the batch.
        file_content: Raw workbook bytes.
        ledger: Storage for batches, errors and offers.
        reader: Decodes ``file_content`` into headers and rows.
        uploaded_by: Login of the uploader, for the batch record and logs.
        max_response_errors: Cap on errors echoed in the result. Every
            error is persisted regardless.

    Returns:
        ImportResult with the batch id, final status and counts.

    Raises:
        Exception: Whatever the reader or the ledger raised. The batch is
            finalized as ``failed`` with a row 0 error first.
    """
    if ledger is None:
        ledger = BeanieImportLedger(uploaded_by=uploaded_by)

    batch_id = str(uuid4())
    await ledger.create_batch(batch_id, filename, ImportStatus.FAILED)
    logger.info("Import started: batch=%s file=%r by=%s", batch_id, filename, uploaded_by)

    status = ImportStatus.FAILED
    total_rows = 0
    imported_rows = 0
    skipped_rows = 0
    response_errors: list[ImportErrorItem] = []
    failure: Optional[Exception] = None

    async def record_error(row_number: int, field: Optional[str], message: str) -> None:
        await ledger.insert_error(batch_id, row_number, field, message)
        if len(response_errors) < max_response_errors:
            response_errors.append(
                ImportErrorItem(row_number=row_number, field=field, message=message)
            )

    try:
        sheet = reader(file_content)
        total_rows = len(sheet.rows)

        column_map = resolve_column_map(sheet.headers)
        if not column_map.is_complete:
            for field in column_map.missing_required_fields:
                await record_error(HEADER_ROW_NUMBER, field, f"Missing required column: {field}")
            skipped_rows = total_rows
            logger.warning(
                "Import %s rejected, missing columns: %s",
                batch_id,
                ", ".join(column_map.missing_required_fields),
            )
        else:
            for index, raw_row in enumerate(sheet.rows):
                row_number = index + FIRST_DATA_ROW_NUMBER
                row = normalize_row(raw_row, column_map.field_to_column_index)
                row_errors = validate_row(row)

                if row_errors:
                    skipped_rows += 1
                    for error in row_errors:
                        await record_error(row_number, error.field, error.message)
                    logger.warning(
                        "Import %s: row %d rejected (%s)",
                        batch_id,
                        row_number,
                        ", ".join(error.field for error in row_errors),
                    )
                    continue

                await ledger.insert_offer(batch_id, row)
                imported_rows += 1

            if skipped_rows > 0:
                status = ImportStatus.COMPLETED_WITH_ERRORS
            else:
                status = ImportStatus.COMPLETED

    except Exception as e:
        failure = e
        status = ImportStatus.FAILED
        logger.exception("Import %s failed", batch_id)
        try:
            await ledger.insert_error(batch_id, NO_ROW_NUMBER, None, str(e) or type(e).__name__)
        except Exception:
            logger.exception("Could not record failure of import %s", batch_id)
        raise

    finally:
        try:
            await ledger.update_batch_summary(
                batch_id, status, total_rows, imported_rows, skipped_rows
            )
        except Exception:
            if failure is None:
                raise
            # Keep the original failure as the one that propagates
            logger.exception("Could not finalize failed import %s", batch_id)
        logger.info(
            "Import finished: batch=%s status=%s total=%d imported=%d skipped=%d",
            batch_id,
            status.value,
            total_rows,
            imported_rows,
            skipped_rows,
        )

    return ImportResult(
        import_batch_id=batch_id,
        status=status,
        summary=ImportSummary(
            total_rows=total_rows,
            imported_rows=imported_rows,
            skipped_rows=skipped_rows,
        ),
        errors=response_errors,
    )
