"""Import endpoints for vehicle offer workbooks."""

import logging
from typing import Annotated

from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status

from leasedesk.config import settings
from leasedesk.schemas.import_schemas import (
    ClearImportsResponse,
    ImportBatchDetailResponse,
    ImportBatchListResponse,
    ImportBatchResponse,
    ImportErrorResponse,
    ImportResult,
)
from leasedesk.services.auth import RequireStockAccess
from leasedesk.services.import_service import (
    clear_imported_data,
    get_batch,
    get_batch_errors,
    import_workbook,
    list_batches,
)

logger = logging.getLogger(__name__)

router = APIRouter()

READ_CHUNK_SIZE = 64 * 1024


def _get_file_extension(filename: str | None) -> str:
    """Extract file extension from filename."""
    if not filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


@router.post("", response_model=ImportResult)
async def upload_workbook(
    current_user: RequireStockAccess,
    file: UploadFile | None = File(None, description="XLSX workbook with vehicle offers"),
) -> ImportResult:
    """Import a workbook of vehicle offers.

    Every data row is either imported or reported in the error list; the
    response echoes at most the first errors, all of them are kept in the
    batch's error ledger.
    """
    if file is None or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File is required")

    allowed = settings.config.imports.allowed_extensions
    ext = _get_file_extension(file.filename)
    if ext not in allowed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Only {', '.join('.' + a for a in allowed)} files are allowed",
        )

    # Read in chunks to avoid unbounded memory for oversized files
    max_size = settings.max_upload_size_bytes
    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await file.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > max_size:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"File exceeds {settings.config.imports.max_upload_mb}MB limit",
            )
        chunks.append(chunk)

    try:
        return await import_workbook(
            file.filename,
            b"".join(chunks),
            uploaded_by=current_user.login,
            max_response_errors=settings.max_response_errors,
        )
    except Exception as e:
        logger.error("Import request failed: file=%r, error=%s", file.filename, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e) or "Import failed",
        )


@router.get("", response_model=ImportBatchListResponse)
async def list_imports(
    _: RequireStockAccess,
    limit: Annotated[int, Query(description="Maximum batches to return (1-100)")] = 20,
) -> ImportBatchListResponse:
    """List recent import batches, newest first."""
    batches = await list_batches(limit)
    return ImportBatchListResponse(items=[ImportBatchResponse.from_document(b) for b in batches])


@router.delete("", response_model=ClearImportsResponse)
async def clear_imports(current_user: RequireStockAccess) -> ClearImportsResponse:
    """Delete every import batch, import error and imported offer."""
    deleted = await clear_imported_data()
    logger.info("Imports cleared by %s", current_user.login)
    return ClearImportsResponse(**deleted)


@router.get("/{batch_id}", response_model=ImportBatchDetailResponse)
async def get_import(batch_id: str, _: RequireStockAccess) -> ImportBatchDetailResponse:
    """Get an import batch with its full error ledger."""
    batch = await get_batch(batch_id)
    if batch is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Import batch not found")

    errors = await get_batch_errors(batch_id)
    return ImportBatchDetailResponse(
        import_batch=ImportBatchResponse.from_document(batch),
        errors=[ImportErrorResponse.from_document(e) for e in errors],
    )
