"""
Bulk catalog import API routes.

Preview endpoints never write. Save and confirm create missing
dimensions and persist rows one by one.
"""

from fastapi import APIRouter, Query, UploadFile, File
from fastapi.responses import JSONResponse
from io import BytesIO
from pathlib import Path
import structlog

from models.catalog_import import (
    ImportFormat,
    CatalogRowsRequest,
    CatalogSaveRequest,
    CatalogConfirmRequest,
    CatalogPreviewResponse,
    CatalogSaveResponse,
)
from parsers.catalog_file_parser import parse_catalog_file, SUPPORTED_EXTENSIONS
from services import preview_cache_service
from services.catalog_import_service import get_catalog_import_service
from exceptions import AppError, ImportFileParseError, PreviewNotFoundError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# PREVIEW
# ===================

@router.post("/bulk-preview", response_model=CatalogPreviewResponse)
async def bulk_preview_file(
    file: UploadFile = File(...),
    format: ImportFormat = Query(ImportFormat.EXCEL, description="Validation profile")
):
    """
    Preview a spreadsheet upload.

    Reads the first sheet (or the CSV), validates every row and returns
    the products that would be created, the rejected rows, and the
    dimension entities saving would create.

    Raises:
        422: File unreadable, empty or too large
    """
    logger.info(
        "catalog_upload_preview_started",
        filename=file.filename,
        content_type=file.content_type
    )

    try:
        extension = Path(file.filename or "").suffix.lower()
        if extension not in SUPPORTED_EXTENSIONS:
            raise ImportFileParseError(
                message=f"Unsupported file type: {extension or 'none'}",
                details={"supported": sorted(SUPPORTED_EXTENSIONS)}
            )

        content = await file.read()
        rows = parse_catalog_file(BytesIO(content), filename=file.filename)

        service = get_catalog_import_service()
        return service.preview(rows, format)

    except Exception as e:
        return handle_error(e)


@router.post("/bulk-preview-csv", response_model=CatalogPreviewResponse)
async def bulk_preview_rows(data: CatalogRowsRequest):
    """
    Preview rows parsed by the client.

    Uses the CSV profile: name and parent_category are required.
    """
    try:
        service = get_catalog_import_service()
        return service.preview(data.rows, ImportFormat.CSV)

    except Exception as e:
        return handle_error(e)


@router.delete("/bulk-preview/{preview_id}", status_code=204)
async def discard_preview(preview_id: str):
    """
    Discard a cached preview.

    Raises:
        404: Preview expired or not found
    """
    try:
        if not preview_cache_service.delete_preview(preview_id):
            raise PreviewNotFoundError(preview_id)
        return None

    except Exception as e:
        return handle_error(e)


# ===================
# SAVE
# ===================

@router.post("/bulk-save", response_model=CatalogSaveResponse)
async def bulk_save(data: CatalogSaveRequest):
    """
    Import rows directly.

    Each row succeeds or fails on its own; see results and failures.

    Raises:
        503: Dimension or product store unavailable
    """
    try:
        service = get_catalog_import_service()
        return service.save(data.rows, data.format)

    except Exception as e:
        return handle_error(e)


@router.post("/bulk-confirm/{preview_id}", response_model=CatalogSaveResponse)
async def bulk_confirm(
    preview_id: str,
    request: CatalogConfirmRequest = None
):
    """
    Save a previously previewed batch.

    Rows listed in excluded_rows (spreadsheet row numbers) are skipped.

    Raises:
        404: Preview expired or not found
        503: Dimension or product store unavailable
    """
    try:
        excluded_rows = request.excluded_rows if request else []

        service = get_catalog_import_service()
        return service.confirm(preview_id, excluded_rows)

    except Exception as e:
        return handle_error(e)
