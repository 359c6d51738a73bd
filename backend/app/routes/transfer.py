"""
SnippetHub Backend — Export / Import Route Handlers
=====================================================

What:  Export snippets as a JSON or Markdown attachment, import a JSON
       export, and dry-run validation of an import file.
How:   Uploads go through UploadService (type, size, encoding, syntax),
       then TransferService.validate; only a valid document is imported.

Routes:
    GET  /api/snippets/export            ?type=json|md&ids=1,2,3
    POST /api/snippets/import            multipart: file + overwriteExisting,
                                         skipDuplicates, preserveIds
    POST /api/snippets/validate-import   multipart: file

This router is mounted before the snippets router so `/export` is not
captured by `/{snippet_id}`.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import ImportValidationError, ValidationError
from app.schemas.common import ErrorResponse
from app.schemas.transfer import (
    ExportDocument,
    ImportOptions,
    ImportResponse,
    ImportValidationSummary,
    ValidationReport,
)
from app.services.transfer_service import transfer_service
from app.services.upload_service import upload_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/snippets", tags=["Export / Import"])

EXPORT_TYPES = {"json": "json", "md": "md", "markdown": "md"}


def _parse_ids(raw: Optional[str]) -> List[int]:
    """'1, 2,x,3' → [1, 2, 3]; entries that are not integers are ignored."""
    if not raw:
        return []
    ids = []
    for part in raw.split(","):
        part = part.strip()
        if part.lstrip("-").isdigit():
            ids.append(int(part))
    return ids


async def _read_upload(file: UploadFile) -> object:
    upload_service.validate_extension(file.filename, file.content_type)
    upload_service.check_declared_size(file.size)
    # One byte past the limit is enough for validate_size to reject it.
    content = await file.read(upload_service.max_size + 1)
    return upload_service.read_import_document(
        filename=file.filename,
        content=content,
        content_type=file.content_type,
        content_length=file.size,
    )


@router.get(
    "/export",
    responses={
        200: {"description": "Export attachment (JSON document or Markdown)", "model": ExportDocument},
        400: {"description": "Unknown export type", "model": ErrorResponse},
    },
    summary="Export snippets",
)
async def export_snippets(
    export_type: str = Query(default="json", alias="type", description="json or md"),
    ids: Optional[str] = Query(default=None, description="Comma separated snippet ids; omit for all"),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    kind = EXPORT_TYPES.get(export_type.lower())
    if kind is None:
        raise ValidationError(message='Invalid export type. Use "json" or "md".', field="type")

    document = await transfer_service.export_document(db, _parse_ids(ids))
    stamp = document.export_date.strftime("%Y-%m-%d")

    if kind == "md":
        return Response(
            content=transfer_service.render_markdown(document),
            media_type="text/markdown; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="snippets-{stamp}.md"'},
        )
    return JSONResponse(
        content=document.model_dump(mode="json"),
        headers={"Content-Disposition": f'attachment; filename="snippets-{stamp}.json"'},
    )


@router.post(
    "/import",
    response_model=ImportResponse,
    responses={
        400: {"description": "Invalid file or failed validation", "model": ErrorResponse},
        500: {"description": "Import rolled back", "model": ErrorResponse},
    },
    summary="Import snippets from a JSON export",
)
async def import_snippets(
    file: UploadFile = File(..., description="JSON export file"),
    overwrite_existing: bool = Form(default=False, alias="overwriteExisting"),
    skip_duplicates: bool = Form(default=True, alias="skipDuplicates"),
    preserve_ids: bool = Form(default=False, alias="preserveIds"),
    db: AsyncSession = Depends(get_db_session),
) -> ImportResponse:
    document = await _read_upload(file)

    report = transfer_service.validate(document)
    if not report.valid:
        logger.info("Import rejected: %d validation errors", len(report.errors))
        raise ImportValidationError(report.errors, report.warnings)

    results = await transfer_service.import_document(
        db,
        document,
        ImportOptions(
            overwrite_existing=overwrite_existing,
            skip_duplicates=skip_duplicates,
            preserve_ids=preserve_ids,
        ),
    )
    return ImportResponse(
        results=results,
        validation=ImportValidationSummary(warnings=report.warnings, stats=report.stats),
    )


@router.post(
    "/validate-import",
    response_model=ValidationReport,
    responses={400: {"description": "Unreadable file", "model": ErrorResponse}},
    summary="Validate an import file without importing it",
)
async def validate_import(
    file: UploadFile = File(..., description="JSON export file"),
) -> ValidationReport:
    return transfer_service.validate(await _read_upload(file))
