"""
SnippetHub Backend — Export / Import Schemas
==============================================

What:  The portable export document, import options, the import ledger and
       the validation report.

Export document (JSON):
    {
        "version": "1.1.0",
        "export_date": "2024-01-15T12:00:00+00:00",
        "total_snippets": 2,
        "snippets": [{id, title, content, language, source, version,
                      created_at, updated_at, is_favorite,
                      tags: [{name, color}]}],
        "metadata": {"exported_by": "SnippetHub", "format": "json",
                     "schema_version": "1.0"}
    }

Import documents are validated as plain dicts (see TransferService.validate)
rather than through these models: a malformed document must produce a
report, not a 422.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.tag import DEFAULT_TAG_COLOR

# Ledger statuses
STATUS_IMPORTED = "imported"
STATUS_SKIPPED = "skipped"
STATUS_ERROR = "error"


# ══════════════════════════════════════════════════════════════════════════
# Export
# ══════════════════════════════════════════════════════════════════════════


class ExportedTag(BaseModel):
    name: str
    color: str = DEFAULT_TAG_COLOR


class ExportedSnippet(BaseModel):
    id: int
    title: str
    content: str
    language: str
    source: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: datetime
    is_favorite: bool = False
    tags: List[ExportedTag] = Field(default_factory=list)


class ExportMetadata(BaseModel):
    exported_by: str = "SnippetHub"
    format: str = "json"
    schema_version: str = "1.0"


class ExportDocument(BaseModel):
    version: str = Field(description="Export format version")
    export_date: datetime
    total_snippets: int
    snippets: List[ExportedSnippet] = Field(default_factory=list)
    metadata: ExportMetadata = Field(default_factory=ExportMetadata)


# ══════════════════════════════════════════════════════════════════════════
# Import
# ══════════════════════════════════════════════════════════════════════════


class ImportOptions(BaseModel):
    """
    Conflict policy for an import run.

    overwrite_existing: update a snippet with the same (title, content)
    skip_duplicates:    skip such a record (ignored when overwriting);
                        false imports it as a new snippet
    preserve_ids:       reuse the incoming id when it is free
    """
    overwrite_existing: bool = False
    skip_duplicates: bool = True
    preserve_ids: bool = False


class ImportDetail(BaseModel):
    """One ledger entry."""
    title: Optional[str] = None
    status: str = Field(description="imported, skipped or error")
    message: str
    snippet_id: Optional[int] = None


class ImportResult(BaseModel):
    """The import ledger: per-record details plus their tallies."""
    success: int = 0
    skipped: int = 0
    errors: int = 0
    details: List[ImportDetail] = Field(default_factory=list)

    @classmethod
    def from_details(cls, details: List[ImportDetail]) -> "ImportResult":
        return cls(
            success=sum(1 for d in details if d.status == STATUS_IMPORTED),
            skipped=sum(1 for d in details if d.status == STATUS_SKIPPED),
            errors=sum(1 for d in details if d.status == STATUS_ERROR),
            details=list(details),
        )


class ValidationStats(BaseModel):
    total_snippets: int = 0
    valid_snippets: int = 0
    invalid_snippets: int = 0


class ValidationReport(BaseModel):
    """Structural check of an import document; never raised, always returned."""
    valid: bool = True
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    stats: ValidationStats = Field(default_factory=ValidationStats)


class ImportValidationSummary(BaseModel):
    warnings: List[str] = Field(default_factory=list)
    stats: ValidationStats = Field(default_factory=ValidationStats)


class ImportResponse(BaseModel):
    """Returned by POST /api/snippets/import."""
    message: str = "Import completed"
    results: ImportResult
    validation: ImportValidationSummary
