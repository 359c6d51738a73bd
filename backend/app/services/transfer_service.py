"""
SnippetHub Backend — Import/Export Engine
===========================================

What:  Serializes snippets into a portable document (JSON or Markdown),
       validates incoming documents and applies them under a conflict
       policy, producing a per-record ledger.
How:   The per-record loop is `fold_records()`: a pure fold over the
       records with an injected async applier. `TransferService.import_document`
       supplies the storage applier (one savepoint per record) and owns the
       transaction bracket around the fold.
Who:   Transfer routes.

Import flow:
    ┌──────────┐    ┌──────────┐    ┌──────────────────┐    ┌──────────┐
    │  Upload  │───▶│ Validate │───▶│ fold_records()   │───▶│  Commit  │
    │ (route)  │    │ (report) │    │ savepoint/record │    │ or undo  │
    └──────────┘    └──────────┘    └──────────────────┘    └──────────┘

    A record that fails rolls back its own savepoint and lands in the
    ledger; the batch continues. A fault in the bracket itself rolls back
    every write and raises ImportTransactionError.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import (
    DuplicateSnippetError,
    ImportTransactionError,
    ImportValidationError,
    RecordImportError,
    SnippetHubError,
)
from app.models.snippet import DEFAULT_LANGUAGE, Snippet, utcnow
from app.schemas.transfer import (
    STATUS_ERROR,
    STATUS_IMPORTED,
    STATUS_SKIPPED,
    ExportDocument,
    ExportedSnippet,
    ExportedTag,
    ExportMetadata,
    ImportDetail,
    ImportOptions,
    ImportResult,
    ValidationReport,
)
from app.services.favorite_service import favorite_service
from app.services.tag_service import tag_service
from app.services.version_service import version_service

logger = logging.getLogger(__name__)

RecordApplier = Callable[[Any], Awaitable[ImportDetail]]


def _record_title(record: Any) -> Optional[str]:
    if not isinstance(record, dict) or record.get("title") is None:
        return None
    title = record["title"]
    return title if isinstance(title, str) else str(title)


def _text_or(value: Any, default: Optional[str]) -> Optional[str]:
    """`value` when it is non-blank text, else `default`."""
    if isinstance(value, str) and value.strip():
        return value
    return default


def _tag_spec(raw: Any) -> Optional[Tuple[str, Optional[str]]]:
    """Accept a bare tag name or a `{name, color}` object."""
    if isinstance(raw, str):
        name, color = raw, None
    elif isinstance(raw, dict):
        name, color = raw.get("name"), raw.get("color")
    else:
        return None
    if not isinstance(name, str) or not name.strip():
        return None
    return name.strip(), color if isinstance(color, str) and color.strip() else None


async def fold_records(records: Iterable[Any], apply: RecordApplier) -> ImportResult:
    """
    Apply every record in order and collect the ledger.

    A DuplicateSnippetError becomes a "skipped" entry; any other exception
    becomes an "error" entry. Nothing raised by `apply` stops the loop.
    """
    details: List[ImportDetail] = []
    for index, record in enumerate(records):
        title = _record_title(record)
        try:
            detail = await apply(record)
        except DuplicateSnippetError as e:
            details.append(
                ImportDetail(
                    title=title, status=STATUS_SKIPPED, message=e.message, snippet_id=e.snippet_id
                )
            )
        except Exception as e:
            message = e.message if isinstance(e, SnippetHubError) else (str(e) or type(e).__name__)
            logger.warning("Import record #%d (%r) failed: %s", index, title, message)
            details.append(ImportDetail(title=title, status=STATUS_ERROR, message=message))
        else:
            details.append(detail)
    return ImportResult.from_details(details)


class TransferService:

    # ══════════════════════════════════════════════════════════════════════
    # Export
    # ══════════════════════════════════════════════════════════════════════

    async def export_document(
        self, db: AsyncSession, snippet_ids: Optional[Iterable[int]] = None
    ) -> ExportDocument:
        """Export the selected snippets (all when `snippet_ids` is empty or None)."""
        ids = sorted(set(snippet_ids or ()))
        query = select(Snippet)
        if ids:
            query = query.where(Snippet.id.in_(ids))
        query = query.order_by(desc(Snippet.created_at), desc(Snippet.id))

        snippets = list((await db.execute(query)).scalars().all())
        snippet_ids_found = [s.id for s in snippets]
        tags_by_id = await tag_service.tags_for(db, snippet_ids_found)
        favorites = await favorite_service.favorite_ids(db, snippet_ids_found)

        exported = [
            ExportedSnippet(
                id=s.id,
                title=s.title,
                content=s.content,
                language=s.language,
                source=s.source,
                version=s.version,
                created_at=s.created_at,
                updated_at=s.updated_at or s.created_at,
                is_favorite=s.id in favorites,
                tags=[ExportedTag(name=t.name, color=t.color) for t in tags_by_id.get(s.id, [])],
            )
            for s in snippets
        ]
        logger.info("Exported %d snippets (filter: %s)", len(exported), ids or "all")
        return ExportDocument(
            version=settings.export_format_version,
            export_date=utcnow(),
            total_snippets=len(exported),
            snippets=exported,
            metadata=ExportMetadata(),
        )

    def render_markdown(self, document: ExportDocument) -> str:
        """Human-readable rendition of an export document."""
        parts = [
            "# SnippetHub Export\n\n",
            f"**Export Date:** {document.export_date.date().isoformat()}\n",
            f"**Total Snippets:** {len(document.snippets)}\n\n",
            "---\n\n",
        ]
        for snippet in document.snippets:
            parts.append(f"## {snippet.title}\n\n")
            parts.append(f"**Language:** {snippet.language}\n")
            if snippet.source:
                parts.append(f"**Source:** {snippet.source}\n")
            parts.append(f"**Created:** {snippet.created_at.date().isoformat()}\n")
            if snippet.is_favorite:
                parts.append("**Favorite:** ⭐\n")
            if snippet.tags:
                names = ", ".join(f"`{t.name}`" for t in snippet.tags)
                parts.append(f"**Tags:** {names}\n")
            parts.append("\n")

            # A fence longer than any backtick run inside the content.
            fence = "```"
            while fence in snippet.content:
                fence += "`"
            parts.append(f"{fence}{snippet.language}\n{snippet.content}\n{fence}\n\n")
            parts.append("---\n\n")

        parts.append(f"*Exported from SnippetHub v{document.version}*\n")
        return "".join(parts)

    # ══════════════════════════════════════════════════════════════════════
    # Validation
    # ══════════════════════════════════════════════════════════════════════

    def validate(self, document: Any) -> ValidationReport:
        """Structural check of an import document. Always returns a report."""
        report = ValidationReport()

        if not isinstance(document, dict):
            report.valid = False
            report.errors.append("Invalid file format: not a valid JSON object")
            return report

        snippets = document.get("snippets")
        if not isinstance(snippets, list):
            report.valid = False
            report.errors.append("Invalid file format: missing or invalid snippets array")
            return report

        version = document.get("version")
        if version is not None and (
            not isinstance(version, str) or version not in settings.compatible_import_versions_set
        ):
            report.warnings.append(f"Export version {version} may not be fully compatible")

        report.stats.total_snippets = len(snippets)
        for index, record in enumerate(snippets):
            problems = self._validate_record(record)
            if problems:
                report.errors.extend(f"snippets[{index}]: {p}" for p in problems)
                report.stats.invalid_snippets += 1
            else:
                report.stats.valid_snippets += 1

        report.valid = not report.errors
        return report

    @staticmethod
    def _validate_record(record: Any) -> List[str]:
        if not isinstance(record, dict):
            return ["entry must be an object"]
        problems = []
        title = record.get("title")
        if not isinstance(title, str) or not title.strip():
            problems.append("missing or invalid title")
        content = record.get("content")
        if not isinstance(content, str) or not content.strip():
            problems.append("missing or invalid content")
        if record.get("language") is not None and not isinstance(record["language"], str):
            problems.append("invalid language field")
        if record.get("tags") is not None and not isinstance(record["tags"], list):
            problems.append("invalid tags field (must be an array)")
        return problems

    # ══════════════════════════════════════════════════════════════════════
    # Import
    # ══════════════════════════════════════════════════════════════════════

    async def import_document(
        self,
        db: AsyncSession,
        document: Any,
        options: Optional[ImportOptions] = None,
    ) -> ImportResult:
        """
        Apply an import document in one transaction.

        Raises:
            ImportValidationError:  the document has no snippets array
                                    (raised before any write)
            ImportTransactionError: the bracket failed; everything rolled back
        """
        options = options or ImportOptions()
        if not isinstance(document, dict) or not isinstance(document.get("snippets"), list):
            raise ImportValidationError(["Invalid import data format: missing snippets array"])
        records: List[Any] = document["snippets"]

        async def apply_in_savepoint(record: Any) -> ImportDetail:
            async with db.begin_nested():
                return await self._apply_record(db, record, options)

        logger.info(
            "Importing %d records (overwrite=%s skip_duplicates=%s preserve_ids=%s)",
            len(records), options.overwrite_existing, options.skip_duplicates, options.preserve_ids,
        )
        try:
            result = await fold_records(records, apply_in_savepoint)
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error("Import transaction failed: %s", e, exc_info=True)
            raise ImportTransactionError(
                message=f"Import failed: {e}",
                context={"records": len(records)},
            ) from e

        logger.info(
            "Import finished: %d imported, %d skipped, %d errors",
            result.success, result.skipped, result.errors,
        )
        return result

    async def _apply_record(
        self, db: AsyncSession, record: Any, options: ImportOptions
    ) -> ImportDetail:
        """Storage applier for one record. Runs inside the record's savepoint."""
        if not isinstance(record, dict):
            raise RecordImportError("Invalid snippet entry: expected an object")
        title, content = record.get("title"), record.get("content")
        if not _text_or(title, None) or not _text_or(content, None):
            raise RecordImportError("Missing required fields: title or content")
        language = _text_or(record.get("language"), DEFAULT_LANGUAGE)
        source = _text_or(record.get("source"), None)

        result = await db.execute(
            select(Snippet.id)
            .where(Snippet.title == title, Snippet.content == content)
            .order_by(Snippet.id)
            .limit(1)
        )
        existing_id = result.scalar_one_or_none()

        if existing_id is not None and options.overwrite_existing:
            snippet = await version_service.apply_update(
                db, existing_id, title=title, content=content, language=language, source=source
            )
            message = "Updated existing snippet"
        elif existing_id is not None and options.skip_duplicates:
            raise DuplicateSnippetError(existing_id, title)
        else:
            snippet, message = await self._insert(db, record, title, content, language, source, options)

        tags = record.get("tags")
        if isinstance(tags, list):
            specs = [spec for spec in (_tag_spec(t) for t in tags) if spec is not None]
            await tag_service.set_snippet_tags(db, snippet.id, specs)

        await favorite_service.set_favorite(db, snippet.id, record.get("is_favorite") is True)

        return ImportDetail(title=title, status=STATUS_IMPORTED, message=message, snippet_id=snippet.id)

    async def _insert(
        self,
        db: AsyncSession,
        record: Dict[str, Any],
        title: str,
        content: str,
        language: str,
        source: Optional[str],
        options: ImportOptions,
    ) -> Tuple[Snippet, str]:
        snippet = Snippet(title=title, content=content, language=language, source=source)
        message = "Imported successfully"

        incoming_id = record.get("id")
        if (
            options.preserve_ids
            and isinstance(incoming_id, int)
            and not isinstance(incoming_id, bool)
            and incoming_id > 0
        ):
            if await db.get(Snippet, incoming_id) is None:
                snippet.id = incoming_id
            else:
                message = f"Imported successfully (id {incoming_id} in use, new id assigned)"

        db.add(snippet)
        await db.flush()
        return snippet, message


transfer_service = TransferService()
