"""
SnippetHub Backend — Upload Service
=====================================

What:  Validates an uploaded import file and parses it into a document.
How:   Cheapest checks first: extension, then size (Content-Length header,
       then actual bytes), then UTF-8 decoding, then JSON parsing.
Who:   Called by the import and validate-import routes.

Nothing is written to disk: the parsed document is handed straight to
TransferService.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from app.config import settings
from app.exceptions import ValidationError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_EXTENSIONS = {".json"}
ALLOWED_CONTENT_TYPES = {"application/json", "text/json"}


class UploadService:
    """
    Turns raw upload bytes into a JSON document or a ValidationError (400).

    Validation order:
        1. Extension / declared content type
        2. Size: non-empty and within `max_import_size`
        3. Encoding: UTF-8 (a BOM is tolerated)
        4. Syntax: parses as JSON
    """

    def __init__(self, max_size: Optional[int] = None):
        self.max_size = max_size or settings.max_import_size

    def validate_extension(self, filename: Optional[str], content_type: Optional[str] = None) -> None:
        """Accept a `.json` filename or an explicit JSON content type."""
        ext = Path(filename or "").suffix.lower()
        media_type = (content_type or "").split(";")[0].strip().lower()
        if ext in ALLOWED_EXTENSIONS or media_type in ALLOWED_CONTENT_TYPES:
            return
        raise ValidationError(
            message="Only JSON files are allowed",
            field="file",
            context={"extension": ext, "content_type": media_type},
        )

    def check_declared_size(self, content_length: Optional[int]) -> None:
        """Reject an upload whose reported size is too large, before reading it."""
        if content_length and content_length > self.max_size:
            max_mb = self.max_size / (1024 * 1024)
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        max_mb = self.max_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty", field="file")

        self.check_declared_size(content_length)

        if actual_size > self.max_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def parse_document(self, content: bytes) -> Any:
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ValidationError(
                message="Import file must be UTF-8 encoded",
                field="file",
                context={"position": e.start},
            ) from e
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ValidationError(
                message="Invalid JSON file format",
                field="file",
                context={"line": e.lineno, "column": e.colno},
            ) from e

    def read_import_document(
        self,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
    ) -> Any:
        """Run every check and return the parsed document."""
        self.validate_extension(filename, content_type)
        self.validate_size(content_length, len(content))
        document = self.parse_document(content)
        logger.info("Import file accepted: %s (%d bytes)", filename, len(content))
        return document


upload_service = UploadService()
