"""
SnippetHub Backend — Upload Service Tests
===========================================

What we test:
    ✅ Extension / content type acceptance
    ✅ Empty and oversized files are rejected
    ✅ Non-UTF-8 and malformed JSON are rejected with a ValidationError
    ✅ A UTF-8 BOM is tolerated
"""

import json

import pytest

from app.exceptions import ValidationError
from app.services.upload_service import UploadService


class TestUploadService:

    def setup_method(self):
        self.service = UploadService(max_size=1024)

    def test_json_extension_accepted(self):
        self.service.validate_extension("export.JSON")

    def test_json_content_type_accepted_without_extension(self):
        self.service.validate_extension("blob", "application/json; charset=utf-8")

    def test_other_extension_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_extension("notes.txt", "text/plain")

        assert exc_info.value.field == "file"

    def test_empty_file_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(None, 0)

    def test_oversized_header_rejected(self):
        with pytest.raises(ValidationError):
            self.service.validate_size(content_length=4096, actual_size=10)

    def test_oversized_content_rejected(self):
        with pytest.raises(ValidationError):
            self.service.validate_size(content_length=None, actual_size=2048)

    def test_invalid_utf8_rejected(self):
        with pytest.raises(ValidationError, match="UTF-8"):
            self.service.parse_document(b"\xff\xfe{}")

    def test_malformed_json_rejected(self):
        with pytest.raises(ValidationError, match="Invalid JSON"):
            self.service.parse_document(b'{"snippets": [')

    def test_bom_tolerated(self):
        document = self.service.parse_document(b"\xef\xbb\xbf" + b'{"snippets": []}')

        assert document == {"snippets": []}

    def test_read_import_document(self):
        payload = json.dumps({"version": "1.1.0", "snippets": []}).encode()

        document = self.service.read_import_document("export.json", payload, "application/json")

        assert document["version"] == "1.1.0"

    def test_declared_size_checked_before_reading(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.check_declared_size(4096)

        assert exc_info.value.context["reported_size"] == 4096
        self.service.check_declared_size(None)
        self.service.check_declared_size(512)
