"""
SnippetHub Backend — Middleware Package
========================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    The request ID is assigned before the access logger runs, so every log
    line of a request carries the same ID.
"""
