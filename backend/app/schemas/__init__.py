"""
SnippetHub Backend — Pydantic Schemas
======================================

API contracts, kept separate from the ORM models so the wire format can
change independently of the table layout.

    - common.py:    errors, plain messages, health
    - snippet.py:   snippet CRUD, versions, rollback, diff
    - tag.py:       tags and favorite status
    - transfer.py:  export document, import options/ledger, validation report
    - analytics.py: dashboard aggregates
"""
