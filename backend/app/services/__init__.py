"""
SnippetHub Backend — Services Layer
=====================================

What:  Business logic layer sitting between routes (HTTP) and the database.
How:   Services are stateless singletons; each call receives the request's
       AsyncSession. They flush but leave committing to the session
       dependency, except the import engine, which owns its transaction.

Service Inventory:
    - VersionService:   snapshot-before-change updates, history, rollback
    - DiffService:      unified diff between a snapshot and the live snippet
    - TransferService:  export (JSON / Markdown), validation, import
    - SnippetService:   CRUD and the filtered list
    - TagService:       tag CRUD, linking, suggestions
    - FavoriteService:  favorite markers
    - AnalyticsService: dashboard aggregates
    - UploadService:    import file checks and JSON parsing
"""
