"""
SnippetHub Backend — API Routes Package
=========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - snippets.py:  /api/snippets CRUD, versions, rollback, diff
    - transfer.py:  /api/snippets/export, /import, /validate-import
    - tags.py:      /api/tags CRUD and suggestions
    - favorites.py: /api/favorites
    - analytics.py: /api/analytics dashboards
    - health.py:    /health

Design Principle:
    Routes stay thin: extract request data, call a service, shape the
    response. Business rules live in services.
"""
