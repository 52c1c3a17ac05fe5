"""Infrastructure Layer — database, logging, image API and file storage.

Invariants:
    - Infrastructure never imports from services/ or api/
    - External calls wrapped with retry/timeout/error mapping
"""
