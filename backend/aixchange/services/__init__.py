"""Services Layer — persistence workflows behind the route handlers.

Invariants:
    - Services receive an AsyncSession; they own commit/rollback
    - Services raise AIXchangeError subclasses, never HTTPException
"""
