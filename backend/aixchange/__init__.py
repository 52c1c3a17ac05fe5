"""AIXchange Application Package — marketplace API for AI solutions and events.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
