"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - Inputs accept camelCase or snake_case; outputs serialize camelCase
"""
