"""
Exceptions for the translation pipeline.
"""

from __future__ import annotations


class TranslationError(Exception):
    """Raised when a source record cannot be translated.

    Carries a user-facing message explaining what went wrong.
    """


class MissingDefinition(TranslationError):
    """Raised when a source record lacks a mandatory identity field (id or name)."""

    def __init__(self, category: str, field: str, source_id: object = None) -> None:
        self.category = category
        self.field = field
        self.source_id = source_id
        where = f" (source id {source_id})" if source_id is not None else ""
        super().__init__(f"{category.capitalize()} record is missing required field '{field}'{where}")


class AuthFailure(TranslationError):
    """Raised when no usable bearer token could be obtained."""


__all__ = [
    "TranslationError",
    "MissingDefinition",
    "AuthFailure",
]
