"""
Domain Errors

Base exception hierarchy for the EVA core.

Collaborator failures (generation, belief store) are defined next to
their interfaces and derive from EvaError. They are recovered inside
the core and never surfaced to the person in conversation.
"""

from typing import Optional


class EvaError(Exception):
    """Base exception for all EVA core errors."""


class ValidationError(EvaError):
    """Malformed input handed to a domain constructor."""

    def __init__(self, message: str, field_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.field_name = field_name
