"""Domain error taxonomy shared by every module.

Services raise these; the API layer maps each family to one HTTP status
through ``modules.core.exceptions.envelope_exception_handler``.  Module
exceptions subclass the family they belong to, so the handler never needs
to know about individual modules.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for every error raised by the service layer."""

    default_message = "Domain error."

    def __init__(
        self, message: Optional[str] = None, *, details: Optional[Dict[str, Any]] = None
    ) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class InvalidInput(DomainError):
    """Malformed or out-of-range input."""

    default_message = "Invalid input."


class BusinessRuleViolation(DomainError):
    """Well-formed input that breaks a business rule."""

    default_message = "Business rule violated."


class EntityNotFound(DomainError):
    """A referenced entity does not exist (or is not visible to the caller)."""

    default_message = "Resource not found."


class ConflictError(DomainError):
    """The request conflicts with the current state of shared resources."""

    default_message = "Conflict."


class AccessDenied(DomainError):
    """The authenticated actor may not perform this operation."""

    default_message = "Access denied."


class UpstreamError(DomainError):
    """An external collaborator failed to answer."""

    default_message = "Upstream service unavailable."
