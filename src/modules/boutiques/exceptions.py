from __future__ import annotations

from shared.domain.exceptions import AccessDenied, EntityNotFound


class BoutiqueNotFound(EntityNotFound):
    """No boutique is registered for the requested id or owner."""


class NotBoutiqueOwner(AccessDenied):
    """The vendor does not own the boutique targeted by the operation."""
