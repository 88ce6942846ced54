"""Authenticated caller as resolved from the Identity Service.

The marketplace never stores accounts: an ``Actor`` is built from the
verified bearer token claims on every request and carries only the user id
and role the Identity Service vouched for.
"""

from __future__ import annotations

from dataclasses import dataclass

from django.db import models

from shared.domain.exceptions import UpstreamError


class Role(models.TextChoices):
    SHOPPER = "acheteur", "Acheteur"
    VENDOR = "boutique", "Boutique"
    ADMIN = "admin_centre", "Administrateur du centre"


class IdentityServiceError(UpstreamError):
    """The Identity Service could not be reached to verify a credential."""

    default_message = "Identity Service unavailable."


@dataclass(frozen=True)
class Actor:
    """Identity of the caller of a service operation."""

    user_id: str
    role: str

    # DRF request.user contract
    is_authenticated = True
    is_active = True
    is_anonymous = False

    @property
    def pk(self) -> str:
        return self.user_id

    @property
    def is_shopper(self) -> bool:
        return self.role == Role.SHOPPER

    @property
    def is_vendor(self) -> bool:
        return self.role == Role.VENDOR

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def __str__(self) -> str:
        return f"{self.role}:{self.user_id}"
