"""Identity Service bearer authentication for Django REST Framework.

The Identity Service signs the tokens it issues.  Two verification modes
are supported, chosen by ``IDENTITY_ALGORITHM``:

* ``HS256`` - shared secret (``IDENTITY_SHARED_SECRET``).
* ``RS256`` - public keys fetched from ``IDENTITY_JWKS_URL`` and cached by
  ``PyJWKClient`` (300 s), so there is no network call on every request.

Security decisions
------------------
* **Fail Closed**: any decode / validation error returns 401.
* ``algorithms`` comes from configuration, never from the token header.
* Issuer and audience are validated whenever they are configured.
* A JWKS endpoint that cannot be reached is an upstream failure (502), not
  an authentication failure.
"""

from __future__ import annotations

from functools import lru_cache

import jwt as pyjwt
import structlog
from django.conf import settings
from jwt import PyJWKClient
from jwt.exceptions import PyJWKClientError, PyJWTError
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

from modules.core.identity import Actor, IdentityServiceError, Role

logger = structlog.get_logger(__name__)


@lru_cache(maxsize=4)
def _jwks_client(url: str) -> PyJWKClient:
    return PyJWKClient(url, cache_jwk_set=True, lifespan=300)


class IdentityServiceAuthentication(BaseAuthentication):
    """Validates Identity Service bearer tokens and yields an ``Actor``."""

    keyword = "Bearer"

    def authenticate(self, request):
        """Return ``(Actor, token)`` or ``None`` (no credentials)."""
        header = request.META.get("HTTP_AUTHORIZATION", "")
        if not header:
            return None

        token = self._extract_token(header)
        payload = self._decode_token(token)
        actor = self._build_actor(payload)
        logger.info("identity.authenticated", user_id=actor.user_id, role=actor.role)
        return (actor, token)

    def authenticate_header(self, request):
        """Value for the ``WWW-Authenticate`` response header on 401."""
        return f'{self.keyword} realm="api"'

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _extract_token(header: str) -> str:
        parts = header.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            raise AuthenticationFailed("Invalid Authorization header format.")
        return parts[1]

    @staticmethod
    def _signing_key(token: str):
        algorithm = settings.IDENTITY_ALGORITHM
        if algorithm.startswith("HS"):
            return settings.IDENTITY_SHARED_SECRET
        if not settings.IDENTITY_JWKS_URL:
            raise IdentityServiceError("Identity Service JWKS URL is not configured.")
        try:
            return _jwks_client(settings.IDENTITY_JWKS_URL).get_signing_key_from_jwt(
                token
            ).key
        except PyJWKClientError as exc:
            logger.error("identity.jwks_unavailable", error=str(exc))
            raise IdentityServiceError(
                "Identity Service signing keys are unavailable."
            ) from exc
        except PyJWTError as exc:
            raise AuthenticationFailed(f"Token validation failed: {exc}") from exc

    def _decode_token(self, token: str) -> dict:
        key = self._signing_key(token)
        kwargs: dict = {"algorithms": [settings.IDENTITY_ALGORITHM]}
        options = {"require": ["sub"]}
        if settings.IDENTITY_AUDIENCE:
            kwargs["audience"] = settings.IDENTITY_AUDIENCE
        else:
            options["verify_aud"] = False
        if settings.IDENTITY_ISSUER:
            kwargs["issuer"] = settings.IDENTITY_ISSUER
        try:
            return pyjwt.decode(token, key, options=options, **kwargs)
        except PyJWTError as exc:
            logger.warning("identity.token_rejected", error=str(exc))
            raise AuthenticationFailed(f"Token validation failed: {exc}") from exc

    @staticmethod
    def _build_actor(payload: dict) -> Actor:
        role = payload.get(settings.IDENTITY_ROLE_CLAIM)
        if role not in Role.values:
            logger.warning("identity.unknown_role", role=role)
            raise AuthenticationFailed("Token does not carry a marketplace role.")
        return Actor(user_id=str(payload["sub"]), role=role)
