import jwt
import pytest
from jwt.exceptions import PyJWKClientError
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.test import APIRequestFactory

from modules.core import authentication
from modules.core.authentication import IdentityServiceAuthentication
from modules.core.identity import IdentityServiceError
from modules.core.identity import Actor, Role

pytestmark = pytest.mark.unit

factory = APIRequestFactory()


def _request(header=None):
    extra = {"HTTP_AUTHORIZATION": header} if header is not None else {}
    return factory.get("/api/v1/me", **extra)


class TestIdentityServiceAuthentication:
    def test_no_header_is_anonymous(self):
        assert IdentityServiceAuthentication().authenticate(_request()) is None

    def test_valid_token_yields_actor(self, identity_token):
        token = identity_token(sub="vendor-7", role=Role.VENDOR)
        actor, raw = IdentityServiceAuthentication().authenticate(
            _request(f"Bearer {token}")
        )
        assert actor == Actor(user_id="vendor-7", role=Role.VENDOR)
        assert actor.is_vendor
        assert raw == token

    def test_malformed_header_rejected(self):
        with pytest.raises(AuthenticationFailed):
            IdentityServiceAuthentication().authenticate(_request("Token abc"))

    def test_wrong_signature_rejected(self, identity_token):
        token = identity_token(secret="not-the-identity-secret")
        with pytest.raises(AuthenticationFailed):
            IdentityServiceAuthentication().authenticate(_request(f"Bearer {token}"))

    def test_unknown_role_rejected(self, identity_token):
        token = identity_token(role="superuser")
        with pytest.raises(AuthenticationFailed):
            IdentityServiceAuthentication().authenticate(_request(f"Bearer {token}"))

    def test_missing_subject_rejected(self, settings):
        token = jwt.encode(
            {"role": Role.SHOPPER}, settings.IDENTITY_SHARED_SECRET, algorithm="HS256"
        )
        with pytest.raises(AuthenticationFailed):
            IdentityServiceAuthentication().authenticate(_request(f"Bearer {token}"))

    def test_issuer_checked_when_configured(self, settings, identity_token):
        settings.IDENTITY_ISSUER = "https://identity.mall.example"
        token = identity_token(iss="https://someone-else.example")
        with pytest.raises(AuthenticationFailed):
            IdentityServiceAuthentication().authenticate(_request(f"Bearer {token}"))

    def test_rs256_without_jwks_url_is_upstream_error(self, settings, identity_token):
        settings.IDENTITY_ALGORITHM = "RS256"
        settings.IDENTITY_JWKS_URL = ""
        with pytest.raises(IdentityServiceError):
            IdentityServiceAuthentication().authenticate(
                _request(f"Bearer {identity_token()}")
            )

    def test_unreachable_jwks_is_upstream_error(
        self, settings, identity_token, monkeypatch
    ):
        settings.IDENTITY_ALGORITHM = "RS256"
        settings.IDENTITY_JWKS_URL = "https://identity.mall.example/.well-known/jwks.json"

        class _DownClient:
            def get_signing_key_from_jwt(self, token):
                raise PyJWKClientError("Fail to fetch data from the url")

        monkeypatch.setattr(authentication, "_jwks_client", lambda url: _DownClient())
        with pytest.raises(IdentityServiceError):
            IdentityServiceAuthentication().authenticate(
                _request(f"Bearer {identity_token()}")
            )

    def test_authenticate_header_advertises_bearer(self):
        header = IdentityServiceAuthentication().authenticate_header(_request())
        assert header.startswith("Bearer")
