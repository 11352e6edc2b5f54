import uuid
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from taskforge.core.config import settings
from taskforge.core.exceptions import InvalidTokenError, TokenExpiredError
from taskforge.core.roles import Role, TokenClaims
from taskforge.core.security import (
    create_access_token,
    get_password_hash,
    verify_password,
    verify_token,
)


def tenant_claims():
    return TokenClaims(user_id=uuid.uuid4(), tenant_id=uuid.uuid4(), role=Role.tenant_admin)


class TestPasswordHashing:
    def test_hash_verifies(self):
        hashed = get_password_hash("correct horse")
        assert hashed != "correct horse"
        assert hashed.startswith("$2")
        assert verify_password("correct horse", hashed)

    def test_wrong_password_rejected(self):
        hashed = get_password_hash("correct horse")
        assert not verify_password("battery staple", hashed)

    def test_hashes_are_salted(self):
        assert get_password_hash("same") != get_password_hash("same")

    def test_malformed_hash_never_matches(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False


class TestTokens:
    def test_round_trip_preserves_claims(self):
        claims = tenant_claims()
        assert verify_token(create_access_token(claims)) == claims

    def test_super_admin_token_has_no_tenant(self):
        claims = TokenClaims(user_id=uuid.uuid4(), tenant_id=None, role=Role.super_admin)
        token = create_access_token(claims)

        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        assert payload["tenantId"] is None
        assert payload["role"] == "super_admin"
        assert verify_token(token) == claims

    def test_default_lifetime_is_configured_minutes(self):
        token = create_access_token(tenant_claims())
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        assert payload["exp"] - payload["iat"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    def test_expired_token(self):
        token = create_access_token(tenant_claims(), expires_delta=timedelta(seconds=-10))
        with pytest.raises(TokenExpiredError) as exc_info:
            verify_token(token)
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Token expired"

    def test_tampered_signature(self):
        token = create_access_token(tenant_claims())
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        with pytest.raises(InvalidTokenError):
            verify_token(tampered)

    def test_wrong_secret(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"userId": str(uuid.uuid4()), "tenantId": str(uuid.uuid4()), "role": "user",
             "iat": now, "exp": now + timedelta(hours=1)},
            "some-other-secret",
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            verify_token(token)

    def test_garbage(self):
        with pytest.raises(InvalidTokenError) as exc_info:
            verify_token("not.a.token")
        assert exc_info.value.message == "Invalid token"

    @pytest.mark.parametrize("payload", [
        {"tenantId": None, "role": "user"},
        {"userId": "not-a-uuid", "tenantId": None, "role": "super_admin"},
        {"userId": str(uuid.uuid4()), "tenantId": None, "role": "owner"},
        # Role and tenant binding disagree
        {"userId": str(uuid.uuid4()), "tenantId": None, "role": "tenant_admin"},
        {"userId": str(uuid.uuid4()), "tenantId": str(uuid.uuid4()), "role": "super_admin"},
    ])
    def test_malformed_claims(self, payload):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {**payload, "iat": now, "exp": now + timedelta(hours=1)},
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
        )
        with pytest.raises(InvalidTokenError):
            verify_token(token)
