import uuid
from typing import Optional
from datetime import datetime, timedelta, timezone
from jose import ExpiredSignatureError, JWTError, jwt
import bcrypt
from taskforge.core.config import settings
from taskforge.core.exceptions import InvalidTokenError, TokenExpiredError
from taskforge.core.roles import Role, TokenClaims

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt with the configured work factor."""
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash. A corrupt hash never matches."""
    password_bytes = plain_password.encode('utf-8')
    hashed_bytes = hashed_password.encode('utf-8')
    try:
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        return False


def create_access_token(claims: TokenClaims, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT access token for the given identity.

    Args:
        claims: Identity to embed (user id, tenant id or None, role)
        expires_delta: Optional custom lifetime. Defaults to
            ACCESS_TOKEN_EXPIRE_MINUTES (24 hours).

    Returns:
        Encoded JWT token string
    """
    issued_at = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "userId": str(claims.user_id),
        "tenantId": str(claims.tenant_id) if claims.tenant_id else None,
        "role": claims.role.value,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> TokenClaims:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token string

    Returns:
        Claims carried by the token

    Raises:
        TokenExpiredError: If the token is past its expiry
        InvalidTokenError: If the signature, structure or claims are invalid
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError:
        raise InvalidTokenError()

    try:
        role = Role(payload["role"])
        user_id = uuid.UUID(payload["userId"])
        tenant_id = uuid.UUID(payload["tenantId"]) if payload.get("tenantId") else None
    except (KeyError, TypeError, ValueError):
        raise InvalidTokenError()

    # A token whose tenant binding contradicts its role was not issued by us
    if (role == Role.super_admin) != (tenant_id is None):
        raise InvalidTokenError()

    return TokenClaims(user_id=user_id, tenant_id=tenant_id, role=role)
