from fastapi import BackgroundTasks, Request
from taskforge.core.exceptions import Unauthorized
from taskforge.core.roles import TokenClaims
from taskforge.core.security import verify_token
from taskforge.services.audit import AuditTrail


def get_current_actor(request: Request) -> TokenClaims:
    """
    Extract and validate the JWT from the Authorization Bearer header.

    Tokens are self-contained: the claims are trusted until they expire, so
    no database round trip is made here. Endpoints that need the live user
    row (``/auth/me``) load it themselves.

    Raises:
        Unauthorized: If the header is missing or malformed
        TokenExpiredError: If the token has expired
        InvalidTokenError: If the token does not verify
    """
    authorization = request.headers.get("Authorization")
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthorized("No token provided")

    token = authorization[len("Bearer "):].strip()
    if not token:
        raise Unauthorized("No token provided")

    return verify_token(token)


def get_audit(request: Request, background_tasks: BackgroundTasks) -> AuditTrail:
    return AuditTrail(request, background_tasks)
