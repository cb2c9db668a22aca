"""FastAPI auth dependencies — the request-boundary gate.

Learn: ``get_current_user`` is used as Depends() on protected routes (or
on a whole router via include_router(dependencies=...)). It:
1. Reads the Authorization header
2. Requires the exact form "Bearer <token>"
3. Verifies the token with the app's TokenService
4. Binds the resulting CurrentIdentity for the rest of the request

No database lookup happens here. A token whose user was deleted still
passes the gate; operations that need a live user (me, task access) check
existence themselves and answer 404 rather than 401.
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, Request

from taskhub.auth.context import CurrentIdentity, bind_identity, current_identity
from taskhub.auth.jwt import TokenError, TokenService
from taskhub.errors import AuthenticationError

logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "


def get_token_service(request: Request) -> TokenService:
    """The TokenService built from Settings in create_app()."""
    return request.app.state.token_service


def parse_bearer(authorization: Optional[str]) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` value."""
    if not authorization:
        raise AuthenticationError("Authentication required")
    if not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError("Authorization header must use the Bearer scheme")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError("Authentication required")
    return token


def authenticate(
    authorization: Optional[str], tokens: TokenService
) -> CurrentIdentity:
    """Turn a raw header value into a verified identity, or raise 401."""
    token = parse_bearer(authorization)
    try:
        claims = tokens.verify(token)
    except TokenError as e:
        raise AuthenticationError(str(e))
    return CurrentIdentity(user_id=claims.subject_id)


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if no valid bearer token).

    Learn: FastAPI caches dependency results per request, so even when a
    route and its router both depend on this, the token is verified once.
    """
    existing = current_identity(request)
    if existing is not None:
        return existing

    try:
        identity = authenticate(authorization, tokens)
    except AuthenticationError as e:
        logger.info("auth.rejected", path=request.url.path, reason=e.message)
        raise

    bind_identity(request, identity)
    return identity
