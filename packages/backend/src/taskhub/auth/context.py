"""Per-request identity carrier.

Learn: The AuthGate populates exactly one CurrentIdentity per request.
It is stored on request.state and bound into structlog's contextvars so
every log line for the rest of the request carries the caller's id.
Downstream code only ever reads it.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

import structlog
from starlette.requests import Request


@dataclass(frozen=True)
class CurrentIdentity:
    """The verified subject of the request's bearer token.

    Learn: Holding a CurrentIdentity proves the token was signed by us and
    not expired. It does NOT prove the user still exists.
    """

    user_id: uuid.UUID


def bind_identity(request: Request, identity: CurrentIdentity) -> None:
    """Attach the identity to the request and to correlated logging."""
    request.state.identity = identity
    structlog.contextvars.bind_contextvars(user_id=str(identity.user_id))


def current_identity(request: Request) -> Optional[CurrentIdentity]:
    """Return the identity bound to this request, if the gate ran."""
    return getattr(request.state, "identity", None)
