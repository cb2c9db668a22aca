"""Ownership policy — who may read or mutate a stored record.

Learn: A pure three-way decision. Existence is always checked before
ownership, so asking about a missing record yields NOT_FOUND regardless of
who is asking — a caller never learns "it exists but isn't yours" about an
id that doesn't exist, and never gets a 403 where a 404 is owed.
"""

import enum
import uuid
from typing import Optional

import structlog

from taskhub.errors import AuthorizationError, NotFoundError

logger = structlog.get_logger()


class Decision(str, enum.Enum):
    ALLOW = "allow"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


def decide(
    resource_owner_id: Optional[uuid.UUID],
    caller_id: uuid.UUID,
    *,
    exists: bool = True,
) -> Decision:
    """Decide whether ``caller_id`` may act on a record owned by ``resource_owner_id``.

    A record is absent when ``exists`` is False or no owner id is supplied.
    """
    if not exists or resource_owner_id is None:
        return Decision.NOT_FOUND
    if str(resource_owner_id) != str(caller_id):
        return Decision.FORBIDDEN
    return Decision.ALLOW


def enforce(
    decision: Decision,
    *,
    not_found_message: str = "Not found",
    forbidden_message: str = "Forbidden",
) -> None:
    """Raise the error matching a non-ALLOW decision."""
    if decision is Decision.NOT_FOUND:
        raise NotFoundError(not_found_message)
    if decision is Decision.FORBIDDEN:
        logger.info("ownership.denied", reason=forbidden_message)
        raise AuthorizationError(forbidden_message)
