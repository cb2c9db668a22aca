"""User service — registration, login, profile and account removal.

Learn: Users reuse the generic resource pattern with one twist: a user
"owns" only their own row, and update/delete reject any path id that
differs from the token's identity *before* loading anything — so the
answer is 403 whether or not the other account exists.

Account removal is a deployment choice (TASKHUB_USER_DELETE_STRATEGY):
- hard: the row is deleted (tasks and places cascade with it)
- soft: is_active is cleared; the row, and its email, stay reserved
Either way the user's outstanding tokens keep verifying until they
expire; the next /users/me with such a token answers 404.
"""

import abc
import contextlib
import functools
import uuid
from dataclasses import dataclass
from typing import Any, AsyncIterator, Mapping, Optional, Sequence

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.auth.jwt import TokenService
from taskhub.auth.password import DEFAULT_ROUNDS, hash_password, verify_password
from taskhub.db.models import User
from taskhub.db.repository import Repository
from taskhub.errors import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from taskhub.services.resource_service import AccessRules, RecordId, ResourceService

logger = structlog.get_logger()

MIN_PASSWORD_LENGTH = 6
DUPLICATE_EMAIL = "User with this email already exists"


# ═══════════════════════════════════════════════════════════
# Deletion strategies
# ═══════════════════════════════════════════════════════════


class DeletionStrategy(abc.ABC):
    """How a user account is removed."""

    name: str

    @abc.abstractmethod
    async def remove(self, users: Repository[User], user: User) -> None:
        ...


class HardDeleteStrategy(DeletionStrategy):
    name = "hard"

    async def remove(self, users: Repository[User], user: User) -> None:
        await users.delete(user.id)


class SoftDeactivateStrategy(DeletionStrategy):
    name = "soft"

    async def remove(self, users: Repository[User], user: User) -> None:
        await users.update(user.id, {"is_active": False})


_STRATEGIES: dict[str, type[DeletionStrategy]] = {
    HardDeleteStrategy.name: HardDeleteStrategy,
    SoftDeactivateStrategy.name: SoftDeactivateStrategy,
}


def deletion_strategy_for(name: str) -> DeletionStrategy:
    """Resolve a configured strategy name ("hard" / "soft")."""
    try:
        return _STRATEGIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown user delete strategy '{name}'. "
            f"Available: {', '.join(sorted(_STRATEGIES))}"
        )


# ═══════════════════════════════════════════════════════════
# Service
# ═══════════════════════════════════════════════════════════


@dataclass
class LoginResult:
    user: User
    token: str


@functools.lru_cache(maxsize=4)
def _placeholder_hash(rounds: int) -> str:
    """A real bcrypt digest to verify against when the email is unknown.

    Keeps "no such user" and "wrong password" equally slow.
    """
    return hash_password("taskhub-placeholder", rounds=rounds)


class UserService(ResourceService[User]):
    """Business logic for user accounts."""

    model = User
    resource_name = "User"
    owner_field = "id"
    rules = AccessRules(
        ownership_required_for_read=True,
        caller_must_exist_for_read=False,
        caller_must_exist_for_write=False,
        self_only_mutation=True,
    )
    required_fields = ("name", "email")
    updatable_fields = frozenset({"name", "email"})

    def __init__(
        self,
        db: AsyncSession,
        tokens: TokenService,
        deletion: Optional[DeletionStrategy] = None,
        hash_rounds: int = DEFAULT_ROUNDS,
    ):
        super().__init__(db)
        self.tokens = tokens
        self.deletion = deletion or HardDeleteStrategy()
        self.hash_rounds = hash_rounds

    async def _load(self, record_id: RecordId) -> Optional[User]:
        # Deactivated accounts are indistinguishable from deleted ones.
        user = await super()._load(record_id)
        if user is None or not user.is_active:
            return None
        return user

    @contextlib.asynccontextmanager
    async def _unique_email(self) -> AsyncIterator[None]:
        """Turn a lost race on the email unique index into a ConflictError.

        The find_by checks catch the common case; two requests that both
        pass them only collide at flush/commit.
        """
        try:
            yield
        except IntegrityError:
            await self.db.rollback()
            logger.info("user.email_conflict")
            raise ConflictError(DUPLICATE_EMAIL)

    # ─── Register ────────────────────────────────────────

    async def create(self, data: Mapping[str, Any], caller_id: Optional[uuid.UUID] = None) -> User:
        """Register a new account. The new row is its own owner."""
        self._validate_required(data, partial=False)
        password = data.get("password") or ""
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )

        email = data["email"]
        if await self.users.find_by("email", email) is not None:
            raise ConflictError(DUPLICATE_EMAIL)

        password_hash = hash_password(password, rounds=self.hash_rounds)
        async with self._unique_email():
            user = await self.records.create(
                {"name": data["name"], "email": email, "password_hash": password_hash}
            )
            await self.db.commit()

        logger.info("user.created", id=str(user.id))
        return user

    # ─── Login ───────────────────────────────────────────

    async def login(self, email: str, password: str) -> LoginResult:
        """Exchange email + password for a bearer token.

        Learn: Unknown email, deactivated account and wrong password all
        raise the same InvalidCredentialsError — the response never says
        which part was wrong.
        """
        user = await self.users.find_by("email", email)
        if user is None or not user.is_active:
            verify_password(password, _placeholder_hash(self.hash_rounds))
            logger.info("user.login_failed")
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash):
            logger.info("user.login_failed", id=str(user.id))
            raise InvalidCredentialsError()

        token = self.tokens.issue(user.id)
        logger.info("user.logged_in", id=str(user.id))
        return LoginResult(user=user, token=token)

    # ─── Current user ────────────────────────────────────

    async def me(self, caller_id: uuid.UUID) -> User:
        """The caller's own record; 404 if their token outlived the account."""
        user = await self._load(caller_id)
        if user is None:
            raise NotFoundError(self.not_found_message)
        return user

    async def find_all(self, caller_id: Optional[uuid.UUID] = None) -> Sequence[User]:
        """The caller's own account as a one-element list (empty once removed)."""
        return [u for u in await super().find_all(caller_id) if u.is_active]

    # ─── Update / delete ─────────────────────────────────

    async def update(
        self, record_id: RecordId, patch: Mapping[str, Any], caller_id: uuid.UUID
    ) -> User:
        async with self._unique_email():
            return await super().update(record_id, patch, caller_id)

    async def before_update(self, record: User, patch: Mapping[str, Any]) -> None:
        email = patch.get("email")
        if email is None or email == record.email:
            return
        existing = await self.users.find_by("email", email)
        if existing is not None and existing.id != record.id:
            raise ConflictError(DUPLICATE_EMAIL)

    async def _delete(self, record: User) -> None:
        await self.deletion.remove(self.records, record)
