"""Resource service — one CRUD pattern shared by users, tasks and places.

Learn: Every resource follows the same sequence for each operation:
1. (users) reject acting on another identity before touching storage
2. (optionally) confirm the caller's own User still exists
3. load the record — NotFound if absent
4. ask the OwnershipPolicy — Forbidden if not the owner
5. apply the change and commit

What differs per resource is captured in AccessRules rather than copied
into three hand-written services:

             owner-scoped read   caller must exist   self-only mutation
  Task       yes                 reads + writes      no
  Place      no (public)         writes only         no
  User       n/a (self)          via the load        yes
"""

import uuid
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, Mapping, Optional, Sequence, Union

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.auth.policies import decide, enforce
from taskhub.db.models import User
from taskhub.db.repository import ModelT, Repository
from taskhub.errors import AuthenticationError, AuthorizationError, NotFoundError, ValidationError

logger = structlog.get_logger()

RecordId = Union[uuid.UUID, str]


@dataclass(frozen=True)
class AccessRules:
    """Per-resource access behaviour plugged into ResourceService."""

    ownership_required_for_read: bool = True
    caller_must_exist_for_read: bool = True
    caller_must_exist_for_write: bool = True
    self_only_mutation: bool = False


def parse_id(record_id: RecordId) -> Optional[uuid.UUID]:
    """Coerce a path id to a UUID. Anything unparseable cannot exist."""
    if isinstance(record_id, uuid.UUID):
        return record_id
    try:
        return uuid.UUID(str(record_id))
    except ValueError:
        return None


class ResourceService(Generic[ModelT]):
    """Business logic for CRUD on one owned resource."""

    model: ClassVar[type]
    rules: ClassVar[AccessRules] = AccessRules()
    resource_name: ClassVar[str] = "Resource"
    owner_field: ClassVar[str] = "owner_id"
    # Must be present and non-blank on create, and may not be blanked by a patch.
    required_fields: ClassVar[tuple[str, ...]] = ()
    # Fields a patch may set; anything else is rejected.
    updatable_fields: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, db: AsyncSession):
        self.db = db
        self.records: Repository[ModelT] = Repository(db, self.model)
        self.users: Repository[User] = Repository(db, User)

    @property
    def not_found_message(self) -> str:
        return f"{self.resource_name} not found"

    @property
    def _event(self) -> str:
        return self.resource_name.lower()

    # ─── Checks ──────────────────────────────────────────

    async def ensure_caller_exists(self, caller_id: uuid.UUID) -> User:
        """Fail with 404 when a valid token refers to a user that is gone.

        Learn: The AuthGate only proves the token is genuine. This lookup is
        what turns a deleted user's still-valid token into "User not found".
        """
        user = await self.users.get(caller_id)
        if user is None or not user.is_active:
            raise NotFoundError("User not found")
        return user

    def _check_self_only(self, record_id: RecordId, caller_id: uuid.UUID, action: str) -> None:
        if self.rules.self_only_mutation and str(record_id) != str(caller_id):
            logger.info(f"{self._event}.{action}_rejected", target_id=str(record_id))
            raise AuthorizationError(
                f"You can only {action} your own {self.resource_name.lower()}"
            )

    def _validate_required(self, data: Mapping[str, Any], *, partial: bool) -> None:
        for field in self.required_fields:
            if partial and field not in data:
                continue
            value = data.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError(f"{field} is required")

    def _validate_patch(self, patch: Mapping[str, Any]) -> None:
        unknown = set(patch) - self.updatable_fields
        if unknown:
            raise ValidationError(
                f"Cannot update field(s): {', '.join(sorted(unknown))}"
            )
        self._validate_required(patch, partial=True)

    async def _load(self, record_id: RecordId) -> Optional[ModelT]:
        parsed = parse_id(record_id)
        if parsed is None:
            return None
        return await self.records.get(parsed)

    async def _authorize(self, record_id: RecordId, caller_id: uuid.UUID, action: str) -> ModelT:
        """Load a record and require the caller to own it (404 before 403)."""
        record = await self._load(record_id)
        owner_id = getattr(record, self.owner_field) if record is not None else None
        enforce(
            decide(owner_id, caller_id, exists=record is not None),
            not_found_message=self.not_found_message,
            forbidden_message=(
                f"You cannot {action} a {self.resource_name.lower()} that is not yours"
            ),
        )
        return record

    # ─── Create ──────────────────────────────────────────

    async def create(self, data: Mapping[str, Any], caller_id: uuid.UUID) -> ModelT:
        """Persist a new record owned by the caller."""
        if self.rules.caller_must_exist_for_write:
            await self.ensure_caller_exists(caller_id)
        self._validate_required(data, partial=False)

        # Omitted optional fields fall back to column defaults.
        fields = {
            k: v for k, v in data.items() if k != self.owner_field and v is not None
        }
        record = await self.records.create({**fields, self.owner_field: caller_id})
        await self.db.commit()

        logger.info(f"{self._event}.created", id=str(record.id), owner_id=str(caller_id))
        return record

    # ─── Read ────────────────────────────────────────────

    async def find_all(self, caller_id: Optional[uuid.UUID] = None) -> Sequence[ModelT]:
        """List records — only the caller's own when reads are owner-scoped."""
        if not self.rules.ownership_required_for_read:
            return await self.records.list_all()

        if caller_id is None:
            raise AuthenticationError("Authentication required")
        if self.rules.caller_must_exist_for_read:
            await self.ensure_caller_exists(caller_id)
        return await self.records.list_by_owner(caller_id, field=self.owner_field)

    async def find_one(
        self, record_id: RecordId, caller_id: Optional[uuid.UUID] = None
    ) -> ModelT:
        if not self.rules.ownership_required_for_read:
            record = await self._load(record_id)
            if record is None:
                raise NotFoundError(self.not_found_message)
            return record

        if caller_id is None:
            raise AuthenticationError("Authentication required")
        if self.rules.caller_must_exist_for_read:
            await self.ensure_caller_exists(caller_id)
        return await self._authorize(record_id, caller_id, action="view")

    # ─── Update ──────────────────────────────────────────

    async def before_update(self, record: ModelT, patch: Mapping[str, Any]) -> None:
        """Hook for resource-specific invariants checked before commit."""

    async def update(
        self, record_id: RecordId, patch: Mapping[str, Any], caller_id: uuid.UUID
    ) -> ModelT:
        """Partially update a record. Keys missing from ``patch`` are left as-is."""
        self._check_self_only(record_id, caller_id, action="update")
        if self.rules.caller_must_exist_for_write:
            await self.ensure_caller_exists(caller_id)
        record = await self._authorize(record_id, caller_id, action="update")

        self._validate_patch(patch)
        await self.before_update(record, patch)
        updated = await self.records.update(record.id, patch)
        await self.db.commit()

        logger.info(f"{self._event}.updated", id=str(record.id), fields=sorted(patch))
        return updated

    # ─── Delete ──────────────────────────────────────────

    async def _delete(self, record: ModelT) -> None:
        await self.records.delete(record.id)

    async def remove(self, record_id: RecordId, caller_id: uuid.UUID) -> None:
        self._check_self_only(record_id, caller_id, action="delete")
        if self.rules.caller_must_exist_for_write:
            await self.ensure_caller_exists(caller_id)
        record = await self._authorize(record_id, caller_id, action="delete")

        await self._delete(record)
        await self.db.commit()

        logger.info(f"{self._event}.deleted", id=str(record.id))
