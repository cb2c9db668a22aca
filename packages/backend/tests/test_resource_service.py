"""Service-level tests — ResourceService semantics without HTTP.

Learn: The routes are thin, so the rules live here: existence is
checked before ownership, owner-scoped reads demand a caller, and a
patch can't touch fields outside the updatable set.
"""

import uuid

import pytest

from taskhub.auth.jwt import TokenService
from taskhub.db.models import TaskStatus
from taskhub.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from taskhub.services.place_service import PlaceService
from taskhub.services.task_service import TaskService
from taskhub.services.user_service import SoftDeactivateStrategy, UserService


@pytest.fixture
def tokens():
    return TokenService("service-test-secret")


@pytest.fixture
def users(db_session, tokens):
    return UserService(db_session, tokens, hash_rounds=4)


async def _register(users, name="Ann", email=None):
    email = email or f"{name.lower()}-{uuid.uuid4().hex[:8]}@example.com"
    return await users.create({"name": name, "email": email, "password": "secret1"})


# ═══════════════════════════════════════════════════════════
# Users
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_token_verifies_to_created_user(users, tokens):
    user = await _register(users)
    result = await users.login(user.email, "secret1")
    assert tokens.verify(result.token).subject_id == user.id
    assert result.user.id == user.id


@pytest.mark.asyncio
async def test_password_is_stored_hashed(users):
    user = await _register(users)
    assert user.password_hash != "secret1"
    assert user.password_hash.startswith("$2b$04$")


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(users):
    user = await _register(users)
    with pytest.raises(ConflictError):
        await _register(users, name="Another", email=user.email)


@pytest.mark.asyncio
async def test_short_password_rejected(users):
    with pytest.raises(ValidationError):
        await users.create({"name": "Ann", "email": "a@example.com", "password": "12345"})


@pytest.mark.asyncio
async def test_login_failures_share_one_error(users):
    user = await _register(users)
    with pytest.raises(InvalidCredentialsError) as wrong_pw:
        await users.login(user.email, "not-it")
    with pytest.raises(InvalidCredentialsError) as unknown:
        await users.login("nobody@example.com", "secret1")
    assert wrong_pw.value.message == unknown.value.message == "invalid credentials"


@pytest.mark.asyncio
async def test_user_update_other_id_is_forbidden_before_lookup(users):
    user = await _register(users)
    with pytest.raises(AuthorizationError):
        await users.update(str(uuid.uuid4()), {"name": "New"}, user.id)
    with pytest.raises(AuthorizationError):
        await users.remove("garbage", user.id)


@pytest.mark.asyncio
async def test_user_patch_cannot_touch_password_hash(users):
    user = await _register(users)
    with pytest.raises(ValidationError):
        await users.update(user.id, {"password_hash": "x"}, user.id)


@pytest.mark.asyncio
async def test_me_after_delete_is_not_found(users):
    user = await _register(users)
    await users.remove(user.id, user.id)
    with pytest.raises(NotFoundError):
        await users.me(user.id)


@pytest.mark.asyncio
async def test_user_find_all_is_self_scoped(users):
    ann = await _register(users, "Ann")
    await _register(users, "Bob")
    assert [u.id for u in await users.find_all(ann.id)] == [ann.id]

    await users.remove(ann.id, ann.id)
    assert await users.find_all(ann.id) == []


@pytest.mark.asyncio
async def test_user_find_all_hides_deactivated_account(db_session, tokens):
    users = UserService(db_session, tokens, deletion=SoftDeactivateStrategy(), hash_rounds=4)
    ann = await _register(users)
    await users.remove(ann.id, ann.id)
    assert await users.find_all(ann.id) == []


async def _no_match(field, value):
    return None


@pytest.mark.asyncio
async def test_register_race_on_email_is_a_conflict(users, monkeypatch):
    """Two registrations that both pass the lookup collide on the unique index."""
    email = (await _register(users)).email
    monkeypatch.setattr(users.users, "find_by", _no_match)

    with pytest.raises(ConflictError, match="already exists"):
        await _register(users, name="Twin", email=email)

    # The session was rolled back and is usable again
    assert (await _register(users, name="Other")).id is not None


@pytest.mark.asyncio
async def test_email_change_race_is_a_conflict(users, monkeypatch):
    ann = await _register(users, "Ann")
    bob_email = (await _register(users, "Bob")).email
    ann_id = ann.id
    monkeypatch.setattr(users.users, "find_by", _no_match)

    with pytest.raises(ConflictError):
        await users.update(ann_id, {"email": bob_email}, ann_id)


# ═══════════════════════════════════════════════════════════
# Tasks
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_task_find_one_existence_before_ownership(db_session, users):
    ann = await _register(users, "Ann")
    bob = await _register(users, "Bob")
    tasks = TaskService(db_session)

    task = await tasks.create({"title": "T"}, ann.id)
    assert task.status == TaskStatus.PENDING
    assert (await tasks.find_one(task.id, ann.id)).id == task.id

    with pytest.raises(AuthorizationError):
        await tasks.find_one(task.id, bob.id)
    with pytest.raises(NotFoundError):
        await tasks.find_one(uuid.uuid4(), bob.id)


@pytest.mark.asyncio
async def test_task_reads_need_a_caller(db_session):
    tasks = TaskService(db_session)
    with pytest.raises(AuthenticationError):
        await tasks.find_all()
    with pytest.raises(AuthenticationError):
        await tasks.find_one(uuid.uuid4())


@pytest.mark.asyncio
async def test_task_status_validated(db_session, users):
    ann = await _register(users)
    tasks = TaskService(db_session)
    with pytest.raises(ValidationError, match="status must be one of"):
        await tasks.create({"title": "T", "status": "LATER"}, ann.id)

    task = await tasks.create({"title": "T"}, ann.id)
    with pytest.raises(ValidationError):
        await tasks.update(task.id, {"status": None}, ann.id)
    with pytest.raises(ValidationError):
        await tasks.update(task.id, {"owner_id": uuid.uuid4()}, ann.id)


# ═══════════════════════════════════════════════════════════
# Places
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_place_reads_are_public(db_session, users):
    ann = await _register(users)
    places = PlaceService(db_session)
    place = await places.create({"name": "Park"}, ann.id)

    assert [p.id for p in await places.find_all()] == [place.id]
    assert (await places.find_one(place.id)).name == "Park"
    with pytest.raises(NotFoundError, match="Place not found"):
        await places.find_one(uuid.uuid4())


@pytest.mark.asyncio
async def test_place_writes_need_existing_caller(db_session):
    places = PlaceService(db_session)
    with pytest.raises(NotFoundError, match="User not found"):
        await places.create({"name": "Park"}, uuid.uuid4())
