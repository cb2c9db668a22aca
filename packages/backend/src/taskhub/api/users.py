"""User API — registration, login, profile, account removal.

Learn: Routes for the user lifecycle:
- POST /users → create an account (open)
- POST /users/login → email/password → {user, token} (open)
- GET /users/me → the caller's own profile
- PATCH /users/:id → update name/email (self only)
- DELETE /users/:id → remove the account (self only)

The path id is taken as a plain string so that "not you" is answered
with 403 no matter what the id looks like.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.auth.context import CurrentIdentity
from taskhub.auth.dependencies import get_current_user
from taskhub.db.engine import get_db
from taskhub.schemas.user import (
    LoginResponse,
    MessageResponse,
    UserCreate,
    UserLogin,
    UserRead,
    UserUpdate,
)
from taskhub.services.user_service import UserService

router = APIRouter(prefix="/users")


def _user_svc(request: Request, db: AsyncSession = Depends(get_db)) -> UserService:
    state = request.app.state
    return UserService(
        db,
        tokens=state.token_service,
        deletion=state.user_deletion,
        hash_rounds=state.settings.password_hash_rounds,
    )


@router.post("", response_model=UserRead, status_code=201)
async def create_user(body: UserCreate, svc: UserService = Depends(_user_svc)):
    """Create a new user account."""
    return await svc.create(body.model_dump())


@router.post("/login", response_model=LoginResponse)
async def login(body: UserLogin, svc: UserService = Depends(_user_svc)):
    """Login with email and password → user + bearer token."""
    result = await svc.login(body.email, body.password)
    return LoginResponse(user=UserRead.model_validate(result.user), token=result.token)


@router.get("/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_user_svc),
):
    """Get the current authenticated user's profile."""
    return await svc.me(identity.user_id)


@router.patch("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: str,
    body: UserUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_user_svc),
):
    """Update the caller's own name and/or email."""
    return await svc.update(user_id, body.model_dump(exclude_unset=True), identity.user_id)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_user_svc),
):
    """Remove the caller's own account (hard or soft, per configuration)."""
    await svc.remove(user_id, identity.user_id)
    return MessageResponse(message="User deleted successfully")
