"""Place API routes.

Learn: Unlike tasks, reads here are public — GET routes take no identity
at all. Only the write routes depend on the AuthGate.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.auth.context import CurrentIdentity
from taskhub.auth.dependencies import get_current_user
from taskhub.db.engine import get_db
from taskhub.schemas.place import PlaceCreate, PlaceRead, PlaceUpdate
from taskhub.schemas.user import MessageResponse
from taskhub.services.place_service import PlaceService

router = APIRouter(prefix="/places")


def _place_svc(db: AsyncSession = Depends(get_db)) -> PlaceService:
    return PlaceService(db)


@router.post("", response_model=PlaceRead, status_code=201)
async def create_place(
    body: PlaceCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PlaceService = Depends(_place_svc),
):
    """Create a place owned by the caller."""
    return await svc.create(body.model_dump(), identity.user_id)


@router.get("", response_model=list[PlaceRead])
async def list_places(svc: PlaceService = Depends(_place_svc)):
    """List every place. No authentication required."""
    return await svc.find_all()


@router.get("/{place_id}", response_model=PlaceRead)
async def get_place(place_id: str, svc: PlaceService = Depends(_place_svc)):
    """Get a single place. No authentication required."""
    return await svc.find_one(place_id)


@router.patch("/{place_id}", response_model=PlaceRead)
async def update_place(
    place_id: str,
    body: PlaceUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PlaceService = Depends(_place_svc),
):
    """Partially update a place the caller owns."""
    return await svc.update(place_id, body.model_dump(exclude_unset=True), identity.user_id)


@router.delete("/{place_id}", response_model=MessageResponse)
async def delete_place(
    place_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PlaceService = Depends(_place_svc),
):
    """Delete a place the caller owns."""
    await svc.remove(place_id, identity.user_id)
    return MessageResponse(message="Place deleted successfully")
