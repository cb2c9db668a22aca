"""Task API routes.

Learn: The whole router sits behind the AuthGate (see api/__init__.py).
Routes only translate HTTP to service calls; existence, ownership and
caller checks all happen in TaskService and surface as 404/403 via the
error handlers.

Path ids are plain strings: a malformed id can't name a task, so the
service answers 404 for it just like for an unknown id.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.auth.context import CurrentIdentity
from taskhub.auth.dependencies import get_current_user
from taskhub.db.engine import get_db
from taskhub.schemas.task import TaskCreate, TaskRead, TaskUpdate
from taskhub.services.task_service import TaskService

router = APIRouter(prefix="/tasks")


def _task_svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.post("", response_model=TaskRead, status_code=201)
async def create_task(
    body: TaskCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Create a task owned by the caller (status defaults to PENDING)."""
    return await svc.create(body.model_dump(), identity.user_id)


@router.get("", response_model=list[TaskRead])
async def list_tasks(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """List the caller's own tasks, newest first."""
    return await svc.find_all(identity.user_id)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Get a single task. 404 if missing, 403 if someone else's."""
    return await svc.find_one(task_id, identity.user_id)


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: str,
    body: TaskUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Partially update a task (title, description, status)."""
    return await svc.update(task_id, body.model_dump(exclude_unset=True), identity.user_id)


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Delete a task the caller owns."""
    await svc.remove(task_id, identity.user_id)
    return Response(status_code=204)
