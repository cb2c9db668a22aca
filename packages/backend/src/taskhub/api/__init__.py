"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level for the tasks router,
which is protected end to end. Users and places mix open and protected
routes, so they declare get_current_user per route instead. Health is open.
"""

from fastapi import APIRouter, Depends

from taskhub.api.health import router as health_router
from taskhub.api.places import router as places_router
from taskhub.api.tasks import router as tasks_router
from taskhub.api.users import router as users_router
from taskhub.auth.dependencies import get_current_user

# Protected routers require a valid bearer token
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api/v1")

# Open (or mixed) routes
api_router.include_router(health_router, tags=["health"])
api_router.include_router(users_router, tags=["users"])
api_router.include_router(places_router, tags=["places"])

# Protected routes — require a valid JWT
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
