"""API route aggregation.

All routers registered here get mounted in main.py under /api.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. authenticate runs before every route in the
projects and tasks routers, ahead of the handler's own dependencies, so
no protected handler can run without a validated Principal. Health and
auth routers are open (the auth router protects /me itself).
"""

from fastapi import APIRouter, Depends

from tasktracker.api.auth import router as auth_router
from tasktracker.api.health import router as health_router
from tasktracker.api.projects import router as projects_router
from tasktracker.api.tasks import router as tasks_router
from tasktracker.auth.dependencies import authenticate

# All protected routers require authentication
_auth = [Depends(authenticate)]

api_router = APIRouter(prefix="/api")

# Open routes: no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes: require a valid bearer token
api_router.include_router(projects_router, tags=["projects"], dependencies=_auth)
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
