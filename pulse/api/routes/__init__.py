from fastapi import APIRouter
from pulse.api.routes.auth import router as auth_router
from pulse.api.routes.users import router as users_router
from pulse.api.routes.team import router as team_router
from pulse.api.routes.projects import router as projects_router
from pulse.api.routes.columns import router as columns_router
from pulse.api.routes.tasks import router as tasks_router
from pulse.api.routes.activities import router as activities_router
from pulse.api.routes.health import router as health_router

# Create main API router
api_router = APIRouter(prefix="/api")

# Include routers
api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(team_router)
api_router.include_router(projects_router)
api_router.include_router(columns_router)
api_router.include_router(tasks_router)
api_router.include_router(activities_router)

__all__ = ["api_router", "health_router"]
