from fastapi import APIRouter
from app.api.v1.endpoints import auth, projects, phases, tasks, revisions, materials, health

api_router = APIRouter()

# Deep health checks (/health/live, /health/ready)
api_router.include_router(health.router)


@api_router.get("/health", tags=["Health"])
async def health_check():
    """Simple health check endpoint for load balancer"""
    return {"status": "healthy", "service": "studiotrack-backend"}


api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(projects.router, prefix="/projects", tags=["Projects"])
api_router.include_router(phases.router, prefix="/phases", tags=["Phases"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
api_router.include_router(revisions.router, prefix="/revisions", tags=["Revisions"])
api_router.include_router(materials.router, prefix="/materials", tags=["Materials"])
