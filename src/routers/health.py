"""
Health check routes for the RingCentral session gateway.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from core.context import ServiceContext


def create_health_router(context: ServiceContext, app_name: str, app_version: str) -> APIRouter:
    """Create health router bound to the service context."""
    router = APIRouter(tags=["Health"])

    @router.get("/", include_in_schema=False)
    async def root_health_check() -> JSONResponse:
        """Basic health check and information endpoint."""
        return JSONResponse(
            content={
                "service": app_name,
                "version": app_version,
                "status": "healthy",
                "sessions": len(context.registry),
            }
        )

    @router.get("/health")
    async def health_check() -> JSONResponse:
        """Container health check endpoint"""
        return JSONResponse(content={"status": "healthy", "sessions": len(context.registry)})

    return router
