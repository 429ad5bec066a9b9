"""
Storefront admin API.
Entry point for the FastAPI server.
"""

from fastapi import FastAPI

from storefront_shared.config.settings import settings
from storefront_api.core import configure_cors, lifespan
from storefront_api.routers.admin import router as admin_router
from storefront_api.routers.jobs import router as jobs_router


app = FastAPI(
    title="Storefront Admin API",
    description="Catalog administration and global trash for the storefront",
    version="0.1.0",
    lifespan=lifespan,
)

configure_cors(app)

app.include_router(admin_router, prefix="/api/admin")
app.include_router(jobs_router)


# =============================================================================
# Health Check
# =============================================================================


@app.get("/api/health")
def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": "storefront-admin-api",
        "environment": settings.environment,
    }


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront_api.main:app",
        host="0.0.0.0",
        port=settings.api_port,
        reload=settings.debug,
    )
