"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from storefront.api.dependencies import ContainerDep
from storefront.api.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(container: ContainerDep) -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    return HealthResponse(
        status="healthy",
        service="storefront-api",
        version=container.settings.api_version,
    )


@router.get("/ready")
async def readiness_check(container: ContainerDep) -> JSONResponse:
    """Check if the document store is reachable.

    Returns:
        200 when ready, 503 otherwise.
    """
    if await container.store.ping():
        return JSONResponse(content={"status": "ready"})
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "unavailable"},
    )
