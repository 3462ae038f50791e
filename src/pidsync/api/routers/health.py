"""
Health check endpoints.
"""

from fastapi import APIRouter

from ...shared import get_database
from ...shared.models.base import utcnow
from ..dependencies import get_shape_catalog
from ..models import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check():
    """
    Health check endpoint.

    Returns:
        System health status
    """
    services = {}

    try:
        db_status = get_database().status()
        if not db_status["connected"]:
            services["database"] = "idle"
        else:
            services["database"] = "connected" if db_status["healthy"] else "error: unreachable"
    except Exception as e:
        services["database"] = f"error: {str(e)}"

    try:
        services["shape_catalog"] = f"{len(get_shape_catalog())} shapes"
    except Exception as e:
        services["shape_catalog"] = f"error: {str(e)}"

    error_services = [name for name, status in services.items() if "error" in status]
    overall_status = "unhealthy" if error_services else "healthy"

    return HealthResponse(
        status=overall_status,
        services=services,
        timestamp=utcnow().isoformat().replace("+00:00", "Z"),
    )
