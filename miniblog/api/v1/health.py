"""Health check endpoint with database connectivity check."""

from datetime import datetime

from fastapi import APIRouter

from miniblog.api.deps import ContainerDep
from miniblog.schemas.health import HealthzResponse

router = APIRouter()


@router.get("/healthz", response_model=HealthzResponse)
def healthz(container: ContainerDep) -> HealthzResponse:
    """
    Return service health status and database connectivity.
    Used by load balancers and monitoring; no authentication required.
    """
    return HealthzResponse(
        status="Healthy",
        timestamp=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        database="connected" if container.datastore.ping() else "disconnected",
    )
