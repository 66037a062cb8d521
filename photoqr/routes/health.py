from fastapi import APIRouter

from photoqr.models.upload import HealthStatus

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthStatus)
async def health() -> HealthStatus:
    return HealthStatus(ok=True)
