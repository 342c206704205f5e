import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from ...dependencies import get_device_repository
from ....news.schemas.requests import DeviceRegistrationRequest
from ....news.schemas.responses import DeviceRegistrationResponse
from ....repositories.device_repository import DeviceRepository

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/register-device", response_model=DeviceRegistrationResponse)
async def register_device(
    request: DeviceRegistrationRequest,
    devices: DeviceRepository = Depends(get_device_repository)
):
    """Register or overwrite a push token and its category subscription"""
    if not request.token or not request.token.strip():
        raise HTTPException(status_code=400, detail="Token required")

    try:
        devices.upsert(
            token=request.token.strip(),
            categories=request.categories or [],
            platform=request.platform or "web",
            language=request.language,
        )
    except SQLAlchemyError as e:
        logger.error("Device registration failed", error=str(e))
        raise HTTPException(status_code=500, detail="Device registration failed")

    logger.info("Device registered", platform=request.platform or "web", categories=len(request.categories or []))
    return DeviceRegistrationResponse(success=True)


@router.delete("/devices/{token}", response_model=DeviceRegistrationResponse)
async def unregister_device(
    token: str,
    devices: DeviceRepository = Depends(get_device_repository)
):
    if not devices.delete(token):
        raise HTTPException(status_code=404, detail="Device not found")
    return DeviceRegistrationResponse(success=True)
