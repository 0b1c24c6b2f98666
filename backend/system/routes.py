"""
System API routes for K3s Suite

Local development cluster control (minikube status/start/stop).
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from models.system_models import MinikubeActionResponse
from system.minikube import MinikubeError, MinikubeService, get_minikube_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/system", tags=["system"])


def _failure(error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": error, "details": str(exc)})


@router.get("/minikube/status")
async def minikube_status(service: MinikubeService = Depends(get_minikube_service)) -> Dict[str, Any]:
    """Get local cluster status"""
    try:
        return await service.get_status()
    except MinikubeError as e:
        return _failure("Failed to get Minikube status", e)


@router.post("/minikube/start", response_model=MinikubeActionResponse)
async def minikube_start(service: MinikubeService = Depends(get_minikube_service)):
    """Start the local cluster (blocks until minikube returns)"""
    try:
        output = await service.start()
    except MinikubeError as e:
        logger.error(f"Failed to start Minikube: {e}")
        return _failure("Failed to start Minikube", e)
    return MinikubeActionResponse(message="Minikube started", output=output)


@router.post("/minikube/stop", response_model=MinikubeActionResponse)
async def minikube_stop(service: MinikubeService = Depends(get_minikube_service)):
    """Stop the local cluster"""
    try:
        output = await service.stop()
    except MinikubeError as e:
        logger.error(f"Failed to stop Minikube: {e}")
        return _failure("Failed to stop Minikube", e)
    return MinikubeActionResponse(message="Minikube stopped", output=output)
