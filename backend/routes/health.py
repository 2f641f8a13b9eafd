"""
Health check endpoint.
"""
from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, status

from config import settings
from deps import get_repository
from services.order_repository import OrderRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(repo: OrderRepository = Depends(get_repository)):
    """
    Liveness check.

    The order service needs an operator credential, so it is not probed
    here; the configured upstream and cache state are reported instead.
    """
    return {
        "status": "healthy",
        "environment": settings.environment,
        "orderService": repo.client.base_url,
        "ordersCached": len(repo.list()),
        "cacheLoaded": repo.loaded,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
