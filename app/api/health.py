"""Health check endpoint."""

from fastapi import APIRouter, Depends

from app.core.config import get_settings
from app.core.exceptions import StoreUnavailable
from app.services.transaction_service import TransactionService, get_transaction_service

router = APIRouter(tags=["Health"])
settings = get_settings()


@router.get("/health")
def health_check(service: TransactionService = Depends(get_transaction_service)):
    """Service health check endpoint."""
    try:
        count = service.data_count()
    except StoreUnavailable:
        return {
            "status": "degraded",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "dataLoaded": False,
            "dataCount": 0,
        }
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "dataLoaded": service.aggregator.is_warm,
        "dataCount": count,
    }
