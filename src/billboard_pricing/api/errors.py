"""
Translation of engine errors into HTTP errors.
"""
import logging

from fastapi import HTTPException

from ..engine.errors import (
    ExternalIOFailure,
    NoZonesConfiguredError,
    PricingError,
    UnknownSizeError,
    UnknownZoneError,
    UnpricedItemError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def to_http_error(exc: PricingError) -> HTTPException:
    if isinstance(exc, (UnknownZoneError, UnknownSizeError)):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, UnpricedItemError):
        return HTTPException(
            status_code=422,
            detail={"error": str(exc), "billboard_ids": exc.billboard_ids},
        )
    if isinstance(exc, NoZonesConfiguredError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, ExternalIOFailure):
        logger.error("Upstream failure: %s", exc)
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))
