"""
MeetSpace Backend: Health Check Route
=======================================

What:  Liveness and dependency status for probes and monitoring.
How:   Asks the document backend and the identity provider for their
       lightweight health checks. Always answers 200; the body says what
       is wrong.

Status levels:
    healthy    store and identity provider reachable
    degraded   identity provider unavailable (meetings still readable)
    unhealthy  document store unreachable
"""

import logging
import time

from fastapi import APIRouter, Depends

from meetspace import __version__
from meetspace.schemas.common import HealthResponse
from meetspace.services.firebase_identity import get_identity_provider
from meetspace.services.identity_base import IdentityProvider
from meetspace.store.backend import DocumentBackend
from meetspace.store.repository import document_backend

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


def get_document_backend() -> DocumentBackend:
    return document_backend


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(
    backend: DocumentBackend = Depends(get_document_backend),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> HealthResponse:
    overall = "healthy"

    store_ok = await backend.health_check()
    if not store_ok:
        overall = "unhealthy"
        logger.warning("Health check: %s document store unreachable", backend.name)

    identity_ok = await identity.health_check()
    if not identity_ok and overall == "healthy":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        document_store=f"{backend.name}:{'ok' if store_ok else 'unreachable'}",
        identity_provider="available" if identity_ok else "unavailable",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
