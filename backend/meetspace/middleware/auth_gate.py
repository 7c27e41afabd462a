"""
MeetSpace Backend: Access Gate
================================

What:  FastAPI dependency that guards every protected route.
How:   Hands the raw Authorization header to the CredentialVerifier. On
       success the subject id is stored on request.state.subject_id and
       returned to the route handler. On failure the UnauthenticatedError
       propagates to the global handler (401) and the route never runs.
Who:   Declared as `subject_id: str = Depends(require_subject)` on routes.

Failure messages:
    missing header or scheme  → 401 "No token provided"
    rejected token            → 401 "Token invalid or expired"
"""

import logging

from fastapi import Depends, Request

from meetspace.exceptions import UnauthenticatedError
from meetspace.middleware.request_id import request_id_var
from meetspace.services.credential_verifier import CredentialVerifier
from meetspace.services.firebase_identity import firebase_identity

logger = logging.getLogger(__name__)

_credential_verifier = CredentialVerifier(firebase_identity)


def get_credential_verifier() -> CredentialVerifier:
    """Dependency provider; overridden in tests with a fake identity provider."""
    return _credential_verifier


async def require_subject(
    request: Request,
    verifier: CredentialVerifier = Depends(get_credential_verifier),
) -> str:
    try:
        subject_id = await verifier.verify(request.headers.get("Authorization"))
    except UnauthenticatedError as e:
        logger.warning(
            "[%s] Access denied to %s %s: %s",
            request_id_var.get(""),
            request.method,
            request.url.path,
            e.reason,
        )
        raise

    request.state.subject_id = subject_id
    return subject_id
