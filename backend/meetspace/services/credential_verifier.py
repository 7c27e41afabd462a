"""
MeetSpace Backend: Credential Verifier
========================================

What:  Turns a raw Authorization header value into a verified subject id.
How:   Checks the Bearer scheme, strips it, and asks the identity provider
       to verify the token. One provider call, no retry.
Who:   The access gate (middleware/auth_gate.py).

Outcomes:
    header absent, empty, or not "Bearer <token>"  → UnauthenticatedError(reason=missing)
    provider rejects the token                     → UnauthenticatedError(reason=invalid)
    provider accepts the token                     → subject id (uid)
"""

import logging
from typing import Optional

from meetspace.exceptions import ProviderError, ProviderErrorKind, UnauthenticatedError
from meetspace.services.identity_base import IdentityProvider

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

MISSING_MESSAGE = "No token provided"
INVALID_MESSAGE = "Token invalid or expired"


class CredentialVerifier:

    def __init__(self, identity: IdentityProvider):
        self.identity = identity

    @staticmethod
    def extract_token(raw_header: Optional[str]) -> Optional[str]:
        """Return the token of a `Bearer <token>` header, or None."""
        if not raw_header or not raw_header.startswith(BEARER_PREFIX):
            return None
        token = raw_header[len(BEARER_PREFIX):].strip()
        return token or None

    async def verify(self, raw_header: Optional[str]) -> str:
        token = self.extract_token(raw_header)
        if token is None:
            raise UnauthenticatedError(MISSING_MESSAGE, reason=UnauthenticatedError.MISSING)

        try:
            return await self.identity.verify_token(token)
        except ProviderError as e:
            # Every provider failure is a rejection from the caller's point of view
            if e.kind is not ProviderErrorKind.INVALID_TOKEN:
                logger.error("Token verification failed (%s): %s", e.kind.value, e.message)
            raise UnauthenticatedError(
                INVALID_MESSAGE,
                reason=UnauthenticatedError.INVALID,
                context={"provider_kind": e.kind.value},
            ) from e
