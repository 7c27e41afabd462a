"""
MeetSpace Backend: Abstract Identity Provider Interface
=========================================================

What:  The contract for the external identity provider: bearer token
       verification, account administration and the password grant.
How:   FirebaseIdentityProvider implements it over the Firebase Admin SDK
       and the Identity Toolkit REST API. Tests plug in an in-memory fake.
Who:   CredentialVerifier, UserService and the health route.

Failure contract:
    Implementations raise ProviderError only; SDK and transport exceptions
    never escape. Services decide how each ProviderErrorKind surfaces.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class IdentityAccount:
    """The provider-side account fields the backend reads."""

    uid: str
    email: str = ""
    display_name: str = ""


@dataclass(frozen=True)
class SessionTokens:
    """Result of a successful password grant."""

    id_token: str
    refresh_token: str
    expires_in: Optional[str] = None
    subject_id: Optional[str] = None


class IdentityProvider(ABC):
    """
    Abstract interface to the identity provider.

    Contract:
        - Every method is a single provider call, no retries
        - verify_token() returns the subject id only
        - Failures are ProviderError with a classified kind
    """

    name: str = "abstract"

    @abstractmethod
    async def verify_token(self, token: str) -> str:
        """
        Verify a bearer token and return its subject id.

        Raises:
            ProviderError(INVALID_TOKEN): expired, malformed or revoked token
        """
        ...

    @abstractmethod
    async def create_account(self, email: str, password: str) -> str:
        """
        Create an email/password account and return its subject id.

        Raises:
            ProviderError(EMAIL_ALREADY_EXISTS | INVALID_EMAIL | INVALID_ARGUMENT)
        """
        ...

    @abstractmethod
    async def get_account(self, uid: str) -> IdentityAccount:
        """Raises ProviderError(ACCOUNT_NOT_FOUND) for an unknown uid."""
        ...

    @abstractmethod
    async def update_email(self, uid: str, email: str) -> None:
        ...

    @abstractmethod
    async def delete_account(self, uid: str) -> None:
        ...

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> SessionTokens:
        """
        Exchange email and password for session tokens.

        Raises:
            ProviderError(INVALID_CREDENTIALS): wrong password or unknown email
            ProviderError(SIGN_IN_REJECTED):    any other rejection, provider message kept
            ProviderError(MISCONFIGURED):       no web API key configured
        """
        ...

    @abstractmethod
    async def generate_password_reset_link(self, email: str) -> str:
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """True when the provider handle can be built. Never raises."""
        ...
