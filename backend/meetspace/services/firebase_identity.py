"""
MeetSpace Backend: Firebase Identity Provider
===============================================

What:  IdentityProvider implementation over Firebase Authentication.
How:   Account administration and token verification go through the
       Firebase Admin SDK. Its calls are blocking, so each runs in
       Starlette's thread pool. The password grant has no Admin SDK
       equivalent and is a POST to the Identity Toolkit REST endpoint
       `accounts:signInWithPassword` through httpx.
Who:   Singleton `firebase_identity`, used by the default CredentialVerifier
       and UserService.

Error Classification:
    Firebase Admin SDK / httpx exception      → ProviderErrorKind
    ─────────────────────────────────────────────────────────────
    InvalidIdTokenError (expired, revoked)    → INVALID_TOKEN
    UserDisabledError                         → INVALID_TOKEN
    EmailAlreadyExistsError                   → EMAIL_ALREADY_EXISTS
    UserNotFoundError                         → ACCOUNT_NOT_FOUND
    InvalidArgumentError / ValueError (email) → INVALID_EMAIL
    InvalidArgumentError / ValueError (other) → INVALID_ARGUMENT
    ValueError naming project id, credential
    or certificate (deployment fault)         → MISCONFIGURED
    CertificateFetchError, Unavailable,
    DeadlineExceeded, httpx transport errors  → UNAVAILABLE
    DefaultCredentialsError, missing file     → MISCONFIGURED
    anything else                             → UNKNOWN

Sign-in rejection codes:
    INVALID_PASSWORD, EMAIL_NOT_FOUND,
    INVALID_LOGIN_CREDENTIALS                 → INVALID_CREDENTIALS
    any other error message                   → SIGN_IN_REJECTED (message kept)
"""

import logging
from typing import Any, Dict, Optional

import httpx
from firebase_admin import auth
from firebase_admin import exceptions as firebase_exceptions
from google.auth.exceptions import DefaultCredentialsError
from starlette.concurrency import run_in_threadpool

from meetspace.config import settings
from meetspace.exceptions import ProviderError, ProviderErrorKind
from meetspace.providers.firebase import get_auth_client, get_firebase_app
from meetspace.services.identity_base import IdentityAccount, IdentityProvider, SessionTokens

logger = logging.getLogger(__name__)

INVALID_CREDENTIAL_CODES = frozenset(
    {"INVALID_PASSWORD", "EMAIL_NOT_FOUND", "INVALID_LOGIN_CREDENTIALS"}
)

# Kinds that are ordinary client outcomes and not worth an ERROR log line
_EXPECTED_KINDS = frozenset(
    {
        ProviderErrorKind.INVALID_TOKEN,
        ProviderErrorKind.INVALID_CREDENTIALS,
        ProviderErrorKind.SIGN_IN_REJECTED,
        ProviderErrorKind.EMAIL_ALREADY_EXISTS,
        ProviderErrorKind.INVALID_EMAIL,
        ProviderErrorKind.INVALID_ARGUMENT,
        ProviderErrorKind.ACCOUNT_NOT_FOUND,
    }
)


# Fragments of the ValueError messages the Admin SDK raises for a bad
# deployment (project id, credentials) rather than a bad argument
_CONFIGURATION_FAULT_MARKERS = (
    "project id",
    "credential",
    "certificate",
    "service account",
    "firebase app",
)


def _is_configuration_fault(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in _CONFIGURATION_FAULT_MARKERS)


def _argument_kind(message: str) -> ProviderErrorKind:
    if "email" in message.lower():
        return ProviderErrorKind.INVALID_EMAIL
    return ProviderErrorKind.INVALID_ARGUMENT


def classify_firebase_error(exc: Exception) -> ProviderError:
    """Map a Firebase Admin SDK exception to a ProviderError."""
    if isinstance(exc, ProviderError):
        return exc

    message = str(exc) or type(exc).__name__
    code = getattr(exc, "code", None)
    code = str(code) if code else None

    # Token errors subclass InvalidArgumentError, so they are checked first
    if isinstance(exc, (auth.InvalidIdTokenError, auth.UserDisabledError)):
        return ProviderError(ProviderErrorKind.INVALID_TOKEN, message, code=code)
    if isinstance(exc, auth.CertificateFetchError):
        return ProviderError(ProviderErrorKind.UNAVAILABLE, message, code=code)
    if isinstance(exc, auth.EmailAlreadyExistsError):
        return ProviderError(ProviderErrorKind.EMAIL_ALREADY_EXISTS, message, code=code)
    if isinstance(exc, auth.UserNotFoundError):
        return ProviderError(ProviderErrorKind.ACCOUNT_NOT_FOUND, message, code=code)
    if isinstance(exc, firebase_exceptions.InvalidArgumentError):
        return ProviderError(_argument_kind(message), message, code=code)
    if isinstance(exc, ValueError):
        # The SDK validates arguments locally with ValueError, and reports
        # missing project ids or broken credentials the same way
        if _is_configuration_fault(message):
            return ProviderError(ProviderErrorKind.MISCONFIGURED, message, code=code)
        return ProviderError(_argument_kind(message), message, code=code)
    if isinstance(
        exc,
        (
            firebase_exceptions.UnavailableError,
            firebase_exceptions.DeadlineExceededError,
            ConnectionError,
            TimeoutError,
        ),
    ):
        return ProviderError(ProviderErrorKind.UNAVAILABLE, message, code=code)
    if isinstance(exc, (DefaultCredentialsError, FileNotFoundError)):
        return ProviderError(ProviderErrorKind.MISCONFIGURED, message, code=code)
    return ProviderError(ProviderErrorKind.UNKNOWN, message, code=code)


def classify_sign_in_rejection(payload: Any) -> ProviderError:
    """
    Classify the error body of a rejected signInWithPassword call.

    The provider's message is either a bare code ("INVALID_PASSWORD") or a
    code followed by an explanation ("TOO_MANY_ATTEMPTS_TRY_LATER : ...").
    """
    message = ""
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            message = str(error.get("message") or "")

    code = message.split(":", 1)[0].strip()
    if code in INVALID_CREDENTIAL_CODES:
        return ProviderError(ProviderErrorKind.INVALID_CREDENTIALS, message, code=code)
    return ProviderError(
        ProviderErrorKind.SIGN_IN_REJECTED,
        message or "Unable to login with email/password",
        code=code or None,
    )


class FirebaseIdentityProvider(IdentityProvider):
    """
    Firebase Authentication adapter.

    Constructing it never touches credentials; the Firebase app is built on
    the first call through the accessor in providers.firebase.

    Args:
        http_transport: Optional httpx transport for the sign-in call
                        (httpx.MockTransport in tests).
    """

    name = "firebase"

    def __init__(self, http_transport: Optional[httpx.AsyncBaseTransport] = None):
        self._http_transport = http_transport

    async def _call(self, operation: str, *args: Any, **kwargs: Any) -> Any:
        """Run one blocking firebase_admin.auth function in the thread pool."""

        def invoke():
            return getattr(get_auth_client(), operation)(*args, **kwargs)

        try:
            return await run_in_threadpool(invoke)
        except Exception as exc:
            error = classify_firebase_error(exc)
            if error.kind not in _EXPECTED_KINDS:
                logger.error(
                    "Firebase auth %s failed (%s): %s", operation, error.kind.value, error.message
                )
            raise error from exc

    # ── Token Verification ────────────────────────────────────────────────

    async def verify_token(self, token: str) -> str:
        try:
            claims = await self._call("verify_id_token", token)
        except ProviderError as e:
            # A malformed token string is reported by the SDK as ValueError;
            # MISCONFIGURED and the rest pass through and were logged by _call
            if e.kind in (ProviderErrorKind.INVALID_ARGUMENT, ProviderErrorKind.INVALID_EMAIL):
                raise ProviderError(ProviderErrorKind.INVALID_TOKEN, e.message, code=e.code) from e
            raise
        return claims["uid"]

    # ── Account Administration ────────────────────────────────────────────

    async def create_account(self, email: str, password: str) -> str:
        record = await self._call("create_user", email=email, password=password)
        logger.info("Created identity account %s", record.uid)
        return record.uid

    async def get_account(self, uid: str) -> IdentityAccount:
        record = await self._call("get_user", uid)
        return IdentityAccount(
            uid=record.uid,
            email=record.email or "",
            display_name=record.display_name or "",
        )

    async def update_email(self, uid: str, email: str) -> None:
        await self._call("update_user", uid, email=email)
        logger.info("Updated email of identity account %s", uid)

    async def delete_account(self, uid: str) -> None:
        await self._call("delete_user", uid)
        logger.info("Deleted identity account %s", uid)

    async def generate_password_reset_link(self, email: str) -> str:
        return await self._call("generate_password_reset_link", email)

    # ── Password Grant ────────────────────────────────────────────────────

    async def sign_in_with_password(self, email: str, password: str) -> SessionTokens:
        api_key = settings.firebase_web_api_key
        if not api_key:
            raise ProviderError(ProviderErrorKind.MISCONFIGURED, "Missing FIREBASE_WEB_API_KEY")

        url = f"{settings.identity_toolkit_url.rstrip('/')}/accounts:signInWithPassword"
        body: Dict[str, Any] = {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        }

        try:
            async with httpx.AsyncClient(
                timeout=settings.identity_http_timeout,
                transport=self._http_transport,
            ) as client:
                response = await client.post(url, params={"key": api_key}, json=body)
        except httpx.TransportError as e:
            logger.error("Identity Toolkit sign-in unreachable: %s", str(e))
            raise ProviderError(
                ProviderErrorKind.UNAVAILABLE, str(e) or type(e).__name__
            ) from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.is_success:
            error = classify_sign_in_rejection(payload)
            logger.warning(
                "Sign-in rejected (status=%d, code=%s)", response.status_code, error.code
            )
            raise error

        if not isinstance(payload, dict) or "idToken" not in payload:
            raise ProviderError(
                ProviderErrorKind.UNKNOWN, "Malformed sign-in response from identity provider"
            )

        return SessionTokens(
            id_token=payload["idToken"],
            refresh_token=payload.get("refreshToken", ""),
            expires_in=payload.get("expiresIn"),
            subject_id=payload.get("localId"),
        )

    # ── Health ────────────────────────────────────────────────────────────

    async def health_check(self) -> bool:
        try:
            await run_in_threadpool(get_firebase_app)
            return True
        except Exception as e:
            logger.warning("Firebase health check failed: %s", str(e))
            return False


# ── Singleton Instance ────────────────────────────────────────────────────
firebase_identity = FirebaseIdentityProvider()


def get_identity_provider() -> IdentityProvider:
    """Dependency provider for the health route."""
    return firebase_identity
