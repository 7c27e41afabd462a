"""
MeetSpace Backend: Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the whole suite.
How:   Every test runs against a fresh InMemoryBackend and a
       FakeIdentityProvider; the HTTP client swaps them into the app through
       FastAPI dependency overrides. Nothing touches the network or Firebase.

Fixture Hierarchy (all function-scoped):
    identity ───────────┐
    backend ──┬─ user_repo ─── user_service ──┐
              └─ meeting_repo ─ meeting_service ─┴── test_client

Tokens issued by the fake are "token-<uid>"; use bearer(uid) for headers.
"""

import os

# Settings are read at import time, so the environment comes first
os.environ["DOCUMENT_STORE"] = "memory"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["FIREBASE_WEB_API_KEY"] = "test-key-not-real"
os.environ["ENFORCE_MEETING_OWNERSHIP"] = "false"

from typing import Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from meetspace.exceptions import ProviderError, ProviderErrorKind
from meetspace.models.meeting import Meeting
from meetspace.models.user import User
from meetspace.services.identity_base import IdentityAccount, IdentityProvider, SessionTokens
from meetspace.services.meeting_service import MeetingService
from meetspace.services.user_service import UserService
from meetspace.store.memory import InMemoryBackend
from meetspace.store.repository import DocumentRepository


# ══════════════════════════════════════════════════════════════════════════
# Fake Identity Provider
# ══════════════════════════════════════════════════════════════════════════

class FakeIdentityProvider(IdentityProvider):
    """
    In-memory accounts with the same failure kinds as the Firebase adapter.

    `calls` records every operation name in order. Put a ProviderError in
    `failures[operation]` to make that operation fail.
    """

    name = "fake"

    def __init__(self):
        self.accounts: Dict[str, Dict[str, str]] = {}
        self.calls: List[str] = []
        self.failures: Dict[str, ProviderError] = {}
        self.healthy = True
        self._next_uid = 1

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.failures:
            raise self.failures[operation]

    def _uid_for_email(self, email: str) -> Optional[str]:
        for uid, account in self.accounts.items():
            if account["email"] == email:
                return uid
        return None

    def _check_email(self, email: str) -> None:
        if "@" not in email:
            raise ProviderError(
                ProviderErrorKind.INVALID_EMAIL,
                "The email address is improperly formatted.",
                code="INVALID_EMAIL",
            )
        if self._uid_for_email(email) is not None:
            raise ProviderError(
                ProviderErrorKind.EMAIL_ALREADY_EXISTS,
                "The user with the provided email already exists (EMAIL_EXISTS).",
                code="ALREADY_EXISTS",
            )

    def add_account(
        self, uid: str, email: str, password: str = "secret123", display_name: str = ""
    ) -> str:
        self.accounts[uid] = {"email": email, "password": password, "display_name": display_name}
        return uid

    async def verify_token(self, token: str) -> str:
        self._enter("verify_token")
        uid = token[len("token-"):] if token.startswith("token-") else None
        if uid and uid in self.accounts:
            return uid
        raise ProviderError(ProviderErrorKind.INVALID_TOKEN, "Firebase ID token has expired.")

    async def create_account(self, email: str, password: str) -> str:
        self._enter("create_account")
        self._check_email(email)
        uid = f"uid-{self._next_uid}"
        self._next_uid += 1
        return self.add_account(uid, email, password)

    async def get_account(self, uid: str) -> IdentityAccount:
        self._enter("get_account")
        account = self.accounts.get(uid)
        if account is None:
            raise ProviderError(ProviderErrorKind.ACCOUNT_NOT_FOUND, f"No user record for {uid}")
        return IdentityAccount(
            uid=uid, email=account["email"], display_name=account["display_name"]
        )

    async def update_email(self, uid: str, email: str) -> None:
        self._enter("update_email")
        self._check_email(email)
        if uid not in self.accounts:
            raise ProviderError(ProviderErrorKind.ACCOUNT_NOT_FOUND, f"No user record for {uid}")
        self.accounts[uid]["email"] = email

    async def delete_account(self, uid: str) -> None:
        self._enter("delete_account")
        if self.accounts.pop(uid, None) is None:
            raise ProviderError(ProviderErrorKind.ACCOUNT_NOT_FOUND, f"No user record for {uid}")

    async def sign_in_with_password(self, email: str, password: str) -> SessionTokens:
        self._enter("sign_in_with_password")
        uid = self._uid_for_email(email)
        if uid is None:
            raise ProviderError(ProviderErrorKind.INVALID_CREDENTIALS, "EMAIL_NOT_FOUND")
        if self.accounts[uid]["password"] != password:
            raise ProviderError(ProviderErrorKind.INVALID_CREDENTIALS, "INVALID_PASSWORD")
        return SessionTokens(
            id_token=f"token-{uid}",
            refresh_token=f"refresh-{uid}",
            expires_in="3600",
            subject_id=uid,
        )

    async def generate_password_reset_link(self, email: str) -> str:
        self._enter("generate_password_reset_link")
        if self._uid_for_email(email) is None:
            raise ProviderError(ProviderErrorKind.ACCOUNT_NOT_FOUND, "EMAIL_NOT_FOUND")
        return f"https://meetspace.test/reset?oobCode=code-for-{email}"

    async def health_check(self) -> bool:
        return self.healthy


def bearer(uid: str) -> Dict[str, str]:
    """Authorization header accepted by FakeIdentityProvider for `uid`."""
    return {"Authorization": f"Bearer token-{uid}"}


# ══════════════════════════════════════════════════════════════════════════
# Service Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def identity():
    return FakeIdentityProvider()


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def user_repo(backend):
    return DocumentRepository("users", User, backend, resource="user")


@pytest.fixture
def meeting_repo(backend):
    return DocumentRepository("meetings", Meeting, backend, resource="meeting")


@pytest.fixture
def user_service(user_repo, identity):
    return UserService(user_repo, identity)


@pytest.fixture
def meeting_service(meeting_repo):
    return MeetingService(meeting_repo, enforce_ownership=False)


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(identity, backend, user_service, meeting_service):
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from meetspace.main import app
    from meetspace.middleware.auth_gate import get_credential_verifier
    from meetspace.routes.health import get_document_backend
    from meetspace.services.credential_verifier import CredentialVerifier
    from meetspace.services.firebase_identity import get_identity_provider
    from meetspace.services.meeting_service import get_meeting_service
    from meetspace.services.user_service import get_user_service

    verifier = CredentialVerifier(identity)
    app.dependency_overrides[get_credential_verifier] = lambda: verifier
    app.dependency_overrides[get_user_service] = lambda: user_service
    app.dependency_overrides[get_meeting_service] = lambda: meeting_service
    app.dependency_overrides[get_identity_provider] = lambda: identity
    app.dependency_overrides[get_document_backend] = lambda: backend

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
