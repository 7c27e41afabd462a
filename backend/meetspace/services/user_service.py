"""
MeetSpace Backend: User Service
=================================

What:  Registration, login and the lifecycle of a user's profile document and
       identity account.
How:   Composes the IdentityProvider (accounts, tokens) with the users
       DocumentRepository (shadow profiles). Input is validated before any
       provider call. Provider failures are translated through
       PROVIDER_ERROR_MAP, with operation-specific overrides for login and
       email changes.
Who:   Called by routes/users.py through the get_user_service dependency.

Two-step operations (no shared transaction, no rollback):
    register        account → profile             TwoPhaseOutcome
    delete_profile  profile_document → account    TwoPhaseOutcome
    update_email    account email → document email
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Mapping, Optional, TypeVar

from pydantic import ValidationError

from meetspace.exceptions import (
    ConflictError,
    InternalError,
    InvalidArgumentError,
    MeetSpaceError,
    NotFoundError,
    ProviderError,
    ProviderErrorKind,
    UnauthenticatedError,
    translate_provider_error,
)
from meetspace.models.user import PROFILE_FIELDS, User, build_user
from meetspace.services.firebase_identity import firebase_identity
from meetspace.services.identity_base import IdentityProvider, SessionTokens
from meetspace.services.outcomes import TwoPhaseOutcome
from meetspace.store.repository import DocumentRepository, user_repository

logger = logging.getLogger(__name__)

T = TypeVar("T")

RESET_PASSWORD_MESSAGE = "Password reset is handled automatically by Firebase via email link."


@dataclass(frozen=True)
class LoginResult:
    tokens: SessionTokens
    user: Optional[User]


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


class UserService:
    """
    Business logic for user accounts and profiles.

    Responsibilities:
        - register() / login(): unauthenticated entry points
        - get_profile(): read with lazy provisioning for accounts created elsewhere
        - update_profile() / update_email(): partial updates
        - delete_profile(): remove document and account
        - request_password_reset() / reset_password(): reset link flow
    """

    def __init__(self, users: DocumentRepository[User], identity: IdentityProvider):
        self.users = users
        self.identity = identity

    async def _identity_call(
        self,
        step: Awaitable[T],
        resource_id: Optional[str] = None,
        **translate_kwargs: Any,
    ) -> T:
        try:
            return await step
        except ProviderError as e:
            raise translate_provider_error(
                e, resource="account", resource_id=resource_id, **translate_kwargs
            ) from e

    # ── Registration & Login ──────────────────────────────────────────────

    async def register(
        self,
        email: Optional[str],
        password: Optional[str],
        profile_fields: Optional[Mapping[str, Any]] = None,
    ) -> TwoPhaseOutcome[User]:
        """
        Create the identity account, then its profile document.

        Raises:
            InvalidArgumentError: email or password missing (no provider call)

        Returns:
            TwoPhaseOutcome with phases ("account", "profile"). A failed
            "profile" phase leaves the account in place.
        """
        if _is_blank(email) or _is_blank(password):
            raise InvalidArgumentError("Email and password are required")

        outcome: TwoPhaseOutcome[User] = TwoPhaseOutcome("register", ("account", "profile"))

        uid = await outcome.run(
            "account", self._identity_call(self.identity.create_account(email, password))
        )
        if uid is None:
            return outcome

        fields = {name: (profile_fields or {}).get(name) for name in PROFILE_FIELDS}
        fields["email"] = email

        async def write_profile() -> User:
            try:
                user = build_user(fields, uid)
            except ValidationError as e:
                first = e.errors()[0]
                field = ".".join(str(part) for part in first["loc"])
                raise InvalidArgumentError(f"{field}: {first['msg']}", field=field) from e
            return await self.users.create(user)

        outcome.value = await outcome.run("profile", write_profile())

        if outcome.failed_phase == "profile":
            logger.error(
                "Account %s created but its profile document was not written: %s",
                uid,
                outcome.error.message,
            )
        else:
            logger.info("Registered user %s", uid)
        return outcome

    async def login(self, email: Optional[str], password: Optional[str]) -> LoginResult:
        """
        Password grant, plus a best-effort lookup of the profile by email.

        Raises:
            InvalidArgumentError:  email or password missing
            UnauthenticatedError:  "Invalid credentials", or the provider's rejection message
            InternalError:         web API key not configured
        """
        if _is_blank(email) or _is_blank(password):
            raise InvalidArgumentError("Email and password are required")

        tokens = await self._identity_call(
            self.identity.sign_in_with_password(email, password),
            overrides={
                ProviderErrorKind.INVALID_CREDENTIALS: UnauthenticatedError(
                    "Invalid credentials", reason=UnauthenticatedError.CREDENTIALS
                ),
            },
        )

        user: Optional[User] = None
        try:
            matches = await self.users.query_by_field("email", email, limit=1)
            user = matches[0] if matches else None
        except MeetSpaceError as e:
            logger.warning("Profile lookup after login failed for %s: %s", email, e.message)

        return LoginResult(tokens=tokens, user=user)

    # ── Profile ───────────────────────────────────────────────────────────

    async def get_profile(self, subject_id: str) -> User:
        """
        Return the caller's profile, creating it from the account on first touch.

        Accounts created outside POST /users/register (social sign-in) have
        no document yet; one is built from the account's email and display
        name. If a concurrent request creates it first, that one is returned.
        """
        user = await self.users.get_by_id(subject_id)
        if user is not None:
            return user

        account = await self._identity_call(
            self.identity.get_account(subject_id), resource_id=subject_id
        )
        username = account.display_name or account.email.split("@")[0]
        new_user = build_user({"email": account.email, "username": username}, subject_id)

        try:
            created = await self.users.create(new_user)
        except ConflictError:
            logger.info("Profile %s was provisioned concurrently; re-reading", subject_id)
            return await self.users.get_or_fail(subject_id)

        logger.info("Provisioned profile document for %s", subject_id)
        return created

    async def update_profile(self, subject_id: str, partial: Mapping[str, Any]) -> User:
        """Merge username, lastname and birthdate; other keys are ignored."""
        changes = {
            name: partial[name]
            for name in PROFILE_FIELDS
            if name in partial and partial[name] is not None
        }
        for name, value in changes.items():
            if not isinstance(value, str):
                raise InvalidArgumentError(f"{name} must be a string", field=name)
        return await self.users.update(subject_id, changes)

    async def update_email(self, subject_id: str, new_email: Any) -> User:
        """
        Change the account email, then mirror it into the profile document.

        Raises:
            InvalidArgumentError: empty or non-string email, or "Invalid email"
            ConflictError:        "Email already in use"
            InternalError:        any other provider failure
        """
        if _is_blank(new_email):
            raise InvalidArgumentError("New email is required", field="email")

        await self._identity_call(
            self.identity.update_email(subject_id, new_email),
            resource_id=subject_id,
            overrides={
                ProviderErrorKind.EMAIL_ALREADY_EXISTS: ConflictError("Email already in use"),
                ProviderErrorKind.INVALID_EMAIL: InvalidArgumentError(
                    "Invalid email", field="email"
                ),
            },
            default=InternalError,
        )
        return await self.users.update(subject_id, {"email": new_email})

    async def delete_profile(self, subject_id: str) -> TwoPhaseOutcome[None]:
        """
        Delete the profile document, then the identity account.

        A missing document is not an error; the account is still deleted.
        """
        outcome: TwoPhaseOutcome[None] = TwoPhaseOutcome(
            "delete_profile", ("profile_document", "account")
        )

        async def delete_document() -> None:
            try:
                await self.users.delete(subject_id)
            except NotFoundError:
                logger.info("No profile document for %s; deleting account only", subject_id)

        await outcome.run("profile_document", delete_document())
        await outcome.run(
            "account",
            self._identity_call(self.identity.delete_account(subject_id), resource_id=subject_id),
        )

        if outcome.succeeded:
            logger.info("Deleted user %s", subject_id)
        elif outcome.failed_phase == "account":
            logger.error(
                "Profile document of %s deleted but the account was not: %s",
                subject_id,
                outcome.error.message,
            )
        return outcome

    # ── Password Reset ────────────────────────────────────────────────────

    async def request_password_reset(self, email: Optional[str]) -> str:
        """Return the provider's reset link. Sending the email is the provider's job."""
        if _is_blank(email):
            raise InvalidArgumentError("Email is required", field="email")
        return await self._identity_call(self.identity.generate_password_reset_link(email))

    async def reset_password(self) -> None:
        raise InvalidArgumentError(RESET_PASSWORD_MESSAGE)


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService(user_repository, firebase_identity)


def get_user_service() -> UserService:
    """Dependency provider for routes."""
    return user_service
