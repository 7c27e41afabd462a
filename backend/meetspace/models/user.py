"""
MeetSpace Backend: User Document
==================================

What:  The shadow profile of an identity-provider account, stored in the
       `users` collection under the account's subject id.

Lifecycle:
    1. Created by POST /users/register, or lazily by GET /users/profile for
       accounts provisioned elsewhere (social sign-in)
    2. Partially updated by PUT /users/profile and PUT /users/email
    3. Deleted by DELETE /users/profile, together with the upstream account
"""

from typing import Any, Mapping

from meetspace.models.base import DocumentModel, utc_now_iso

# Profile fields a client may set; everything else is owned by the server
PROFILE_FIELDS = ("username", "lastname", "birthdate")


class User(DocumentModel):
    """Invariant: `id` equals the verified subject id of the owning account."""

    username: str = ""
    lastname: str = ""
    birthdate: str = ""
    email: str = ""


def build_user(fields: Mapping[str, Any], subject_id: str) -> User:
    """
    Build the initial shadow document for an account.

    Missing or None string fields become "", both timestamps get the same
    instant, and `id` is always `subject_id` regardless of `fields`.
    """
    now = utc_now_iso()
    return User(
        id=subject_id,
        username=fields.get("username") or "",
        lastname=fields.get("lastname") or "",
        birthdate=fields.get("birthdate") or "",
        email=fields.get("email") or "",
        created_at=now,
        updated_at=now,
    )
