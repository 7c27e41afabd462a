"""
MeetSpace Backend: User Request/Response Schemas
==================================================

What:  Bodies of the /users routes.
How:   Request fields are all optional at the schema level; presence and
       format rules live in UserService so the same checks apply to every
       caller and produce the same messages. Responses use camelCase keys,
       matching the stored documents.

The user document itself (models/user.py) is returned as-is by the profile
routes.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from meetspace.models.user import User


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    username: Optional[str] = None
    lastname: Optional[str] = None
    birthdate: Optional[str] = Field(default=None, description="Free-form, e.g. 1990-04-12")


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UpdateProfileRequest(BaseModel):
    """Only the supplied fields are changed. Unknown keys are ignored."""
    username: Optional[str] = None
    lastname: Optional[str] = None
    birthdate: Optional[str] = None


class UpdateEmailRequest(BaseModel):
    email: Optional[str] = None


class PasswordResetRequest(BaseModel):
    email: Optional[str] = None


class LoginResponse(BaseModel):
    """
    Session tokens from the password grant plus the caller's profile.

    `user` is null when no profile document matches the email.
    """
    message: str = "Login successful"
    id_token: str
    refresh_token: str
    expires_in: Optional[str] = Field(default=None, description="Token lifetime in seconds")
    user: Optional[User] = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class PasswordResetLinkResponse(BaseModel):
    message: str = "Password reset email sent"
    link: str = Field(description="Out-of-band reset link generated by the identity provider")
