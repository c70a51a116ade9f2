"""Contracts and shared types for the socialauth provider stack."""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

from socialauth.models import SocialAuthBaseModel


class ProviderError(Exception):
    """Standardized provider error with HTTP-style status information."""

    def __init__(self, error: str, description: str | None = None, status_code: int = 400):
        super().__init__(description or error)
        self.error = error
        self.description = description
        self.status_code = status_code


class ServerDataError(ProviderError):
    """The provider answered with data that could not be parsed."""

    def __init__(self, description: str | None = None, status_code: int = 502):
        super().__init__("server_data", description, status_code=status_code)


class AccessTokenExpiredError(ProviderError):
    """An access grant past its expiry was supplied."""

    def __init__(self, description: str | None = None):
        super().__init__("token_expired", description, status_code=401)


class NotSupportedError(ProviderError):
    """The provider does not implement the requested feature."""

    def __init__(self, description: str | None = None):
        super().__init__("not_supported", description, status_code=501)


class Permission(str, Enum):
    """Permission level requested from a provider."""

    AUTHENTICATE_ONLY = "authenticate_only"
    ALL = "all"
    DEFAULT = "default"
    CUSTOM = "custom"


class AccessGrant(SocialAuthBaseModel):
    """Result of exchanging an authorization code with a provider."""

    access_token: str
    refresh_token: str | None = None
    expires_at: float | None = None
    token_type: str = "Bearer"
    scopes: list[str] | None = None
    provider_id: str | None = None
    permission: Permission | None = None
    attributes: dict[str, Any] = {}

    def is_expired(self, now: float | None = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at <= (time.time() if now is None else now)


class Profile(SocialAuthBaseModel):
    """Normalized user profile returned by providers.

    Every field is optional; providers fill what their profile API exposes.
    """

    validated_id: str | None = None
    provider_id: str | None = None
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    full_name: str | None = None
    display_name: str | None = None
    location: str | None = None
    country: str | None = None
    language: str | None = None
    gender: str | None = None
    dob: str | None = None
    profile_image_url: str | None = None
    raw_response: str | None = None


class Contact(SocialAuthBaseModel):
    """Normalized contact entry."""

    id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    display_name: str | None = None
    email: str | None = None
    other_emails: list[str] | None = None
    profile_url: str | None = None
    profile_image_url: str | None = None
    raw_response: str | None = None


__all__ = [
    "AccessGrant",
    "AccessTokenExpiredError",
    "Contact",
    "NotSupportedError",
    "Permission",
    "Profile",
    "ProviderError",
    "ServerDataError",
]
