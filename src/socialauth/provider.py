"""Base class for provider adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping

import httpx

from .contracts import AccessGrant, Contact, Permission, Profile
from .models import OAuthConfigModel
from .strategy import OAuth2Strategy


class AbstractProvider(ABC):
    """Interface all provider adapters implement, plus shared plugin helpers."""

    config: OAuthConfigModel

    @abstractmethod
    def get_login_redirect_url(self, success_url: str) -> str:
        """Return the URL the user agent is redirected to for authentication."""

    @abstractmethod
    async def verify_response(self, request_params: Mapping[str, str]) -> Profile:
        """Complete authentication from the provider callback parameters."""

    @abstractmethod
    async def get_user_profile(self) -> Profile | None:
        """Return the authenticated user's profile."""

    @abstractmethod
    async def update_status(self, msg: str) -> httpx.Response:
        """Post a status message for the user."""

    @abstractmethod
    async def get_contact_list(self) -> list[Contact]:
        """Return the user's contacts."""

    @abstractmethod
    async def upload_image(self, message: str, file_name: str, content: bytes) -> httpx.Response:
        """Upload an image with a caption."""

    @abstractmethod
    def logout(self) -> None:
        """Forget the access grant."""

    @abstractmethod
    def set_permission(self, permission: Permission) -> None:
        """Change the permission level requested at login."""

    @abstractmethod
    async def api(
        self,
        url: str,
        method: str = "GET",
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        body: str | None = None,
    ) -> httpx.Response:
        """Make an authenticated request to a provider URL."""

    @abstractmethod
    def set_access_grant(self, grant: AccessGrant) -> None:
        """Reuse a previously obtained access grant."""

    @abstractmethod
    def get_access_grant(self) -> AccessGrant | None:
        """Return the current access grant, if any."""

    @property
    def provider_id(self) -> str:
        return self.config.id

    @property
    @abstractmethod
    def oauth_strategy(self) -> OAuth2Strategy: ...

    def get_plugins_list(self) -> list[str]:
        return list(self.config.registered_plugins)

    def get_plugins_scope(self, config: OAuthConfigModel) -> str | None:
        """Space-joined scopes contributed by registered plugins, or None."""
        scopes = [
            config.plugins_scopes[name]
            for name in config.registered_plugins
            if config.plugins_scopes.get(name)
        ]
        return " ".join(scopes) if scopes else None
