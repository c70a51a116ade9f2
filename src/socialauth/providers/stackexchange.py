"""Stack Exchange (Stack Overflow and sibling sites) OAuth2 provider adapter."""

from __future__ import annotations

import html
import logging
import secrets
from collections.abc import Mapping
from urllib.parse import urlencode

import httpx
from pydantic import ConfigDict, ValidationError

from socialauth.models import OAuthConfigModel, SocialAuthBaseModel

from ..contracts import (
    AccessGrant,
    Contact,
    NotSupportedError,
    Permission,
    Profile,
    ProviderError,
    ServerDataError,
)
from ..provider import AbstractProvider
from ..strategy import ACCESS_TOKEN_URL, AUTHORIZATION_URL, OAuth2Strategy

logger = logging.getLogger(__name__)

STACKEXCHANGE_AUTHORIZATION_URL = "https://stackexchange.com/oauth"
STACKEXCHANGE_ACCESS_TOKEN_URL = "https://stackexchange.com/oauth/access_token"
PROFILE_URL = "https://api.stackexchange.com/2.2/me"
DEFAULT_SITE = "stackoverflow"
AUTH_PERMS = ["no_expiry"]
STATE_PREFIX = "SocialAuth"


class _StackExchangeUser(SocialAuthBaseModel):
    """Subset of a Stack Exchange `user` object used to build a Profile."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    user_id: int | str | None = None
    display_name: str | None = None
    profile_image: str | None = None
    location: str | None = None


class _StackExchangeMeResponse(SocialAuthBaseModel):
    """Common wrapper returned by `/me`."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    items: list[_StackExchangeUser] = []


class StackExchangeProvider(AbstractProvider):
    """Stack Exchange provider using the shared OAuth2 strategy."""

    provider_name = "stackexchange"

    def __init__(self, config: OAuthConfigModel):
        self._state = f"{STATE_PREFIX}{secrets.token_urlsafe(16)}"
        self.permission: Permission | None = None
        if config.custom_permissions is not None:
            self.permission = Permission.CUSTOM

        endpoints = {
            AUTHORIZATION_URL: (
                f"{STACKEXCHANGE_AUTHORIZATION_URL}?{urlencode({'state': self._state})}"
            ),
            ACCESS_TOKEN_URL: STACKEXCHANGE_ACCESS_TOKEN_URL,
        }
        updates: dict[str, str] = {}
        if config.authentication_url is not None:
            endpoints[AUTHORIZATION_URL] = config.authentication_url
        else:
            updates["authentication_url"] = endpoints[AUTHORIZATION_URL]
        if config.access_token_url is not None:
            endpoints[ACCESS_TOKEN_URL] = config.access_token_url
        else:
            updates["access_token_url"] = endpoints[ACCESS_TOKEN_URL]
        self.config = config.model_copy(update=updates) if updates else config

        self._user_profile: Profile | None = None
        self._access_grant: AccessGrant | None = None
        self._strategy = OAuth2Strategy(self.config, endpoints)
        self._strategy.set_permission(self.permission)
        self._strategy.set_scope(self._build_scope())

    @property
    def state(self) -> str:
        """CSRF state value expected back on the callback."""
        return self._state

    @property
    def oauth_strategy(self) -> OAuth2Strategy:
        return self._strategy

    def get_login_redirect_url(self, success_url: str) -> str:
        return self._strategy.get_login_redirect_url(success_url)

    async def verify_response(self, request_params: Mapping[str, str]) -> Profile:
        """Verify the callback from Stack Exchange and load the user's profile.

        Raises:
            ProviderError: If the returned `state` does not match, or the code
                exchange or profile fetch fails.
        """
        if "state" in request_params:
            received = str(request_params["state"])
            if not secrets.compare_digest(received.encode(), self._state.encode()):
                raise ProviderError(
                    "invalid_state",
                    "State parameter value does not match with expected value",
                )

        logger.info(
            "Verifying the authentication response from provider",
            extra={"provider": self.provider_id},
        )
        self._user_profile = None
        self._access_grant = await self._strategy.verify_response(request_params, method="POST")
        return await self._fetch_profile()

    async def get_user_profile(self) -> Profile | None:
        if self._user_profile is None and self._access_grant is not None:
            await self._fetch_profile()
        return self._user_profile

    async def update_status(self, msg: str) -> httpx.Response:
        logger.warning("Update status is not implemented for StackExchange")
        raise NotSupportedError("Update Status is not implemented for StackExchange")

    async def get_contact_list(self) -> list[Contact]:
        logger.warning("Get contact list is not implemented for StackExchange")
        raise NotSupportedError("Get contact list is not implemented for StackExchange")

    async def upload_image(self, message: str, file_name: str, content: bytes) -> httpx.Response:
        logger.warning("Upload image is not implemented for StackExchange")
        raise NotSupportedError("Upload Image is not implemented for StackExchange")

    def logout(self) -> None:
        self._access_grant = None
        self._user_profile = None
        self._strategy.logout()

    def set_permission(self, permission: Permission) -> None:
        logger.debug("Permission requested : %s", permission.value)
        self.permission = permission
        self._strategy.set_permission(permission)
        self._strategy.set_scope(self._build_scope())

    async def api(
        self,
        url: str,
        method: str = "GET",
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        body: str | None = None,
    ) -> httpx.Response:
        logger.info("Calling api function for url : %s", url)
        try:
            return await self._strategy.execute_feed(
                url, method=method, params=params, headers=headers, body=body
            )
        except httpx.HTTPError as exc:
            raise ProviderError(
                "temporarily_unavailable",
                f"Error while making request to URL : {url}",
                status_code=503,
            ) from exc

    def set_access_grant(self, grant: AccessGrant) -> None:
        self._strategy.set_access_grant(grant)
        self._access_grant = grant

    def get_access_grant(self) -> AccessGrant | None:
        return self._access_grant

    # ── helpers ──────────────────────────────────────────────────────────────
    def _build_scope(self) -> str:
        perms = AUTH_PERMS
        if self.permission == Permission.CUSTOM and self.config.custom_permissions is not None:
            perms = [p.strip() for p in self.config.custom_permissions.split(",") if p.strip()]
        scope = " ".join(perms)
        plugin_scopes = self.get_plugins_scope(self.config)
        if plugin_scopes:
            scope = f"{scope} {plugin_scopes}" if scope else plugin_scopes
        return scope

    def _profile_url(self) -> str:
        custom = self.config.custom_properties
        if not custom or not custom.get("key"):
            raise ProviderError(
                "invalid_request",
                "Please set the 'key' custom property for the stackexchange provider",
            )
        query = {"key": custom["key"], "site": custom.get("site") or DEFAULT_SITE}
        return f"{PROFILE_URL}?{urlencode(query)}"

    async def _fetch_profile(self) -> Profile:
        profile_url = self._profile_url()
        try:
            resp = await self._strategy.execute_feed(profile_url)
        except httpx.HTTPError as exc:
            raise ProviderError(
                "temporarily_unavailable",
                f"Error while getting profile from {profile_url}",
                status_code=503,
            ) from exc

        if resp.status_code != 200:
            logger.warning(
                "StackExchange me endpoint returned non-200",
                extra={
                    "provider": self.provider_id,
                    "endpoint": "me",
                    "status_code": resp.status_code,
                },
            )
            raise ProviderError(
                "invalid_token",
                f"Error while getting profile from {profile_url}",
                status_code=resp.status_code,
            )

        raw = resp.text
        logger.debug(
            "User profile response received",
            extra={"provider": self.provider_id, "endpoint": "me", "bytes": len(raw or "")},
        )
        try:
            parsed = _StackExchangeMeResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            raise ServerDataError(f"Failed to parse the user profile json : {raw}") from exc

        fields: dict[str, str | None] = {"provider_id": self.provider_id}
        if parsed.items:
            user = parsed.items[0]
            if user.display_name is not None:
                display_name = html.unescape(user.display_name)
                fields["display_name"] = display_name
                fields["full_name"] = display_name
            if user.profile_image is not None:
                fields["profile_image_url"] = user.profile_image
            if user.user_id is not None:
                fields["validated_id"] = str(user.user_id)
            if user.location is not None:
                fields["location"] = html.unescape(user.location)
            if self.config.save_raw_response:
                fields["raw_response"] = raw

        self._user_profile = Profile(**fields)
        return self._user_profile
