"""OAuth2 authorization-code strategy shared by provider adapters.

Providers configure endpoints and scopes; the strategy owns the protocol
mechanics: building the login redirect, exchanging the returned code for an
access grant, and signing API calls with the granted token.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qsl, urlencode

import httpx

from .contracts import (
    AccessGrant,
    AccessTokenExpiredError,
    Permission,
    ProviderError,
    ServerDataError,
)
from .http import create_http_client
from .models import OAuthConfigModel

logger = logging.getLogger(__name__)

AUTHORIZATION_URL = "authorization_url"
ACCESS_TOKEN_URL = "access_token_url"

# Token response fields with a dedicated AccessGrant field; the rest go to `attributes`.
_TOKEN_FIELDS = {"access_token", "refresh_token", "expires", "expires_in", "scope", "token_type"}


class OAuth2Strategy:
    """OAuth2 authorization-code flow bound to one provider's endpoints."""

    def __init__(self, config: OAuthConfigModel, endpoints: Mapping[str, str]):
        missing = [
            name for name in (AUTHORIZATION_URL, ACCESS_TOKEN_URL) if not endpoints.get(name)
        ]
        if missing:
            raise ValueError(f"Missing OAuth2 endpoints: {', '.join(missing)}")
        self.config = config
        self.endpoints = dict(endpoints)
        self.permission: Permission | None = None
        self.scope: str | None = None
        self._success_url: str | None = None
        self._access_grant: AccessGrant | None = None

    def set_permission(self, permission: Permission | None) -> None:
        self.permission = permission

    def set_scope(self, scope: str | None) -> None:
        self.scope = scope

    def set_access_grant(self, grant: AccessGrant) -> None:
        if grant.is_expired():
            raise AccessTokenExpiredError("Access token has expired, please authenticate again")
        self._access_grant = grant

    def get_access_grant(self) -> AccessGrant | None:
        return self._access_grant

    def logout(self) -> None:
        self._access_grant = None

    def get_login_redirect_url(self, success_url: str) -> str:
        """Return the provider URL the user agent should be redirected to."""
        self._success_url = success_url
        params: list[tuple[str, str]] = [
            ("client_id", self.config.consumer_key),
            ("response_type", "code"),
            ("redirect_uri", success_url),
        ]
        if self.scope:
            params.append(("scope", self.scope))
        auth_url = self.endpoints[AUTHORIZATION_URL]
        separator = "&" if "?" in auth_url else "?"
        return f"{auth_url}{separator}{urlencode(params)}"

    async def verify_response(
        self, request_params: Mapping[str, str], method: str = "POST"
    ) -> AccessGrant:
        """Exchange the authorization code found in the callback parameters."""
        error = request_params.get("error")
        if error:
            raise ProviderError(
                error,
                request_params.get("error_description")
                or "Authorization was denied by the provider",
            )

        code = request_params.get("code")
        if not code:
            raise ProviderError(
                "invalid_request", "Verification code is missing from the request parameters"
            )

        payload: dict[str, str] = {
            "client_id": self.config.consumer_key,
            "client_secret": self.config.consumer_secret,
            "code": code,
            "grant_type": "authorization_code",
        }
        if self._success_url:
            payload["redirect_uri"] = self._success_url

        token_url = self.endpoints[ACCESS_TOKEN_URL]
        headers = {"Accept": "application/json"}
        try:
            async with create_http_client() as client:
                if method.upper() == "GET":
                    resp = await client.get(token_url, params=payload, headers=headers)
                else:
                    resp = await client.post(
                        token_url,
                        data=payload,
                        headers={**headers, "Content-Type": "application/x-www-form-urlencoded"},
                    )
        except httpx.HTTPError as exc:
            raise ProviderError(
                "temporarily_unavailable",
                f"Error while requesting access token from {token_url}",
                status_code=503,
            ) from exc

        grant = self._parse_token_response(resp)
        self._access_grant = grant
        return grant

    async def execute_feed(
        self,
        url: str,
        method: str = "GET",
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        body: str | None = None,
    ) -> httpx.Response:
        """Call a provider API URL with the granted access token attached."""
        if self._access_grant is None:
            raise ProviderError(
                "invalid_request",
                "Please call verify_response first to obtain an access token",
                status_code=401,
            )
        query = dict(params or {})
        query["access_token"] = self._access_grant.access_token
        # `params=` would replace a query already present in `url`; merge instead.
        request_url = httpx.URL(url).copy_merge_params(query)
        async with create_http_client() as client:
            return await client.request(
                method.upper(),
                request_url,
                headers=dict(headers or {}),
                content=body,
            )

    def _parse_token_response(self, resp: Any) -> AccessGrant:
        if resp.status_code != 200:
            error_code, description = self._try_extract_oauth_error(resp)
            logger.warning(
                "Token endpoint returned non-200",
                extra={
                    "provider": self.config.id,
                    "endpoint": "token",
                    "status_code": resp.status_code,
                    "provider_error": error_code,
                },
            )
            raise ProviderError(
                error_code or "invalid_grant",
                description or "Access token request failed",
                status_code=resp.status_code,
            )

        data = self._decode_token_body(resp)
        access_token = data.get("access_token")
        if not access_token:
            raise ProviderError("invalid_grant", "No access_token in response", status_code=400)

        expires_at = None
        expires = data.get("expires_in", data.get("expires"))
        if expires not in (None, ""):
            try:
                expires_at = time.time() + float(expires)
            except (TypeError, ValueError) as exc:
                raise ServerDataError(f"Invalid token expiry value: {expires!r}") from exc

        scope = data.get("scope")
        scopes = [s for s in re.split(r"[\s,]+", scope) if s] if isinstance(scope, str) else None

        return AccessGrant(
            access_token=str(access_token),
            refresh_token=data.get("refresh_token"),
            expires_at=expires_at,
            token_type=data.get("token_type") or "Bearer",
            scopes=scopes,
            provider_id=self.config.id,
            permission=self.permission,
            attributes={k: v for k, v in data.items() if k not in _TOKEN_FIELDS},
        )

    def _decode_token_body(self, resp: Any) -> dict[str, Any]:
        """Decode a JSON body, falling back to form encoding (`access_token=...&expires=...`)."""
        try:
            data = resp.json()
        except ValueError:
            data = dict(parse_qsl(resp.text or ""))
        if not isinstance(data, dict):
            raise ServerDataError("Invalid token response payload")
        if "error" in data:
            error, description = _split_oauth_error(data)
            logger.warning(
                "Token endpoint returned OAuth error",
                extra={"provider": self.config.id, "endpoint": "token", "provider_error": error},
            )
            raise ProviderError(error or "invalid_grant", description, status_code=400)
        return data

    def _try_extract_oauth_error(self, resp: Any) -> tuple[str | None, str | None]:
        """Best-effort extraction of the OAuth `error` code and description from a response."""
        try:
            payload = resp.json()
        except Exception:
            return None, None
        if not isinstance(payload, dict):
            return None, None
        return _split_oauth_error(payload)


def _split_oauth_error(payload: Mapping[str, Any]) -> tuple[str | None, str | None]:
    error = payload.get("error")
    description = payload.get("error_description")
    # Stack Exchange nests errors as {"error": {"type": ..., "message": ...}}
    if isinstance(error, dict):
        description = error.get("message")
        error = error.get("type")
    code = error if isinstance(error, str) and error else None
    return code, description if isinstance(description, str) else None
