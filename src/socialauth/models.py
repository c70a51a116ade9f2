"""Pydantic models for socialauth.

`SocialAuthBaseModel` is the base every library model inherits from. It
establishes consistent configuration across models:

- Strict field validation (no extra fields allowed)
- Immutable instances, so a config can be shared between provider instances

Example:
    >>> from socialauth.models import OAuthConfigModel
    >>>
    >>> config = OAuthConfigModel(
    ...     id="stackexchange",
    ...     consumer_key="12345",
    ...     consumer_secret="secret",
    ...     custom_properties={"key": "app-key"},
    ... )
    >>> config.custom_properties["key"]
    'app-key'

## Security-relevant configuration fields

- `custom_permissions`: affects which scopes are requested from the provider.
- `authentication_url` / `access_token_url`: replace the provider endpoints.
  An authentication URL override is used verbatim, without a CSRF `state`.
"""

from pydantic import BaseModel, ConfigDict


class SocialAuthBaseModel(BaseModel):
    """Base model for all socialauth Pydantic models.

    - extra="forbid": Rejects any fields not defined in the model
    - frozen=True: Makes instances immutable
    """

    model_config = ConfigDict(extra="forbid", frozen=True)


class OAuthConfigModel(SocialAuthBaseModel):
    """Per-provider OAuth application configuration."""

    id: str  # Provider id (e.g., 'stackexchange')
    consumer_key: str  # OAuth client id
    consumer_secret: str
    # Comma separated scopes. When set, the provider starts in CUSTOM permission mode.
    custom_permissions: str | None = None
    authentication_url: str | None = None
    access_token_url: str | None = None
    custom_properties: dict[str, str] | None = None
    save_raw_response: bool = False
    registered_plugins: list[str] = []
    plugins_scopes: dict[str, str] = {}
