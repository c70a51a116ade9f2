"""socialauth - OAuth2 social login adapters with a normalized user profile.

## Quick Example

```python
from socialauth import OAuthConfigModel, create_provider

provider = create_provider(
    OAuthConfigModel(
        id="stackexchange",
        consumer_key="12345",
        consumer_secret="secret",
        custom_properties={"key": "app-key", "site": "stackoverflow"},
    )
)

# 1. Redirect the user agent
url = provider.get_login_redirect_url("https://example.com/auth/callback")

# 2. On the callback, pass the query parameters back
profile = await provider.verify_response({"code": "...", "state": "..."})
print(profile.display_name)
```
"""

from .config import load_provider_config
from .contracts import (
    AccessGrant,
    AccessTokenExpiredError,
    Contact,
    NotSupportedError,
    Permission,
    Profile,
    ProviderError,
    ServerDataError,
)
from .models import OAuthConfigModel, SocialAuthBaseModel
from .provider import AbstractProvider
from .providers import StackExchangeProvider, create_provider, register_provider
from .strategy import OAuth2Strategy

__all__ = [
    # Types
    "AccessGrant",
    "Contact",
    "OAuthConfigModel",
    "Permission",
    "Profile",
    "SocialAuthBaseModel",
    # Errors
    "AccessTokenExpiredError",
    "NotSupportedError",
    "ProviderError",
    "ServerDataError",
    # Providers
    "AbstractProvider",
    "OAuth2Strategy",
    "StackExchangeProvider",
    "create_provider",
    "register_provider",
    # Config
    "load_provider_config",
]
