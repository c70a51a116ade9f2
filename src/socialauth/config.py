"""Provider configuration loading.

Configuration lives in a YAML file with one entry per provider:

```yaml
providers:
  stackexchange:
    consumer_key: "12345"
    consumer_secret: ${STACKEXCHANGE_SECRET}
    custom_properties:
      key: app-key
      site: stackoverflow
```

String values may reference environment variables as `${VAR_NAME}`.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import OAuthConfigModel

logger = logging.getLogger(__name__)

ENV_VAR_PATTERN = re.compile(r"\${([A-Za-z0-9_]+)}")


def resolve_env_vars(value: Any) -> Any:
    """Recursively replace `${VAR}` references in strings, lists and dicts.

    Raises:
        ValueError: If a referenced environment variable is not set
    """
    if isinstance(value, str):
        result = value
        for env_var in ENV_VAR_PATTERN.findall(value):
            if env_var not in os.environ:
                raise ValueError(f"Environment variable {env_var} is not set")
            result = result.replace(f"${{{env_var}}}", os.environ[env_var])
        return result
    if isinstance(value, dict):
        return {k: resolve_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [resolve_env_vars(v) for v in value]
    return value


def load_provider_config(config_path: Path | str, provider_id: str) -> OAuthConfigModel:
    """Load and validate one provider's configuration from a YAML file.

    Args:
        config_path: Path to the YAML file
        provider_id: Key under `providers` (e.g., 'stackexchange')

    Returns:
        Validated OAuthConfigModel with `id` set to `provider_id`

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the file is not valid YAML, the provider is missing,
            or the provider section fails validation
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Provider config file not found at {config_path}")

    logger.debug(f"Loading provider config from: {config_path}")
    try:
        with open(config_path) as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML config file {config_path}: {e}") from e

    if raw_config is not None and not isinstance(raw_config, dict):
        raise ValueError(f"Provider config file {config_path} must contain a mapping")
    providers = (raw_config or {}).get("providers") or {}
    section = providers.get(provider_id)
    if section is None:
        raise ValueError(f"Provider '{provider_id}' is not configured in {config_path}")
    if not isinstance(section, dict):
        raise ValueError(f"Provider '{provider_id}' config must be a mapping")

    section = resolve_env_vars(section)
    section.setdefault("id", provider_id)
    try:
        return OAuthConfigModel.model_validate(section)
    except ValidationError as e:
        raise ValueError(f"Invalid config for provider '{provider_id}': {e}") from e
