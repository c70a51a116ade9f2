"""Provider adapter implementations and the registry that maps ids to them."""

from socialauth.models import OAuthConfigModel

from ..provider import AbstractProvider
from .stackexchange import StackExchangeProvider

_PROVIDERS: dict[str, type[AbstractProvider]] = {
    "stackexchange": StackExchangeProvider,
}


def register_provider(provider_id: str, provider_cls: type[AbstractProvider]) -> None:
    """Register an adapter class under a provider id."""
    _PROVIDERS[provider_id.lower()] = provider_cls


def get_supported_providers() -> list[str]:
    return sorted(_PROVIDERS)


def create_provider(config: OAuthConfigModel) -> AbstractProvider:
    """Instantiate the adapter registered for `config.id`."""
    provider_cls = _PROVIDERS.get(config.id.lower())
    if provider_cls is None:
        raise ValueError(f"No provider registered for id: {config.id}")
    return provider_cls(config)  # type: ignore[call-arg]


__all__ = [
    "StackExchangeProvider",
    "create_provider",
    "get_supported_providers",
    "register_provider",
]
