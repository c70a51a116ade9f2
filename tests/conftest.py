"""
Global pytest configuration and fixtures.
"""

import pytest

from socialauth.models import OAuthConfigModel


@pytest.fixture
def stackexchange_config() -> OAuthConfigModel:
    return OAuthConfigModel(
        id="stackexchange",
        consumer_key="cid",
        consumer_secret="secret",
        custom_properties={"key": "app-key"},
    )


@pytest.fixture(autouse=True)
def clear_debug_env(monkeypatch):
    """Keep CLI logging at its default level regardless of the caller's shell."""
    monkeypatch.delenv("SOCIALAUTH_DEBUG", raising=False)
