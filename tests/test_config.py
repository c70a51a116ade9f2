"""Tests for socialauth.config provider config loading."""

from pathlib import Path

import pytest
import yaml

from socialauth.config import load_provider_config, resolve_env_vars


def _write_config(tmp_path: Path, data: object) -> Path:
    path = tmp_path / "oauth.yml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestResolveEnvVars:
    def test_nested_values_are_resolved(self, monkeypatch):
        monkeypatch.setenv("SE_SECRET", "s3cret")
        result = resolve_env_vars({"a": "${SE_SECRET}", "b": ["x-${SE_SECRET}", 3]})
        assert result == {"a": "s3cret", "b": ["x-s3cret", 3]}

    def test_missing_variable_raises(self, monkeypatch):
        monkeypatch.delenv("SE_MISSING", raising=False)
        with pytest.raises(ValueError, match="SE_MISSING"):
            resolve_env_vars("${SE_MISSING}")


class TestLoadProviderConfig:
    def test_loads_provider_section(self, tmp_path, monkeypatch):
        monkeypatch.setenv("STACKEXCHANGE_SECRET", "from-env")
        path = _write_config(
            tmp_path,
            {
                "providers": {
                    "stackexchange": {
                        "consumer_key": "12345",
                        "consumer_secret": "${STACKEXCHANGE_SECRET}",
                        "custom_properties": {"key": "app-key", "site": "superuser"},
                        "save_raw_response": True,
                    }
                }
            },
        )

        config = load_provider_config(path, "stackexchange")
        assert config.id == "stackexchange"
        assert config.consumer_key == "12345"
        assert config.consumer_secret == "from-env"
        assert config.custom_properties == {"key": "app-key", "site": "superuser"}
        assert config.save_raw_response is True
        assert config.registered_plugins == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_provider_config(tmp_path / "nope.yml", "stackexchange")

    def test_missing_provider(self, tmp_path):
        path = _write_config(tmp_path, {"providers": {}})
        with pytest.raises(ValueError, match="not configured"):
            load_provider_config(path, "stackexchange")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "oauth.yml"
        path.write_text("")
        with pytest.raises(ValueError, match="not configured"):
            load_provider_config(path, "stackexchange")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "oauth.yml"
        path.write_text("providers: [unclosed")
        with pytest.raises(ValueError, match="Failed to parse YAML"):
            load_provider_config(path, "stackexchange")

    def test_unknown_fields_rejected(self, tmp_path):
        path = _write_config(
            tmp_path,
            {
                "providers": {
                    "stackexchange": {
                        "consumer_key": "k",
                        "consumer_secret": "s",
                        "consumer_scret": "typo",
                    }
                }
            },
        )
        with pytest.raises(ValueError, match="Invalid config for provider 'stackexchange'"):
            load_provider_config(path, "stackexchange")

    def test_missing_required_fields(self, tmp_path):
        path = _write_config(tmp_path, {"providers": {"stackexchange": {"consumer_key": "k"}}})
        with pytest.raises(ValueError, match="consumer_secret"):
            load_provider_config(path, "stackexchange")
