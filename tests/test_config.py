import logging

import pytest
import yaml

from endpoint_codegen.config import (
    CREDENTIAL_KEY,
    DEFAULT_CONFIG,
    CredentialStore,
    default_config_path,
    load_config,
    setup_logging,
)
from endpoint_codegen.errors import ConfigFileError, ValidationError


class TestLoadConfig:
    def test_defaults_when_missing(self, tmp_path):
        assert load_config(tmp_path / "missing.yaml") == DEFAULT_CONFIG

    def test_file_overrides_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("model: gpt-4o\nlog_level: DEBUG\n", encoding="utf-8")
        config = load_config(path)
        assert config["model"] == "gpt-4o"
        assert config["log_level"] == "DEBUG"
        assert config["template"] == DEFAULT_CONFIG["template"]

    def test_credential_not_exposed(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(f"{CREDENTIAL_KEY}: secret\n", encoding="utf-8")
        assert CREDENTIAL_KEY not in load_config(path)

    def test_malformed_yaml_uses_defaults(self, tmp_path, caplog):
        path = tmp_path / "config.yaml"
        path.write_text("model: [unclosed\n", encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            assert load_config(path) == DEFAULT_CONFIG
        assert "malformed" in caplog.text

    def test_home_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ENDPOINT_CODEGEN_HOME", str(tmp_path))
        assert default_config_path() == tmp_path / "config.yaml"


class TestCredentialStore:
    def test_set_and_get(self, tmp_path):
        store = CredentialStore(tmp_path / "config.yaml")
        assert store.get() is None
        assert store.is_configured is False

        store.set("  abc123  ")
        assert store.get() == "abc123"
        assert store.is_configured is True

    def test_set_keeps_other_settings(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("model: gpt-4o\n", encoding="utf-8")
        CredentialStore(path).set("abc")
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data == {"model": "gpt-4o", CREDENTIAL_KEY: "abc"}

    def test_blank_key_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        store = CredentialStore(path)
        with pytest.raises(ValidationError):
            store.set("   ")
        assert not path.exists()

    def test_malformed_file_not_overwritten(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("model: [unclosed\n", encoding="utf-8")
        store = CredentialStore(path)
        with pytest.raises(ConfigFileError):
            store.set("abc")
        assert path.read_text(encoding="utf-8") == "model: [unclosed\n"

    def test_non_mapping_file_not_overwritten(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigFileError):
            CredentialStore(path).set("abc")
        assert path.read_text(encoding="utf-8") == "- a\n- b\n"

    def test_clear(self, tmp_path):
        store = CredentialStore(tmp_path / "config.yaml")
        store.set("abc")
        store.clear()
        assert store.get() is None

    def test_subscribers_notified(self, tmp_path):
        store = CredentialStore(tmp_path / "config.yaml")
        seen = []
        unsubscribe = store.subscribe(seen.append)

        store.set("abc")
        store.clear()
        unsubscribe()
        store.set("def")

        assert seen == [True, False]

    def test_rejected_key_does_not_notify(self, tmp_path):
        store = CredentialStore(tmp_path / "config.yaml")
        seen = []
        store.subscribe(seen.append)
        with pytest.raises(ValidationError):
            store.set("")
        assert seen == []


class TestSetupLogging:
    def test_level_applied(self):
        setup_logging("debug")
        assert logging.getLogger().level == logging.DEBUG
        setup_logging("WARNING")
        assert logging.getLogger().level == logging.WARNING
