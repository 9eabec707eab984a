"""
Unit tests for configuration loading.
"""

from __future__ import annotations

import pytest
import yaml
from pydantic import ValidationError

from siglineage.config import LineageConfig, SigLineageConfig, _deep_merge, load_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "SIGLINEAGE_LINEAGE__DIGEST_ALGORITHM",
        "SIGLINEAGE_LINEAGE__MAX_LINEAGE_LENGTH",
        "SIGLINEAGE_LINEAGE__LOG_DECISIONS",
        "SIGLINEAGE_LOGGING__LEVEL",
        "SIGLINEAGE_LOGGING__FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)


class TestLineageConfig:
    def test_defaults(self):
        config = LineageConfig()
        assert config.digest_algorithm == "sha256"
        assert config.max_lineage_length == 32
        assert config.log_decisions is True

    def test_algorithm_normalised(self):
        assert LineageConfig(digest_algorithm=" SHA512 ").digest_algorithm == "sha512"

    def test_unknown_algorithm_rejected(self):
        with pytest.raises(ValidationError):
            LineageConfig(digest_algorithm="rot13")

    def test_variable_length_digest_rejected(self):
        with pytest.raises(ValidationError):
            LineageConfig(digest_algorithm="shake_128")

    def test_lineage_length_must_be_positive(self):
        with pytest.raises(ValidationError):
            LineageConfig(max_lineage_length=0)


class TestLoadConfig:
    def test_no_file_gives_defaults(self):
        config = load_config()
        assert isinstance(config, SigLineageConfig)
        assert config.lineage.digest_algorithm == "sha256"
        assert config.logging.format == "console"

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            "lineage": {"digest_algorithm": "sha384", "max_lineage_length": 8},
            "logging": {"level": "DEBUG", "format": "json"},
        }))
        config = load_config(path)
        assert config.lineage.digest_algorithm == "sha384"
        assert config.lineage.max_lineage_length == 8
        assert config.lineage.log_decisions is True
        assert config.logging.level == "DEBUG"
        assert config.logging.format == "json"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"lineage": {"digest_algorithm": "sha384"}}))
        monkeypatch.setenv("SIGLINEAGE_LINEAGE__DIGEST_ALGORITHM", "sha512")
        monkeypatch.setenv("SIGLINEAGE_LINEAGE__LOG_DECISIONS", "false")
        monkeypatch.setenv("SIGLINEAGE_LOGGING__LEVEL", "WARNING")

        config = load_config(path)
        assert config.lineage.digest_algorithm == "sha512"
        assert config.lineage.log_decisions is False
        assert config.logging.level == "WARNING"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path).lineage.max_lineage_length == 32

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    def test_invalid_format_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"logging": {"format": "xml"}}))
        with pytest.raises(ValidationError):
            load_config(path)


class TestDeepMerge:
    def test_nested_keys_merge(self):
        base = {"lineage": {"digest_algorithm": "sha256", "max_lineage_length": 4}}
        override = {"lineage": {"digest_algorithm": "sha512"}}
        assert _deep_merge(base, override) == {
            "lineage": {"digest_algorithm": "sha512", "max_lineage_length": 4},
        }
        assert base["lineage"]["digest_algorithm"] == "sha256"
