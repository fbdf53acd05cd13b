"""Tests for EngineConfig / ScannerConfig validation and environment overrides."""

from __future__ import annotations

from pathlib import Path

import pytest

from hookwarden.config import (
    DEFAULT_MAX_CONTENT_BYTES,
    DEFAULT_QUERY_DIR,
    DEFAULT_SNIPPET_LENGTH,
    EngineConfig,
    ScannerConfig,
)
from hookwarden.exceptions import ConfigurationError


class TestEngineConfig:
    def test_defaults_validate(self) -> None:
        config = EngineConfig()
        config.validate()
        assert config.query_dir == DEFAULT_QUERY_DIR
        assert config.snippet_length == DEFAULT_SNIPPET_LENGTH
        assert config.retry_unavailable is False

    def test_packaged_query_directories_exist(self) -> None:
        for lang in ("python", "bash", "javascript", "typescript"):
            assert (DEFAULT_QUERY_DIR / lang).is_dir()

    def test_missing_query_dir_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Query directory"):
            EngineConfig(query_dir=tmp_path / "nope").validate()

    def test_non_positive_snippet_length_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="snippet_length"):
            EngineConfig(snippet_length=0).validate()

    def test_from_env(self, tmp_path: Path) -> None:
        config = EngineConfig.from_env({
            "HOOKWARDEN_QUERY_DIR": str(tmp_path),
            "HOOKWARDEN_SNIPPET_LENGTH": "60",
            "HOOKWARDEN_RETRY_UNAVAILABLE": "yes",
        })
        assert config.query_dir == tmp_path
        assert config.snippet_length == 60
        assert config.retry_unavailable is True

    def test_from_empty_env_uses_defaults(self) -> None:
        assert EngineConfig.from_env({}) == EngineConfig()

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("HOOKWARDEN_SNIPPET_LENGTH", "long"),
            ("HOOKWARDEN_RETRY_UNAVAILABLE", "maybe"),
        ],
    )
    def test_malformed_env_values(self, name: str, value: str) -> None:
        with pytest.raises(ConfigurationError, match=name):
            EngineConfig.from_env({name: value})


class TestScannerConfig:
    def test_defaults(self) -> None:
        config = ScannerConfig()
        config.validate()
        assert config.max_content_bytes == DEFAULT_MAX_CONTENT_BYTES

    @pytest.mark.parametrize("field", ["max_content_bytes", "max_workers"])
    def test_non_positive_limits_rejected(self, field: str) -> None:
        with pytest.raises(ConfigurationError, match=field):
            ScannerConfig(**{field: 0}).validate()

    def test_from_env(self) -> None:
        config = ScannerConfig.from_env({
            "HOOKWARDEN_MAX_CONTENT_BYTES": "2048",
            "HOOKWARDEN_MAX_WORKERS": "2",
        })
        assert config == ScannerConfig(max_content_bytes=2048, max_workers=2)
