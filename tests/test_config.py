"""Tests for spin_info.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from spin_info.config import InfoConfig, default_cache_dir, load_config
from spin_info.errors import ConfigError


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, InfoConfig)
    assert config.cache_dir is None
    assert config.insecure is False
    assert config.request_timeout == pytest.approx(30.0)
    assert config.registry.is_set() is False


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".spin-info.yml"
    config_file.write_text(
        """
cache_dir: "cache"
insecure: yes
request_timeout: 5
registry:
  username: "bot"
  password: "s3cret"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.cache_dir == tmp_path.resolve() / "cache"
    assert config.insecure is True
    assert config.request_timeout == pytest.approx(5.0)
    assert config.registry.username == "bot"
    assert config.registry.password == "s3cret"
    assert config.registry.is_set() is True


def test_load_config_honours_env_var(tmp_path: Path, monkeypatch) -> None:
    config_file = tmp_path / "custom.yml"
    config_file.write_text("insecure: true\n", encoding="utf-8")
    monkeypatch.setenv("SPIN_INFO_CONFIG", str(config_file))

    assert load_config().insecure is True


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    config_file = tmp_path / ".spin-info.yml"
    config_file.write_text("cache_dir: [unterminated\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_requires_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".spin-info.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_with_cache_dir_overrides_only_when_given(tmp_path: Path) -> None:
    config = InfoConfig(cache_dir=tmp_path / "from-config", insecure=True)

    assert config.with_cache_dir(None) is config
    overridden = config.with_cache_dir(tmp_path / "from-cli")
    assert overridden.cache_dir == tmp_path / "from-cli"
    assert overridden.insecure is True


def test_default_cache_dir_follows_xdg(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))

    assert default_cache_dir() == tmp_path / "spin-info"
