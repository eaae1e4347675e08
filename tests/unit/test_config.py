from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from nlclassifier.config import CONFIG_ENV_VAR, Config, ConfigError, LoggingConfig, load_config


def _write_config(tmp_path: Path, content: str) -> Path:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(textwrap.dedent(content), encoding="utf-8")
    return config_path


def test_load_config_success(tmp_path: Path) -> None:
    assets = tmp_path / "assets"
    assets.mkdir()
    config_path = _write_config(
        tmp_path,
        f"""
        root_dir: {tmp_path}/state
        asset_dirs:
          - {assets}
          - relative/models
        model: sentiment.nlcm
        logging:
          level: DEBUG
          debug_file: true
        """,
    )

    config = load_config(config_path)

    assert config.root_dir == tmp_path / "state"
    assert config.asset_dirs == [assets, tmp_path / "relative" / "models"]
    assert config.model == "sentiment.nlcm"
    assert config.logging == LoggingConfig(level="debug", debug_file=True)


def test_load_config_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path,
        """
        model: from-env.nlcm
        """,
    )

    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_path))
    config = load_config()

    assert config.model == "from-env.nlcm"
    assert config.asset_dirs == []
    assert config.logging == LoggingConfig()


def test_missing_default_config_uses_defaults(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))

    config = load_config()

    assert config == Config()


def test_missing_explicit_config_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Config file not found"):
        load_config(tmp_path / "absent.yaml")


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    config = load_config(_write_config(tmp_path, ""))

    assert config.model is None
    assert config.logging.level == "info"


def test_asset_dir_that_does_not_exist_is_kept_with_warning(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    config_path = _write_config(
        tmp_path,
        """
        asset_dirs:
          - missing
        """,
    )

    with caplog.at_level("WARNING"):
        config = load_config(config_path)

    assert config.asset_dirs == [tmp_path / "missing"]
    assert "Asset directory does not exist" in caplog.text


@pytest.mark.parametrize(
    "bad_content, expected_message",
    [
        ("- just\n- a list\n", "Configuration root must be a mapping"),
        ("asset_dirs: assets\n", "asset_dirs must be a list"),
        ("asset_dirs:\n  - 12\n", "asset_dirs[1] must be a string path"),
        ("model: 12\n", "model must be a string"),
        ("model: '   '\n", "model cannot be empty"),
        ("logging: verbose\n", "logging must be a mapping"),
        ("logging:\n  level: chatty\n", "Unknown log level: chatty"),
        ("model: [unclosed\n", "not valid YAML"),
    ],
)
def test_load_config_validation_errors(
    bad_content: str,
    expected_message: str,
    tmp_path: Path,
) -> None:
    config_path = _write_config(tmp_path, bad_content)

    with pytest.raises(ConfigError) as excinfo:
        load_config(config_path)

    assert expected_message in str(excinfo.value)


def test_unknown_root_key_is_ignored(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, f"rootdir: {tmp_path}/elsewhere\n")

    assert load_config(config_path).root_dir == Config().root_dir
