"""Unit tests for configuration loading."""

from pathlib import Path

import pytest

from weight_loss_tracker.utils.exceptions import ConfigurationError
from weight_loss_tracker.utils.parameters import ParameterLoader


def test_load_config(tmp_path: Path) -> None:
    """Test loading a partial YAML file over the defaults."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "storage:\n  path: /tmp/store.json\nlogging:\n  level: DEBUG\n  console: false\n",
        encoding="utf-8",
    )

    loader = ParameterLoader(str(config_path))

    if loader.get_storage_config().path != "/tmp/store.json":
        raise AssertionError(f"Unexpected storage path {loader.get_storage_config().path}")
    if loader.get_storage_config().goal_key != "weightLossGoals":
        raise AssertionError("Expected default goal key")
    if loader.get_logging_config().level != "DEBUG":
        raise AssertionError("Expected DEBUG logging level")
    if loader.get_output_config().formats != ["csv"]:
        raise AssertionError(f"Unexpected output formats {loader.get_output_config().formats}")


def test_shipped_config_is_valid() -> None:
    """Test that the repository's configuration file loads."""
    config_path = Path(__file__).resolve().parent.parent / "config" / "config.yaml"

    loader = ParameterLoader(str(config_path))

    if loader.get_storage_config().entries_key != "weeklyLogs":
        raise AssertionError("Expected weeklyLogs entries key")


def test_missing_config_file(tmp_path: Path) -> None:
    """Test that a missing file raises ConfigurationError."""
    with pytest.raises(ConfigurationError):
        ParameterLoader(str(tmp_path / "missing.yaml"))


def test_invalid_yaml(tmp_path: Path) -> None:
    """Test that malformed YAML raises ConfigurationError."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text("storage: [unclosed", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        ParameterLoader(str(config_path))
