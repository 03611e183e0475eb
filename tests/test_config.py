"""Unit tests for configuration loading."""

from pathlib import Path

import pytest

from ovhctl.config import DEFAULT_ENDPOINT, load_configuration
from ovhctl.errors import ConfigurationError


def write_config(path: Path, body: str) -> Path:
    path.write_text(body)
    return path


FULL = """\
ovh:
  endpoint: https://ca.api.ovh.com/1.0/
  application-key: ak
  application-secret: as
  consumer-key: ck
"""


class TestLoadConfiguration:
    """Tests for files, search paths and environment overrides."""

    def test_explicit_file(self, tmp_path: Path) -> None:
        """All keys are read from the file; the endpoint loses its trailing slash."""
        path = write_config(tmp_path / "config.yaml", FULL)

        config = load_configuration(str(path), environ={})

        assert config.endpoint == "https://ca.api.ovh.com/1.0"
        assert config.application_key == "ak"
        assert config.application_secret == "as"
        assert config.consumer_key == "ck"
        assert config.sources == (str(path),)

    def test_explicit_file_must_exist(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            load_configuration(str(tmp_path / "missing.yaml"), environ={})
        assert "not found" in str(exc_info.value)

    def test_search_paths_later_files_override(self, tmp_path: Path) -> None:
        """Missing search paths are skipped and later files win."""
        first = write_config(
            tmp_path / "a.yaml", "ovh:\n  application-key: ak1\n  application-secret: as1\n"
        )
        second = write_config(tmp_path / "b.yaml", "ovh:\n  application-key: ak2\n")

        config = load_configuration(
            search_paths=[str(first), str(tmp_path / "nope.yaml"), str(second)],
            environ={},
        )

        assert config.application_key == "ak2"
        assert config.application_secret == "as1"
        assert config.endpoint == DEFAULT_ENDPOINT
        assert config.consumer_key is None

    def test_environment_overrides_files(self, tmp_path: Path) -> None:
        path = write_config(tmp_path / "config.yaml", FULL)

        config = load_configuration(
            str(path),
            environ={"OVHCTL_CONSUMER_KEY": "from-env", "OVHCTL_ENDPOINT": ""},
        )

        assert config.consumer_key == "from-env"
        assert config.endpoint == "https://ca.api.ovh.com/1.0"
        assert "OVHCTL_CONSUMER_KEY" in config.sources

    def test_environment_only(self) -> None:
        config = load_configuration(
            search_paths=[],
            environ={"OVHCTL_APPLICATION_KEY": "ak", "OVHCTL_APPLICATION_SECRET": "as"},
        )
        assert config.application_key == "ak"

    def test_missing_application_keys(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            load_configuration(search_paths=[], environ={})
        assert "ovh.application-key" in str(exc_info.value)
        assert "ovh.application-secret" in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = write_config(tmp_path / "config.yaml", "ovh: [unclosed\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_configuration(str(path), environ={})
        assert "could not parse" in str(exc_info.value)

    def test_non_mapping_section(self, tmp_path: Path) -> None:
        path = write_config(tmp_path / "config.yaml", "ovh:\n  - a\n")

        with pytest.raises(ConfigurationError):
            load_configuration(str(path), environ={})


def test_credential_requires_consumer_key() -> None:
    """Signed calls need a consumer key; the error points at 'ovhctl connect'."""
    config = load_configuration(
        search_paths=[],
        environ={"OVHCTL_APPLICATION_KEY": "ak", "OVHCTL_APPLICATION_SECRET": "as"},
    )

    with pytest.raises(ConfigurationError) as exc_info:
        config.credential()
    assert "ovhctl connect" in str(exc_info.value)


def test_credential() -> None:
    config = load_configuration(
        search_paths=[],
        environ={
            "OVHCTL_APPLICATION_KEY": "ak",
            "OVHCTL_APPLICATION_SECRET": "as",
            "OVHCTL_CONSUMER_KEY": "ck",
        },
    )

    credential = config.credential()

    assert credential.consumer_key == "ck"
    assert credential.endpoint == DEFAULT_ENDPOINT
