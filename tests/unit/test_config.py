"""Unit tests for ambient configuration sources."""

from __future__ import annotations

from pathlib import Path

import pytest

from outbox_testing.config import (
    ChainedConfigSource,
    ConfigSource,
    EnvironmentConfigSource,
    MappingConfigSource,
    YamlConfigSource,
    default_config_source,
)
from outbox_testing.errors import ConfigurationError
from outbox_testing.settings import HarnessSettings


class TestMappingConfigSource:
    """Tests for MappingConfigSource."""

    @pytest.mark.requirement("FR-005")
    def test_optional_lookup(self) -> None:
        """Test present keys return their value and absent keys return None."""
        source = MappingConfigSource({"datasource.username": "postgres"})
        assert source.get_optional_value("datasource.username") == "postgres"
        assert source.get_optional_value("datasource.password") is None

    @pytest.mark.requirement("FR-005")
    def test_required_lookup_missing_raises(self) -> None:
        """Test get_value raises ConfigurationError naming the key."""
        source = MappingConfigSource({})
        with pytest.raises(ConfigurationError) as exc_info:
            source.get_value("datasource.password")

        assert exc_info.value.key == "datasource.password"
        assert "datasource.password" in str(exc_info.value)

    @pytest.mark.requirement("FR-005")
    def test_values_are_strings(self) -> None:
        """Test non-string values are stringified and None values dropped."""
        source = MappingConfigSource({"port": 5432, "unset": None})
        assert source.get_value("port") == "5432"
        assert source.get_optional_value("unset") is None

    @pytest.mark.requirement("FR-005")
    def test_satisfies_protocol(self) -> None:
        """Test MappingConfigSource is a ConfigSource."""
        assert isinstance(MappingConfigSource({}), ConfigSource)


class TestEnvironmentConfigSource:
    """Tests for MicroProfile-style environment lookup."""

    @pytest.mark.requirement("FR-005")
    def test_candidate_names(self) -> None:
        """Test exact, sanitized and upper-cased names are tried in order."""
        names = EnvironmentConfigSource.candidate_names("datasource.jdbc.url")
        assert names == ["datasource.jdbc.url", "datasource_jdbc_url", "DATASOURCE_JDBC_URL"]

    @pytest.mark.requirement("FR-005")
    def test_upper_case_variable(self) -> None:
        """Test DATASOURCE_JDBC_URL answers datasource.jdbc.url."""
        source = EnvironmentConfigSource({"DATASOURCE_JDBC_URL": "jdbc:postgresql://db:5432/app"})
        assert source.get_optional_value("datasource.jdbc.url") == "jdbc:postgresql://db:5432/app"

    @pytest.mark.requirement("FR-005")
    def test_exact_name_wins(self) -> None:
        """Test the exact key takes precedence over the mapped names."""
        source = EnvironmentConfigSource(
            {"datasource.username": "exact", "DATASOURCE_USERNAME": "upper"}
        )
        assert source.get_value("datasource.username") == "exact"

    @pytest.mark.requirement("FR-005")
    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the default source reads os.environ."""
        monkeypatch.setenv("DATASOURCE_PASSWORD", "secret")
        assert EnvironmentConfigSource().get_value("datasource.password") == "secret"

    @pytest.mark.requirement("FR-005")
    def test_missing_variable(self) -> None:
        """Test absent variables return None."""
        assert EnvironmentConfigSource({}).get_optional_value("datasource.jdbc.url") is None


class TestYamlConfigSource:
    """Tests for YamlConfigSource."""

    @pytest.mark.requirement("FR-005")
    def test_nested_mapping_flattened(self, tmp_path: Path) -> None:
        """Test nested YAML mappings answer dotted keys."""
        path = tmp_path / "application.yaml"
        path.write_text(
            "datasource:\n"
            "  jdbc:\n"
            "    url: jdbc:postgresql://localhost:5432/inventory\n"
            "  username: postgres\n"
            "  port: 5432\n",
            encoding="utf-8",
        )
        source = YamlConfigSource(path)
        assert source.get_value("datasource.jdbc.url") == "jdbc:postgresql://localhost:5432/inventory"
        assert source.get_value("datasource.username") == "postgres"
        assert source.get_value("datasource.port") == "5432"

    @pytest.mark.requirement("FR-005")
    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        """Test a missing file yields no values rather than an error."""
        source = YamlConfigSource(tmp_path / "absent.yaml")
        assert source.get_optional_value("datasource.jdbc.url") is None

    @pytest.mark.requirement("FR-005")
    def test_empty_file_is_empty(self, tmp_path: Path) -> None:
        """Test an empty file yields no values."""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert YamlConfigSource(path).get_optional_value("anything") is None

    @pytest.mark.requirement("FR-005")
    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        """Test malformed YAML raises ConfigurationError."""
        path = tmp_path / "broken.yaml"
        path.write_text("datasource: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="invalid YAML"):
            YamlConfigSource(path)

    @pytest.mark.requirement("FR-005")
    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        """Test a top-level list raises ConfigurationError."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            YamlConfigSource(path)


class TestChainedConfigSource:
    """Tests for ChainedConfigSource."""

    @pytest.mark.requirement("FR-005")
    def test_first_source_wins(self) -> None:
        """Test lookup stops at the first source holding the key."""
        chain = ChainedConfigSource(
            MappingConfigSource({"datasource.username": "first"}),
            MappingConfigSource({"datasource.username": "second", "datasource.password": "pw"}),
        )
        assert chain.get_value("datasource.username") == "first"
        assert chain.get_value("datasource.password") == "pw"

    @pytest.mark.requirement("FR-005")
    def test_missing_everywhere_raises(self) -> None:
        """Test required lookup fails when no source has the key."""
        chain = ChainedConfigSource(MappingConfigSource({}), MappingConfigSource({}))
        with pytest.raises(ConfigurationError):
            chain.get_value("datasource.username")


class TestDefaultConfigSource:
    """Tests for default_config_source()."""

    @pytest.mark.requirement("FR-005")
    def test_environment_then_config_file(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test the environment overrides the configured YAML file."""
        path = tmp_path / "datasource.yaml"
        path.write_text(
            "datasource:\n  username: from-yaml\n  password: yaml-pw\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("DATASOURCE_USERNAME", "from-env")
        monkeypatch.chdir(tmp_path)

        source = default_config_source(HarnessSettings(config_file=path))

        assert source.get_value("datasource.username") == "from-env"
        assert source.get_value("datasource.password") == "yaml-pw"

    @pytest.mark.requirement("FR-005")
    def test_application_yaml_in_working_directory(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test application.yaml in the working directory is consulted last."""
        (tmp_path / "application.yaml").write_text(
            "datasource:\n  username: app-yaml\n",
            encoding="utf-8",
        )
        monkeypatch.chdir(tmp_path)

        source = default_config_source(HarnessSettings())

        assert len(source.sources) == 2
        assert source.get_value("datasource.username") == "app-yaml"
