"""
test_config.py
--------------
Unit tests for temptrace.core.config.

Tests TraceConfig validation and loading from mappings and YAML files.
"""
import pytest
from pathlib import Path

from temptrace.core.config import DEFAULT_TEMPLATE, TraceConfig
from temptrace.core.exceptions import ConfigError


class TestTraceConfigDefaults:
    """Test default values and validation."""

    def test_defaults(self):
        config = TraceConfig()
        assert config.cleanup is True
        assert config.template == DEFAULT_TEMPLATE == "temptrace-XXXXXXXX"
        assert config.dir is None
        assert config.log is False
        assert config.log_dir is None

    def test_paths_converted(self):
        config = TraceConfig(dir="/var/tmp", log_dir="logs")
        assert config.dir == Path("/var/tmp")
        assert config.log_dir == Path("logs")

    def test_bad_template(self):
        with pytest.raises(ConfigError, match="XXXX"):
            TraceConfig(template="build-XX")

    @pytest.mark.parametrize("field", ["cleanup", "log"])
    def test_non_boolean_flags(self, field):
        with pytest.raises(ConfigError, match=field):
            TraceConfig(**{field: "yes"})

    def test_non_string_template(self):
        with pytest.raises(ConfigError):
            TraceConfig(template=42)

    def test_to_dict(self):
        config = TraceConfig(dir=Path("/var/tmp"))
        assert config.to_dict() == {
            "cleanup": True,
            "template": DEFAULT_TEMPLATE,
            "dir": "/var/tmp",
            "log": False,
            "log_dir": None,
        }


class TestTraceConfigLoading:
    """Test from_dict and from_yaml."""

    def test_from_dict(self):
        config = TraceConfig.from_dict({"cleanup": False, "log": True})
        assert config.cleanup is False
        assert config.log is True

    def test_from_dict_unknown_key(self):
        with pytest.raises(ConfigError, match="clean"):
            TraceConfig.from_dict({"clean": False})

    def test_from_yaml_section(self, tmp_dir):
        path = tmp_dir / "temptrace.yaml"
        path.write_text(
            "temptrace:\n"
            "  cleanup: false\n"
            "  template: build-XXXXXX\n"
            f"  dir: {tmp_dir}\n"
            "  log: true\n"
        )
        config = TraceConfig.from_yaml(path)
        assert config.cleanup is False
        assert config.template == "build-XXXXXX"
        assert config.dir == tmp_dir
        assert config.log is True

    def test_from_yaml_top_level(self, tmp_dir):
        path = tmp_dir / "config.yaml"
        path.write_text("log: true\n")
        assert TraceConfig.from_yaml(path).log is True

    def test_from_yaml_empty_file(self, tmp_dir):
        path = tmp_dir / "empty.yaml"
        path.write_text("")
        assert TraceConfig.from_yaml(path) == TraceConfig()

    def test_from_yaml_empty_section(self, tmp_dir):
        path = tmp_dir / "empty_section.yaml"
        path.write_text("temptrace:\n")
        assert TraceConfig.from_yaml(path) == TraceConfig()

    def test_from_yaml_missing_file(self, tmp_dir):
        with pytest.raises(ConfigError, match="not found"):
            TraceConfig.from_yaml(tmp_dir / "missing.yaml")

    def test_from_yaml_invalid_yaml(self, tmp_dir):
        path = tmp_dir / "broken.yaml"
        path.write_text("temptrace: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            TraceConfig.from_yaml(path)

    def test_from_yaml_not_a_mapping(self, tmp_dir):
        path = tmp_dir / "list.yaml"
        path.write_text("- cleanup\n- log\n")
        with pytest.raises(ConfigError, match="mapping"):
            TraceConfig.from_yaml(path)
