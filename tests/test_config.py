"""
Unit tests: settings resolution
"""
import pytest

from fleetdash.infra.config import PROJECT_ROOT, Settings, load_settings
from fleetdash.infra.exceptions import ConfigError


class TestLoadSettings:
    """Defaults, YAML overrides, then environment overrides"""

    @pytest.fixture
    def missing_yaml(self, tmp_path):
        return tmp_path / "absent.yaml"

    def test_defaults(self, missing_yaml):
        settings = load_settings(yaml_file=missing_yaml, environ={})
        assert settings == Settings()
        assert settings.session_file is None

    def test_yaml_then_env(self, tmp_path):
        yaml_file = tmp_path / "dashboard.yaml"
        yaml_file.write_text(
            "api_url: http://yaml.test/api\npage_size: 50\nunknown_key: ignored\n", encoding="utf-8"
        )
        settings = load_settings(
            yaml_file=yaml_file,
            environ={"FLEETDASH_API_URL": "http://env.test/api", "FLEETDASH_REQUEST_TIMEOUT": "5"},
        )
        assert settings.api_url == "http://env.test/api"
        assert settings.page_size == 50
        assert settings.request_timeout == 5.0

    def test_blank_paths_disable_files(self, missing_yaml):
        settings = load_settings(
            yaml_file=missing_yaml, environ={"FLEETDASH_LOG_FILE": "", "FLEETDASH_SESSION_FILE": ""}
        )
        assert settings.log_file is None
        assert settings.session_file is None

    def test_relative_paths_resolve_from_project_root(self, missing_yaml):
        settings = load_settings(yaml_file=missing_yaml, environ={"FLEETDASH_SESSION_FILE": "data/s.json"})
        assert settings.session_file == str(PROJECT_ROOT / "data" / "s.json")

    @pytest.mark.parametrize("env", [
        {"FLEETDASH_PAGE_SIZE": "many"},
        {"FLEETDASH_PAGE_SIZE": "0"},
        {"FLEETDASH_EXPIRING_SOON_DAYS": "-1"},
    ])
    def test_invalid_values(self, missing_yaml, env):
        with pytest.raises(ConfigError):
            load_settings(yaml_file=missing_yaml, environ=env)

    def test_yaml_must_be_mapping(self, tmp_path):
        yaml_file = tmp_path / "dashboard.yaml"
        yaml_file.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_settings(yaml_file=yaml_file, environ={})


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
