"""
Tests for settings resolution (defaults, YAML file, environment).
"""

import pytest
import yaml

from api.app_config import DEFAULT_MAX_UPLOAD_BYTES, AppSettings, load_settings


@pytest.fixture
def config_file(tmp_path):
    def write(data):
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return write


class TestDefaults:

    def test_defaults(self):
        settings = AppSettings()

        assert settings.storage == "memory"
        assert settings.db_path.endswith("catalog.duckdb")
        assert settings.upload_dir is None
        assert settings.max_upload_bytes == DEFAULT_MAX_UPLOAD_BYTES == 10485760
        assert settings.seed_demo_data is True
        assert settings.cors_origins == ["*"]

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValueError, match="Unknown storage backend"):
            AppSettings(storage="postgres")

    def test_backend_name_is_case_insensitive(self):
        assert AppSettings(storage="DuckDB").storage == "duckdb"

    def test_non_positive_upload_limit_rejected(self):
        with pytest.raises(ValueError):
            AppSettings(max_upload_bytes=0)

    def test_from_dict_ignores_unknown_keys(self):
        settings = AppSettings.from_dict({"storage": "duckdb", "theme": "dark"})
        assert settings.storage == "duckdb"


class TestLoadSettings:

    def test_empty_environment_uses_defaults(self, tmp_path):
        # Point at a missing file so a user-level settings.yaml is never read
        settings = load_settings({"ONTOLOGY_CATALOG_CONFIG": str(tmp_path / "absent.yaml")})
        assert settings == AppSettings(db_path=settings.db_path)

    def test_environment_overrides(self, tmp_path):
        settings = load_settings({
            "ONTOLOGY_CATALOG_CONFIG": str(tmp_path / "absent.yaml"),
            "ONTOLOGY_CATALOG_STORAGE": "duckdb",
            "ONTOLOGY_CATALOG_DB_PATH": str(tmp_path / "x.duckdb"),
            "ONTOLOGY_CATALOG_UPLOAD_DIR": str(tmp_path / "blobs"),
            "ONTOLOGY_CATALOG_MAX_UPLOAD_BYTES": "2048",
            "ONTOLOGY_CATALOG_SEED": "false",
            "ONTOLOGY_CATALOG_LOG_LEVEL": "DEBUG",
            "ONTOLOGY_CATALOG_CORS_ORIGINS": "http://a.test, http://b.test",
        })

        assert settings.storage == "duckdb"
        assert settings.db_path == str(tmp_path / "x.duckdb")
        assert settings.upload_dir == str(tmp_path / "blobs")
        assert settings.max_upload_bytes == 2048
        assert settings.seed_demo_data is False
        assert settings.log_level == "DEBUG"
        assert settings.cors_origins == ["http://a.test", "http://b.test"]

    def test_yaml_file_is_read(self, config_file):
        path = config_file({"storage": "duckdb", "seed_demo_data": False, "cors_origins": ["http://x.test"]})

        settings = load_settings({"ONTOLOGY_CATALOG_CONFIG": str(path)})

        assert settings.storage == "duckdb"
        assert settings.seed_demo_data is False
        assert settings.cors_origins == ["http://x.test"]

    def test_environment_beats_yaml(self, config_file):
        path = config_file({"storage": "duckdb", "log_level": "WARNING"})

        settings = load_settings({
            "ONTOLOGY_CATALOG_CONFIG": str(path),
            "ONTOLOGY_CATALOG_STORAGE": "memory",
        })

        assert settings.storage == "memory"
        assert settings.log_level == "WARNING"

    def test_empty_env_value_is_ignored(self, config_file):
        path = config_file({"storage": "duckdb"})
        settings = load_settings({"ONTOLOGY_CATALOG_CONFIG": str(path), "ONTOLOGY_CATALOG_STORAGE": ""})
        assert settings.storage == "duckdb"

    def test_invalid_yaml_is_ignored(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("storage: [unclosed", encoding="utf-8")

        settings = load_settings({"ONTOLOGY_CATALOG_CONFIG": str(path)})

        assert settings.storage == "memory"

    def test_non_mapping_yaml_is_ignored(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        assert load_settings({"ONTOLOGY_CATALOG_CONFIG": str(path)}).storage == "memory"
