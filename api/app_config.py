"""
Application settings for the ontology catalog backend.

Settings are resolved once at startup, lowest to highest priority:
1. Built-in defaults (data files under the platform user data dir)
2. YAML settings file: ONTOLOGY_CATALOG_CONFIG, or settings.yaml in the
   platform user config dir if it exists
3. ONTOLOGY_CATALOG_* environment variables

The resolved ``AppSettings`` is attached to the FastAPI app; handlers get
it through ``api.dependencies.get_settings``.
"""

import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import platformdirs
import yaml

from .shared.logger import get_logger

logger = get_logger(__name__)

APP_NAME = "ontology-catalog"
APP_AUTHOR = "ontology-catalog"

ENV_PREFIX = "ONTOLOGY_CATALOG_"
STORAGE_BACKENDS = ("memory", "duckdb")
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _default_db_path() -> str:
    return str(Path(platformdirs.user_data_dir(APP_NAME, APP_AUTHOR)) / "catalog.duckdb")


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def _parse_origins(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [v.strip() for v in str(value).split(",") if v.strip()]


@dataclass
class AppSettings:
    """Resolved backend configuration."""

    storage: str = "memory"
    db_path: str = field(default_factory=_default_db_path)
    upload_dir: Optional[str] = None
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    seed_demo_data: bool = True
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    def __post_init__(self) -> None:
        self.storage = self.storage.lower()
        if self.storage not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown storage backend '{self.storage}' (expected one of: {', '.join(STORAGE_BACKENDS)})"
            )
        if self.max_upload_bytes <= 0:
            raise ValueError("max_upload_bytes must be positive")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AppSettings":
        """Build settings from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {k: v for k, v in data.items() if k in known and v is not None}
        if "max_upload_bytes" in values:
            values["max_upload_bytes"] = int(values["max_upload_bytes"])
        if "seed_demo_data" in values:
            values["seed_demo_data"] = _parse_bool(values["seed_demo_data"])
        if "cors_origins" in values:
            values["cors_origins"] = _parse_origins(values["cors_origins"])
        for key in ("storage", "db_path", "upload_dir", "log_level"):
            if key in values:
                values[key] = str(values[key])
        return cls(**values)


# Env var suffix -> settings field
_ENV_FIELDS = {
    "STORAGE": "storage",
    "DB_PATH": "db_path",
    "UPLOAD_DIR": "upload_dir",
    "MAX_UPLOAD_BYTES": "max_upload_bytes",
    "SEED": "seed_demo_data",
    "LOG_LEVEL": "log_level",
    "CORS_ORIGINS": "cors_origins",
}


def _settings_file(environ: Mapping[str, str]) -> Optional[Path]:
    """Locate the YAML settings file, if any."""
    explicit = environ.get(f"{ENV_PREFIX}CONFIG")
    if explicit:
        return Path(explicit)
    default = Path(platformdirs.user_config_dir(APP_NAME, APP_AUTHOR)) / "settings.yaml"
    return default if default.exists() else None


def _load_settings_file(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not load settings file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring settings file %s: expected a mapping", path)
        return {}
    return data


def load_settings(environ: Optional[Mapping[str, str]] = None) -> AppSettings:
    """Resolve settings from defaults, the YAML settings file and env vars."""
    environ = os.environ if environ is None else environ

    data: Dict[str, Any] = {}
    settings_path = _settings_file(environ)
    if settings_path is not None:
        data.update(_load_settings_file(settings_path))

    for suffix, name in _ENV_FIELDS.items():
        value = environ.get(f"{ENV_PREFIX}{suffix}")
        if value is not None and value != "":
            data[name] = value

    return AppSettings.from_dict(data)
