"""
Configuration — Centralized settings management

Config hierarchy (highest to lowest priority):
  1. Environment variables (GADGETMETA_*)
  2. Project config (.gadgetmeta/config.yaml)
  3. User config (~/.gadgetmeta/config.yaml)
  4. Defaults

Configuration is an explicit object handed to the components that need
it; nothing reads module-level settings at call time.
"""

import os
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

import structlog

from .context import ContextDefaults, DEFAULT_VIEW
from .orchestrator.config import PoolConfig


logger = structlog.get_logger(__name__)


@dataclass
class RenderingConfig:
    """Where rendered gadgets are served from."""
    iframe_base: str = "/gadgets/ifr"
    container: str = "default"

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if not self.iframe_base:
            return "rendering.iframe_base must not be empty"
        if not self.container:
            return "rendering.container must not be empty"
        return None


@dataclass
class DefaultsConfig:
    """Fallbacks for global request fields."""
    language: str = "all"
    country: str = "ALL"
    view: str = DEFAULT_VIEW

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        for name in ("language", "country", "view"):
            if not getattr(self, name):
                return f"defaults.{name} must not be empty"
        return None


@dataclass
class FetchConfig:
    """How gadget specs are retrieved."""
    timeout: float = 5.0                 # seconds per fetch
    cache_ttl: float = 300.0             # seconds; 0 disables caching
    max_bytes: int = 1024 * 1024         # larger specs are rejected
    cache_max_entries: int = 1024        # oldest entry evicted beyond this
    allow_files: bool = False            # serve file:// URLs and local paths
    blacklist: List[str] = field(default_factory=list)

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if self.timeout <= 0:
            return "fetch.timeout must be > 0"
        if self.cache_ttl < 0:
            return "fetch.cache_ttl must be >= 0"
        if self.max_bytes < 1:
            return "fetch.max_bytes must be >= 1"
        if self.cache_max_entries < 1:
            return "fetch.cache_max_entries must be >= 1"
        return None


@dataclass
class LoggingConfig:
    """Log output preferences."""
    level: str = "INFO"
    format: str = "console"   # "console" | "json"

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR")
        if self.level.upper() not in valid_levels:
            return f"Unknown log level '{self.level}'. Valid: {', '.join(valid_levels)}"
        valid_formats = ("console", "json")
        if self.format not in valid_formats:
            return f"Unknown log format '{self.format}'. Valid: {', '.join(valid_formats)}"
        return None


@dataclass
class Config:
    """Application configuration."""
    pool: PoolConfig = field(default_factory=PoolConfig)
    rendering: RenderingConfig = field(default_factory=RenderingConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def context_defaults(self) -> ContextDefaults:
        """Fallbacks used when decoding request contexts."""
        return ContextDefaults(
            language=self.defaults.language,
            country=self.defaults.country,
            view=self.defaults.view,
            container=self.rendering.container,
        )

    def validate(self) -> Optional[str]:
        """Validate every section. Returns the first error or None."""
        try:
            self.pool.validate()
        except ValueError as e:
            return str(e)
        for section in (self.rendering, self.defaults, self.fetch, self.logging):
            error = section.validate()
            if error:
                return error
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "pool": {
                "workers": self.pool.workers,
                "shutdown_timeout": self.pool.shutdown_timeout,
            },
            "rendering": {
                "iframe_base": self.rendering.iframe_base,
                "container": self.rendering.container,
            },
            "defaults": {
                "language": self.defaults.language,
                "country": self.defaults.country,
                "view": self.defaults.view,
            },
            "fetch": {
                "timeout": self.fetch.timeout,
                "cache_ttl": self.fetch.cache_ttl,
                "max_bytes": self.fetch.max_bytes,
                "cache_max_entries": self.fetch.cache_max_entries,
                "allow_files": self.fetch.allow_files,
                "blacklist": list(self.fetch.blacklist),
            },
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary."""
        pool_data = data.get("pool") or {}
        rendering_data = data.get("rendering") or {}
        defaults_data = data.get("defaults") or {}
        fetch_data = data.get("fetch") or {}
        logging_data = data.get("logging") or {}

        return cls(
            pool=PoolConfig(
                workers=int(pool_data.get("workers", 8)),
                shutdown_timeout=float(pool_data.get("shutdown_timeout", 10.0)),
            ),
            rendering=RenderingConfig(
                iframe_base=rendering_data.get("iframe_base", "/gadgets/ifr"),
                container=rendering_data.get("container", "default"),
            ),
            defaults=DefaultsConfig(
                language=defaults_data.get("language", "all"),
                country=defaults_data.get("country", "ALL"),
                view=defaults_data.get("view", DEFAULT_VIEW),
            ),
            fetch=FetchConfig(
                timeout=float(fetch_data.get("timeout", 5.0)),
                cache_ttl=float(fetch_data.get("cache_ttl", 300.0)),
                max_bytes=int(fetch_data.get("max_bytes", 1024 * 1024)),
                cache_max_entries=int(fetch_data.get("cache_max_entries", 1024)),
                allow_files=_as_bool(fetch_data.get("allow_files", False), "fetch.allow_files"),
                blacklist=_as_list(fetch_data.get("blacklist"), "fetch.blacklist"),
            ),
            logging=LoggingConfig(
                level=str(logging_data.get("level", "INFO")).upper(),
                format=logging_data.get("format", "console"),
            ),
        )


def _as_list(value: Any, key: str) -> List[str]:
    """A pattern list; a scalar string is split on commas like `config set`."""
    if value is None:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    raise ValueError(f"{key} must be a list of patterns, got {type(value).__name__}")


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "yes", "on", "1"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "no", "off", "0", ""):
        return False
    raise ValueError(f"{key} must be true or false, got {value!r}")


# Environment variable -> (section, setting)
ENV_OVERRIDES = {
    "GADGETMETA_WORKERS": ("pool", "workers"),
    "GADGETMETA_SHUTDOWN_TIMEOUT": ("pool", "shutdown_timeout"),
    "GADGETMETA_IFRAME_BASE": ("rendering", "iframe_base"),
    "GADGETMETA_CONTAINER": ("rendering", "container"),
    "GADGETMETA_LANGUAGE": ("defaults", "language"),
    "GADGETMETA_COUNTRY": ("defaults", "country"),
    "GADGETMETA_FETCH_TIMEOUT": ("fetch", "timeout"),
    "GADGETMETA_CACHE_TTL": ("fetch", "cache_ttl"),
    "GADGETMETA_ALLOW_FILES": ("fetch", "allow_files"),
    "GADGETMETA_LOG_LEVEL": ("logging", "level"),
    "GADGETMETA_LOG_FORMAT": ("logging", "format"),
}


class ConfigManager:
    """
    Manages configuration loading and persistence.

    Hierarchy:
      1. Environment variables
      2. Project config (.gadgetmeta/config.yaml)
      3. User config (~/.gadgetmeta/config.yaml)
      4. Defaults
    """

    USER_CONFIG_DIR = Path.home() / ".gadgetmeta"
    USER_CONFIG_FILE = USER_CONFIG_DIR / "config.yaml"
    PROJECT_CONFIG_DIR = ".gadgetmeta"
    PROJECT_CONFIG_FILE = "config.yaml"

    def __init__(self, project_dir: Optional[Path] = None, user_config_path: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self._user_config_path = Path(user_config_path) if user_config_path else self.USER_CONFIG_FILE
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.PROJECT_CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self._user_config_path

    def load(self) -> Config:
        """Load configuration from all sources."""
        if self._config is not None:
            return self._config

        config_data: Dict[str, Any] = {}

        # Layer 1: User config
        config_data = self._merge(config_data, self._read_yaml(self.user_config_path))

        # Layer 2: Project config (higher priority)
        config_data = self._merge(config_data, self._read_yaml(self.project_config_path))

        # Layer 3: Environment overrides
        for env_key, (section, setting) in ENV_OVERRIDES.items():
            if os.environ.get(env_key):
                config_data.setdefault(section, {})[setting] = os.environ[env_key]

        self._config = Config.from_dict(config_data)
        return self._config

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        """Read one YAML layer. Malformed files are skipped with a warning."""
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("config_file_unreadable", path=str(path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("config_file_not_mapping", path=str(path))
            return {}
        return data

    def save_project(self, config: Config):
        """Save configuration to project config file."""
        self.project_config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.project_config_path, 'w') as f:
            yaml.safe_dump(config.to_dict(), f, default_flow_style=False)

        self._config = config

    def save_user(self, config: Config):
        """Save configuration to user config file."""
        self.user_config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.user_config_path, 'w') as f:
            yaml.safe_dump(config.to_dict(), f, default_flow_style=False)

        self._config = config

    def set(self, key: str, value: str, scope: str = "project") -> Optional[str]:
        """
        Set a configuration value.

        Args:
            key: Dot-separated key (e.g., "fetch.timeout")
            value: Value to set
            scope: "project" or "user"

        Returns:
            Error message or None if successful
        """
        parts = key.split(".")
        if len(parts) != 2:
            return f"Invalid key format: {key}. Use 'section.setting' (e.g., 'fetch.timeout')"

        section, setting = parts
        data = self.load().to_dict()

        if section not in data:
            return f"Unknown section: {section}. Valid: {', '.join(data)}"
        if setting not in data[section]:
            valid = ", ".join(data[section])
            return f"Unknown {section} setting: {setting}. Valid: {valid}"

        # from_dict splits list settings on commas and parses booleans
        data[section][setting] = value

        try:
            config = Config.from_dict(data)
        except ValueError as e:
            return f"Invalid value for {key}: {e}"

        error = config.validate()
        if error:
            return error

        if scope == "project":
            self.save_project(config)
        else:
            self.save_user(config)

        return None

    def get(self, key: str) -> Optional[str]:
        """Get a configuration value."""
        parts = key.split(".")
        if len(parts) != 2:
            return None

        section, setting = parts
        value = self.load().to_dict().get(section, {}).get(setting)
        if value is None:
            return None
        if isinstance(value, list):
            return ",".join(value)
        if isinstance(value, bool):
            return str(value).lower()
        return str(value)

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result


def get_config(project_dir: Optional[Path] = None) -> Config:
    """Convenience function to get config."""
    return ConfigManager(project_dir).load()
