"""
OrderHub settings, read once from a YAML file.

The file is ``config.yaml`` at the project root unless ``ORDERHUB_CONFIG``
points elsewhere. Relative paths inside it (data dir, log file) resolve
against the directory holding the file.
"""

import yaml
import os
from pathlib import Path
from typing import Any, Optional, Callable
import logging

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ORDERHUB_CONFIG"
DB_ENV_VAR = "ORDERHUB_DB"
APP_VERSION = "1.0.0"

REQUIRED_SECTIONS = ('general', 'orders', 'sync')
TRUTHY = ('true', 'yes', '1', 'on')

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Config:
    """Singleton configuration manager."""

    _instance: Optional['Config'] = None
    _data: dict = {}
    _base_dir: Path = _PROJECT_ROOT

    def __new__(cls, config_path: Optional[str] = None) -> 'Config':
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._load(config_path or os.environ.get(CONFIG_ENV_VAR))
            cls._instance = instance
        return cls._instance

    def _load(self, config_path: Optional[str]) -> None:
        path = Path(config_path) if config_path else _PROJECT_ROOT / "config.yaml"
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        missing = [s for s in REQUIRED_SECTIONS if s not in data]
        if missing:
            raise ValueError(f"Missing required config sections: {missing}")

        self._data = data
        self._base_dir = path.resolve().parent
        logger.info(f"Configuration loaded from {path}")

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded settings; the next access reads the file again."""
        cls._instance = None

    def get(self, *keys: str, default: Any = None) -> Any:
        """
        Walk nested sections.
        Example: config.get('orders', 'default_currency')
        """
        value = self._data
        for key in keys:
            if not isinstance(value, dict) or key not in value:
                return default
            value = value[key]
        return value

    def _typed(self, keys, default, convert: Callable[[Any], Any]) -> Any:
        value = self.get(*keys)
        return default if value is None else convert(value)

    def get_int(self, *keys: str, default: int = 0) -> int:
        return self._typed(keys, default, int)

    def get_float(self, *keys: str, default: float = 0.0) -> float:
        return self._typed(keys, default, float)

    def get_bool(self, *keys: str, default: bool = False) -> bool:
        """YAML booleans, or strings like "yes"/"on"/"1"."""
        return self._typed(
            keys, default,
            lambda v: v.lower() in TRUTHY if isinstance(v, str) else bool(v)
        )

    def get_list(self, *keys: str, default: Optional[list] = None) -> list:
        """A scalar is promoted to a one-element list."""
        return self._typed(keys, default or [], lambda v: v if isinstance(v, list) else [v])

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def data_dir(self) -> Path:
        """Data directory, created on first access."""
        path = self._base_dir / self.get('general', 'data_dir', default='data')
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def db_path(self) -> Path:
        """SQLite file. ``ORDERHUB_DB`` overrides the configured name."""
        override = os.environ.get(DB_ENV_VAR)
        if override:
            return Path(override)
        return self.data_dir / self.get('general', 'database', default='orderhub.db')

    @property
    def log_path(self) -> Optional[Path]:
        """Log file, or None when ``general.log_file`` is empty."""
        log_name = self.get('general', 'log_file', default='orderhub.log')
        if not log_name:
            return None
        return self._base_dir / log_name


def get_config() -> Config:
    """Get the global config instance."""
    return Config()
