"""
Runtime settings for restaurant-costing.

Settings come from environment variables, read when a property is
accessed, so a test can change them with monkeypatch without rebuilding
the Config object.

Environment variables:
    RESTAURANT_COSTING_ENV: "production" (default) or "development"
    RESTAURANT_COSTING_DATABASE_URL: Any SQLAlchemy URL; overrides the SQLite file
    RESTAURANT_COSTING_VAT_RATE: VAT rate as a fraction (default 0.21)
    RESTAURANT_COSTING_LOG_LEVEL: Logging level name (default INFO)
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .constants import DATABASE_FILENAME, DEFAULT_VAT_RATE, USER_DATA_DIRNAME

logger = logging.getLogger(__name__)

ENV_PREFIX = "RESTAURANT_COSTING_"


def _env(name: str) -> Optional[str]:
    return os.environ.get(f"{ENV_PREFIX}{name}")


class Config:
    """
    Settings for one environment.

    Development keeps the database in the project's data/ directory so it
    never mixes with the real one under the user's home.
    """

    def __init__(self, environment: str = "production"):
        self.environment = environment
        if environment == "development":
            self._data_dir = Path(__file__).resolve().parents[2] / "data"
        else:
            self._data_dir = Path.home() / USER_DATA_DIRNAME

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def database_path(self) -> Path:
        return self._data_dir / DATABASE_FILENAME

    @property
    def database_url(self) -> str:
        override = _env("DATABASE_URL")
        if override:
            return override
        return "sqlite:///" + self.database_path.as_posix()

    def ensure_directories(self) -> None:
        """Create the data directory on first use."""
        self._data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def vat_rate(self) -> float:
        """
        VAT added on top of ingredient cost in margin calculations.

        Unparseable or negative values are logged and replaced by the default.
        """
        raw = _env("VAT_RATE")
        if raw is None:
            return DEFAULT_VAT_RATE
        try:
            rate = float(raw)
        except ValueError:
            logger.warning(f"Invalid {ENV_PREFIX}VAT_RATE '{raw}', using default {DEFAULT_VAT_RATE}")
            return DEFAULT_VAT_RATE
        if rate < 0:
            logger.warning(f"Negative {ENV_PREFIX}VAT_RATE '{raw}', using default {DEFAULT_VAT_RATE}")
            return DEFAULT_VAT_RATE
        return rate

    @property
    def log_level(self) -> int:
        """Level for the CLI's root logger; unknown names mean INFO."""
        name = (_env("LOG_LEVEL") or "INFO").upper()
        level = logging.getLevelName(name)
        if isinstance(level, int):
            return level
        logger.warning(f"Invalid {ENV_PREFIX}LOG_LEVEL '{name}', using INFO")
        return logging.INFO

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def __repr__(self) -> str:
        return f"Config(environment='{self.environment}', data_dir='{self._data_dir}')"


_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Return the process-wide Config, creating it on first call.

    Args:
        environment: Environment to create the Config with. Defaults to
            RESTAURANT_COSTING_ENV, then "production". A different value on a
            later call is logged and ignored.
    """
    global _config_instance

    if _config_instance is None:
        _config_instance = Config(environment or _env("ENV") or "production")
    elif environment is not None and environment != _config_instance.environment:
        logger.warning(
            f"get_config() asked for environment='{environment}' while the "
            f"existing config uses '{_config_instance.environment}'; keeping the existing config"
        )
    return _config_instance


def reset_config() -> None:
    """Forget the process-wide Config (tests call this between cases)."""
    global _config_instance
    _config_instance = None
