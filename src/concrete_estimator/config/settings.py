"""
Centralized settings and path configuration for the concrete estimator.
"""
import logging
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class EnvSettings(BaseSettings):
    """Environment overrides, read from CONCRETE_ESTIMATOR_* variables."""

    ROOT: Optional[Path] = None
    UNIT_COSTS: Optional[Path] = None
    DEFAULT_DRY_FACTOR: float = 1.54
    DEFAULT_WASTAGE_FACTOR: float = 5.0

    # Runner defaults (scripts/run_api.py, scripts/run_app.py)
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    UI_PORT: int = 8501

    model_config = SettingsConfigDict(env_prefix="CONCRETE_ESTIMATOR_", extra="ignore")


def get_project_root(env: Optional[EnvSettings] = None) -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    env = env or EnvSettings()
    if env.ROOT:
        return env.ROOT.resolve()

    # Walk up from this file to find the project root
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists() or (parent / 'data' / 'unit_costs.csv').exists():
            return parent
    # Fallback to 4 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Optional flat unit-cost overrides (material,unit,unit_cost)
    unit_costs_csv: Optional[Path] = None

    # Calculation defaults
    default_dry_factor: float = 1.54
    default_wastage_factor: float = 5.0
    bag_size_kg: float = 50.0

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        env = EnvSettings()
        root = project_root or get_project_root(env)
        unit_costs_csv = env.UNIT_COSTS or root / 'data' / 'unit_costs.csv'

        logger.debug("Settings loaded from %s (unit costs: %s)", root, unit_costs_csv)
        return cls(
            project_root=root,
            unit_costs_csv=unit_costs_csv,
            default_dry_factor=env.DEFAULT_DRY_FACTOR,
            default_wastage_factor=env.DEFAULT_WASTAGE_FACTOR,
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
