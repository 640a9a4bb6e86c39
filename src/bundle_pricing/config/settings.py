"""
Centralized settings and path configuration for bundle pricing.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Service catalog CSV
    services_csv: Path

    # Business currency (ISO 4217, case-insensitive)
    currency: str = 'eur'

    log_level: str = 'INFO'

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()

        default_catalog = Path(__file__).resolve().parent.parent / 'data' / 'services.csv'
        services_csv = os.environ.get('BUNDLE_PRICING_SERVICES_CSV')

        return cls(
            project_root=root,
            services_csv=Path(services_csv) if services_csv else default_catalog,
            currency=os.environ.get('BUNDLE_PRICING_CURRENCY', 'eur').lower(),
            log_level=os.environ.get('BUNDLE_PRICING_LOG_LEVEL', 'INFO').upper(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
