import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

# Package defaults (bundled with code)
PACKAGE_CONFIG_DIR = Path(__file__).parent / "defaults"

# User configs (in project root, gitignored), overridable from the environment
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
CONFIG_DIR_ENV = "FINANCE_DASHBOARD_CONFIG_DIR"


def user_config_dir() -> Path:
    override = os.getenv(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    return PROJECT_ROOT / "config"


class ConfigLoader:
    """Load configuration with user overrides"""

    @staticmethod
    def load_config(config_name: str) -> Dict[str, Any]:
        """
        Load config with fallback: user config -> default config

        Args:
            config_name: Name of the config file (e.g., 'settings.json')

        Raises:
            FileNotFoundError: If no config file was found

        Returns:
            Parsed JSON configuration
        """
        user_config_path = user_config_dir() / config_name
        if user_config_path.exists():
            with open(user_config_path) as f:
                return json.load(f)

        default_config_path = PACKAGE_CONFIG_DIR / config_name
        if default_config_path.exists():
            with open(default_config_path) as f:
                return json.load(f)

        raise FileNotFoundError(
            f"Config file '{config_name}' not found in:\n"
            f" - {user_config_path}\n"
            f" - {default_config_path}"
        )

    @staticmethod
    def load_parsers_config() -> Dict[str, Any]:
        """Load parsers registry configuration"""
        return ConfigLoader.load_config('parsers.json')

    @staticmethod
    def load_settings_config() -> Dict[str, Any]:
        """Load application settings"""
        return ConfigLoader.load_config('settings.json')


@dataclass
class Settings:
    """Application settings after defaults and user overrides are merged"""
    db_path: str = "data/finance.db"
    insight_threshold: int = 5
    distribution_top_n: int = 5
    top_expenses_n: int = 10
    default_categories: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


def load_settings(config: Optional[Dict[str, Any]] = None) -> Settings:
    """
    Build Settings.

    Args:
        config: Optional config dict. If None, loads settings.json through
            the ConfigLoader. Useful for testing with custom configs.
    """
    if config is None:
        config = ConfigLoader.load_settings_config()
    return Settings.from_dict(config)
