"""Configuration management for the users service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import yaml

from .database import resolve_database_path

DEFAULT_ENVIRONMENT = "development"


@dataclass(frozen=True)
class Settings:
    """Settings for one named environment of the service."""

    environment: str
    database_path: Path
    seed: bool = False

    @staticmethod
    def from_dict(environment: str, data: Dict[str, object], base_path: Path | None = None) -> "Settings":
        """Create :class:`Settings` from the raw mapping of one environment."""
        if "database" not in data:
            raise ValueError(f"Environment '{environment}' is missing the 'database' setting")

        raw_path = Path(str(data["database"])).expanduser()
        if raw_path.is_absolute():
            database_path = raw_path.resolve(strict=False)
        elif base_path is not None:
            database_path = (base_path / raw_path).resolve(strict=False)
        else:
            database_path = raw_path.resolve(strict=False)

        return Settings(
            environment=environment,
            database_path=database_path,
            seed=bool(data.get("seed", False)),
        )


def load_settings(config_path: Path, environment: str = DEFAULT_ENVIRONMENT) -> Settings:
    """Load the settings of ``environment`` from a YAML file."""
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    environments = raw.get("environments")
    if not environments:
        raise ValueError("Configuration file must define at least one entry under the 'environments' key")
    if environment not in environments:
        known = ", ".join(sorted(environments))
        raise ValueError(f"Unknown environment '{environment}' (configured: {known})")

    return Settings.from_dict(environment, environments[environment] or {}, base_path=config_path.parent)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "settings.yaml").resolve(strict=False)
    return candidate


def load_settings_from_env(environment: Optional[str] = None) -> Settings:
    """Load settings using the ``USERS_API_*`` environment variables.

    ``USERS_API_DB_PATH`` takes precedence over the configured database path.
    """
    name = environment or os.getenv("USERS_API_ENV") or DEFAULT_ENVIRONMENT
    settings = load_settings(resolve_config_path(os.getenv("USERS_API_CONFIG")), name)

    override = os.getenv("USERS_API_DB_PATH")
    if override:
        settings = Settings(
            environment=settings.environment,
            database_path=resolve_database_path(override),
            seed=settings.seed,
        )
    return settings


__all__ = [
    "DEFAULT_ENVIRONMENT",
    "Settings",
    "load_settings",
    "load_settings_from_env",
    "resolve_config_path",
]
