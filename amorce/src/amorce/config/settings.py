"""
Configuration management for Amorce.

Hybrid configuration system using YAML files and environment variables.
Priority: Environment variables > YAML config > Pydantic defaults

Listen address and database credentials are not part of Settings:
they are read by ConfigResolver so their fallback and failure rules
stay in one place.
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# amorce/src/amorce/config/settings.py -> amorce/
SERVICE_ROOT = Path(__file__).resolve().parent.parent.parent.parent
CONFIG_DIR = SERVICE_ROOT / "config"


class Settings(BaseSettings):
    """
    Amorce configuration schema.

    Loads configuration from:
    1. Environment variables (highest priority)
    2. YAML configuration files
    3. Pydantic defaults (lowest priority)

    Configuration files:
        - config/default.yaml: Base defaults
        - config/<ENV>.yaml: Environment overrides
    """

    model_config = SettingsConfigDict(
        case_sensitive=True,
        extra="allow",
    )

    # Application
    APP_NAME: str = "Amorce"
    APP_VERSION: str = "0.1.0"
    ENV: str = Field(default="development", description="Environment name")

    # Dotenv file consulted before configuration is resolved
    ENV_FILE: str = Field(default=".env", description="Path to .env file")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    JSON_LOGS: Optional[bool] = Field(
        default=None,
        description="Force JSON logs on or off (default: JSON in production)",
    )

    # Database
    DATABASE_ENABLED: bool = Field(
        default=True,
        description="Resolve credentials and connect to PostgreSQL on startup",
    )
    DATABASE_ECHO: bool = Field(default=False)

    # Observability
    METRICS_ENABLED: bool = Field(
        default=True,
        description="Expose Prometheus metrics on /metrics",
    )
    METRICS_PREFIX: str = Field(
        default="app",
        pattern=r"^[a-zA-Z_][a-zA-Z0-9_]*$",
        description="Prefix for HTTP metric names",
    )

    # API documentation
    DOCS_ENABLED: bool = Field(
        default=True,
        description="Serve Swagger UI and the OpenAPI document",
    )
    DOCS_URL: str = Field(default="/swagger-ui")
    OPENAPI_URL: str = Field(default="/api-docs/openapi.json")

    # Graceful Shutdown
    SHUTDOWN_TIMEOUT: Optional[int] = Field(
        default=30,
        ge=1,
        description="Seconds to wait for in-flight requests (None = no limit)",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"Invalid LOG_LEVEL. Must be one of: {allowed}")
        return v_upper

    @property
    def use_json_logs(self) -> bool:
        """JSON logs unless overridden; production defaults to JSON."""
        if self.JSON_LOGS is not None:
            return self.JSON_LOGS
        return self.ENV == "production"


def load_env_file(env_file: Optional[str] = None) -> bool:
    """
    Load a .env file into the process environment.

    Variables already set in the environment are left untouched.

    Args:
        env_file: Path to the file (default: $ENV_FILE or ".env")

    Returns:
        True if the file was found and loaded, False otherwise
    """
    path = Path(env_file or os.getenv("ENV_FILE", ".env"))
    if not path.is_file():
        return False
    load_dotenv(path, override=False)
    return True


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path, "r") as f:
        loaded = yaml.safe_load(f)
    return loaded or {}


def load_config(
    config_file: Optional[str] = None,
    env: Optional[str] = None,
    config_dir: Optional[Path] = None,
) -> Settings:
    """
    Load configuration from YAML files and environment variables.

    Priority: ENV vars > environment-specific YAML > default YAML > defaults

    Args:
        config_file: Optional YAML config filename override
        env: Optional environment name override
        config_dir: Optional directory holding the YAML files

    Returns:
        Settings instance

    Raises:
        ValidationError: If a configured value is invalid
    """
    config_dir = config_dir or CONFIG_DIR
    environment = env or os.getenv("ENV", "development")

    merged_config = _read_yaml(config_dir / "default.yaml")

    config_file = config_file or f"{environment}.yaml"
    for key, value in _read_yaml(config_dir / config_file).items():
        merged_config[key] = value

    # Environment variables must win over YAML: drop keys the
    # environment already provides so BaseSettings reads them instead.
    for key in list(merged_config):
        if key in os.environ:
            del merged_config[key]

    if env is not None:
        merged_config["ENV"] = env

    return Settings(**merged_config)


# Global settings singleton (lazy initialization)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or initialize global settings singleton.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def override_settings(new_settings: Settings) -> None:
    """
    Override global settings (for testing).

    Args:
        new_settings: New Settings instance to use
    """
    global _settings
    _settings = new_settings


def reset_settings() -> None:
    """
    Reset settings to force re-initialization (for testing).

    This allows tests to change environment variables and reload config.
    """
    global _settings
    _settings = None
