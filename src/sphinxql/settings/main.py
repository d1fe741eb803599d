from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from .base import SphinxQLBaseSettings


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SphinxSettings(SphinxQLBaseSettings):
    """Connection and runtime configuration for the search engine client.

    Every field can be overridden with a ``SPHINX_`` prefixed environment
    variable or an entry in ``.env`` (e.g. ``SPHINX_HOST``, ``SPHINX_PORT``).
    """

    model_config = SettingsConfigDict(env_prefix="SPHINX_")

    host: str = Field(
        default="127.0.0.1",
        min_length=1,
        description="Host of the SphinxQL (MySQL protocol) listener"
    )
    port: int = Field(
        default=9306,
        ge=1,
        le=65535,
        description="Port of the SphinxQL listener"
    )
    connect_timeout: int = Field(
        default=10,
        ge=1,
        description="Seconds to wait for the connection handshake"
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum number of retry attempts when establishing the connection"
    )
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Initial delay between connection attempts in seconds"
    )
    max_matches: int = Field(
        default=1000,
        ge=1,
        description="Row count rendered in the LIMIT clause when a query has no maximum set"
    )
    pool_pre_ping: bool = Field(
        default=True,
        description="Verify the connection before handing it out"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level used by setup_logging"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept any standard level name, case-insensitively."""
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Invalid log level '{v}'")
        return level

    @property
    def url(self) -> str:
        """SQLAlchemy URL of the listener. Sphinx needs no user or database."""
        return f"mysql+pymysql://{self.host}:{self.port}"


_settings: Optional[SphinxSettings] = None


def get_settings(force_reload: bool = False) -> SphinxSettings:
    """Get the singleton settings instance for the application.

    Args:
        force_reload: If True, creates a new instance even if one already
            exists. Useful for testing or when environment variables have
            changed.

    Returns:
        SphinxSettings: The singleton instance

    Example:
        ```python
        settings = get_settings()
        assert settings is get_settings()
        ```
    """
    global _settings

    if _settings is None or force_reload:
        _settings = SphinxSettings()

    return _settings


def reload_settings() -> SphinxSettings:
    """Force reload of settings from the environment."""
    global _settings
    _settings = None
    return get_settings(force_reload=True)
