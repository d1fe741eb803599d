from pydantic_settings import BaseSettings, SettingsConfigDict


class SphinxQLBaseSettings(BaseSettings):
    """Shared source configuration: environment variables, then ``.env``, then defaults."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def get_env_prefix(cls) -> str:
        return cls.model_config.get("env_prefix", "")

    def describe(self) -> dict:
        """Effective values keyed by their environment variable names."""
        prefix = self.get_env_prefix()
        return {f"{prefix}{name}".upper(): value for name, value in self.model_dump().items()}
