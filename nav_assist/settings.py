from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
  log_level: str = "INFO"

  # Stadia Maps
  stadia_api_key: str | None = Field(
    default=None,
    description="API key sent with every geocoding and routing request",
  )
  stadia_base_url: str = "https://api.stadiamaps.com"

  # Session tuning
  request_timeout_s: float = Field(default=10.0, gt=0)
  refresh_interval_s: float = Field(default=10.0, gt=0)

  model_config = SettingsConfigDict(
    env_file=(".env", ".env.secrets"),
    env_file_encoding="utf-8",
    extra="ignore",
  )

  def require_api_key(self) -> str:
    """Return the configured API key.

    Raises:
        ValueError: If STADIA_API_KEY is not set in the environment or .env files
    """
    if not self.stadia_api_key:
      raise ValueError("STADIA_API_KEY is not set. Add it to your environment or .env")
    return self.stadia_api_key


settings = Settings()
