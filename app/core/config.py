from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

_DESKTOP_CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Runtime
    environment: str = "production"
    host: str = "0.0.0.0"
    port: int = 3001
    cors_allow_origins: list[str] = ["*"]

    # HTTP fetcher
    http_timeout: float = 5.0
    http_max_redirects: int = 20
    http_verify_tls: bool = False  # metadata is best-effort; untrusted certs are accepted
    http_user_agent: str = _DESKTOP_CHROME_UA

    # Logging
    log_level: str = "INFO"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


settings = Settings()
