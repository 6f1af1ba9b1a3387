from pydantic import model_validator
from pydantic_settings import BaseSettings

from bagshub.exceptions import ConfigurationError

DEFAULT_JWT_SECRET = "change-me"


class Settings(BaseSettings):
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_name: str = "bagshub"
    database_url_override: str = ""
    bags_api_url: str = "https://public-api-v2.bags.fm/api/v1"
    bags_api_key: str = ""
    dexscreener_api_url: str = "https://api.dexscreener.com"
    bags_only_mints: bool = False  # restrict DexScreener results to mints ending in "BAGS"
    rate_limit_reserve: int = 10
    http_timeout: float = 15.0
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_expires_days: int = 7
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @model_validator(mode="after")
    def _require_production_secrets(self) -> "Settings":
        if self.is_production and self.jwt_secret in ("", DEFAULT_JWT_SECRET):
            raise ConfigurationError("JWT_SECRET must be set in production")
        return self

    class Config:
        env_file = ".env"


settings = Settings()
