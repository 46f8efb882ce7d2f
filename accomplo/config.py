from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    database_url: str = "sqlite:///accomplo.db"

    # "sql" (relational tables) | "local" (JSON key-value file)
    backend: str = "sql"
    local_store_path: str = "accomplo_local.json"

    # session tokens
    secret_key: str = "dev-secret-change-me-0123456789abcdef"
    token_ttl_days: int = 7
    min_password_length: int = 6

    # fallback zone for week bucketing when the caller doesn't send ?tz=
    timezone: str = "UTC"

    log_level: str = "INFO"
    cors_origins: str = "*"   # comma-separated

    # load .env, ignore unknown keys so new vars don't break boot
    model_config = SettingsConfigDict(
        env_prefix="ACCOMPLO_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

settings = Settings()
