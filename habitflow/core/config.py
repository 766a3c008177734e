from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "postgresql+psycopg://habitflow:habitflow@db:5432/habitflow"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://myapp.com,https://api.myapp.com"
    CORS_ORIGINS: str = "*"

    # IANA zone used to resolve "today" when a request sends no X-Timezone.
    DEFAULT_TIMEZONE: str = "UTC"

    # Vitality model
    HEALTH_INITIAL: int = 100
    HEALTH_RECOVERY: int = 10
    HEALTH_DECAY: int = 15

    HEATMAP_WINDOW_DAYS: int = 90
    STREAK_MAX_LOOKBACK_DAYS: int = 365

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
