from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator

DEV_SECRET_KEY = "dev-secret-change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "OceanView Cruises API"
    # Comma-separated origins for CORS (e.g. https://oceanview.example,https://admin.oceanview.example). If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    SECRET_KEY: str = DEV_SECRET_KEY
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    PASSWORD_RESET_TOKEN_EXPIRE_MINUTES: int = 120

    # memory|sql
    STORAGE_BACKEND: str = "memory"
    DATABASE_URL: str = "sqlite:///./oceanview.db"
    SEED_SAMPLE_DATA: bool = True
    DB_WAIT_TIMEOUT: int = 60  # seconds start_api.py waits for Postgres

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v

    @field_validator("STORAGE_BACKEND", mode="after")
    @classmethod
    def check_storage_backend(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if v not in ("memory", "sql"):
            raise ValueError("STORAGE_BACKEND must be 'memory' or 'sql'")
        return v

    @model_validator(mode="after")
    def require_real_secret_in_production(self):
        if self.ENV.lower() == "production" and self.SECRET_KEY == DEV_SECRET_KEY:
            raise ValueError("SECRET_KEY must be set in production")
        return self

    # Shared secret the payment gateway sends in X-Webhook-Secret. Empty disables the webhook.
    PAYMENT_WEBHOOK_SECRET: str = ""
    DEFAULT_CURRENCY: str = "USD"

    REDIS_URL: str = "redis://localhost:6379/0"

    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 25
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "bookings@oceanview.local"

    SENDGRID_API_KEY: str = ""
    SENDGRID_FROM_EMAIL: str = ""

    CLIENT_BASE_URL: str = ""  # e.g. https://oceanview.example - used in reset links and e-mails

    NOTIFICATIONS_ENABLED: bool = False
    REMINDER_DAYS_BEFORE_DEPARTURE: int = 7

    @property
    def expose_reset_token(self) -> bool:
        """Return reset tokens in the API response only on local setups that send no mail."""
        return self.ENV.lower() != "production" and not self.NOTIFICATIONS_ENABLED


settings = Settings()
