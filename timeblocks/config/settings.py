# timeblocks/config/settings.py
from urllib.parse import quote_plus

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    environment: str = "development"
    debug: bool = False

    # database_url wins; otherwise db_host builds a PostgreSQL URL, else local SQLite
    database_url: str | None = None
    db_host: str | None = None
    db_port: int = 5432
    db_name: str = "timeblocks"
    db_user: str = "timeblocks"
    db_password: str = ""
    auto_create_schema: bool = True

    # Secrets may be url-safe base64, standard base64 or plain text.
    # Blank => random per-process key (single instance dev only).
    auth_access_secret: str = ""
    auth_refresh_secret: str = ""
    auth_access_ttl_minutes: int = 15
    auth_refresh_ttl_days: int = 30
    auth_refresh_retention_days: int = 30
    auth_clock_skew_seconds: int = 0

    jwt_issuer: str = "timeblocks-api"
    jwt_audience: str = "timeblocks-web"

    auth_cookie_domain: str = ""
    auth_cookie_secure: bool = False
    auth_cookie_same_site: str = "Lax"

    auth_rate_limit_window_ms: int = 60_000
    auth_rate_limit_max: int = 20

    auth_code_ttl_minutes: int = 30
    auth_notifications_log_codes: bool = True

    password_hash_iterations: int = 600_000

    cors_origins_raw: str = "http://localhost:5173,http://127.0.0.1:5173"

    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("db_host", "db_name", "db_user", "db_password", "auth_access_secret", "auth_refresh_secret", mode="before")
    @classmethod
    def strip_strings(cls, v):
        if isinstance(v, str):
            return v.strip().strip('"').strip("'")
        return v

    @field_validator("auth_cookie_same_site")
    @classmethod
    def normalize_same_site(cls, v: str) -> str:
        value = (v or "Lax").strip().capitalize()
        if value not in ("Lax", "Strict", "None"):
            raise ValueError("auth_cookie_same_site must be Lax, Strict or None")
        return value

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        if not self.db_host:
            return "sqlite:///./timeblocks.db"

        user = quote_plus(self.db_user)
        password = quote_plus(self.db_password)
        return f"postgresql+psycopg2://{user}:{password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins_raw.split(",") if o.strip()]

    @property
    def access_ttl_seconds(self) -> int:
        return self.auth_access_ttl_minutes * 60

    @property
    def refresh_ttl_seconds(self) -> int:
        return self.auth_refresh_ttl_days * 24 * 3600
