from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal, Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    PROJECT_NAME: str = "Socially Creator Platform"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: Literal["development", "test", "production"] = "development"
    LOG_LEVEL: str = "INFO"

    # Database
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_DB: str = "socially"
    DATABASE_URL: Optional[str] = None
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    @property
    def async_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    # Sessions (JWT in a cookie or bearer header)
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30 # 30 days
    SESSION_COOKIE_NAME: str = "session_token"

    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    FRONTEND_URL: str = "http://localhost:3000"
    RATE_LIMIT_PER_MINUTE: int = 100
    RATE_LIMIT_LOGIN_PER_MINUTE: int = 30

    # B2 Storage
    B2_APPLICATION_KEY_ID: Optional[str] = None
    B2_APPLICATION_KEY: Optional[str] = None
    B2_BUCKET_NAME: str = "socially-uploads"
    B2_ENDPOINT: str = "https://f002.backblazeb2.com"
    DOWNLOAD_URL_EXPIRES_SECONDS: int = 3600
    MOCK_UPLOAD_BASE_URL: str = "http://localhost:8000"

    # Stripe
    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_CONNECT_CLIENT_ID: Optional[str] = None
    STRIPE_WEBHOOK_SECRET: Optional[str] = None

    # Identity provider (Google sign-in)
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None

    # Outbound e-mail (verification links)
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    MAIL_FROM: str = "noreply@socially.app"
    EMAIL_VERIFICATION_EXPIRE_HOURS: int = 24

    # Dev-only admin endpoints (wipe / seed)
    SEED_TOKEN: str = "dev-seed-token-123"

settings = Settings()
