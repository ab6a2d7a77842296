# Process-wide configuration, read once from the environment (or .env) at startup.
# The Settings object is passed explicitly to create_app(); nothing reads os.environ after that.
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Document store
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "luxehomes"
    MONGODB_TIMEOUT_MS: int = 5000

    # Bearer tokens
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_TTL_SECONDS: int = 60 * 60 * 24  # 24 hours

    # Bootstrap
    SEED_SAMPLE_PROPERTIES: bool = True
    ADMIN_EMAIL: str = "admin@luxehomes.com"
    ADMIN_PASSWORD: str = "admin123"

    # Comma-separated list; '*' maps to the local dev origins (see cors_origins)
    CORS_ORIGINS: str = ""

    # Rate limiting (opt-in, fail-open)
    REDIS_ENABLED: bool = False
    REDIS_URL: str = "redis://localhost:6379/0"
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_LOGIN_PER_WINDOW: int = 10
    RATE_LIMIT_REGISTER_PER_WINDOW: int = 5
    RATE_LIMIT_WRITE_PER_WINDOW: int = 30

    @property
    def cors_origins(self) -> List[str]:
        """
        Parse CORS_ORIGINS.

        '*' cannot be combined with allow_credentials=True, so it falls back to
        explicit localhost origins, as does an empty value.
        """
        default_dev_origins = [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
        ]
        origins = [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]
        if not origins or "*" in origins:
            return default_dev_origins
        return origins
