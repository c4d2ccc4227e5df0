from pydantic_settings import BaseSettings
from sqlalchemy import URL


class Settings(BaseSettings):
    """
    Application configuration settings loaded from environment variables
    or a `.env` file. Provides strongly typed access to environment values.
    """

    FRONTEND_URL: str = "http://localhost:3000"
    """Base URL of the frontend client application (allowed by CORS)."""

    DB_DRIVER_NAME: str = "sqlite"
    """Database driver (e.g., `postgresql+psycopg`, `mysql+pymysql`, `sqlite`)."""

    DB_USERNAME: str | None = None
    """Database username credential."""

    DB_PASSWORD: str | None = None
    """Database password credential."""

    DB_HOST: str | None = None
    """Hostname or IP address of the database server."""

    DB_DATABASE_NAME: str = "projectchat.db"
    """Name of the application's database (file path for SQLite)."""

    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    """Duration (in minutes) before access tokens expire."""

    SECRET_KEY: str = "change-me-in-production"
    """Secret key used for signing tokens."""

    ALGORITHM: str = "HS256"
    """Cryptographic algorithm used for JWT signing."""

    API_KEY: str = ""
    """OpenAI API key used by the completion provider."""

    OPEN_AI_MODEL: str = "gpt-3.5-turbo"
    """OpenAI model name, also recorded on every persisted chat turn."""

    CHAT_TEMPERATURE: float = 0.7
    """Sampling temperature sent with every completion request."""

    CHAT_MAX_TOKENS: int = 50
    """Output length cap sent with every completion request."""

    COMPLETION_TIMEOUT_SECONDS: float = 30.0
    """Upper bound for a single completion call before it counts as a transient failure."""

    RATE_LIMIT: str = "100/15minutes"
    """Requests allowed per client IP across all routes (`limits` notation)."""

    RATE_LIMIT_ENABLED: bool = True
    """Turn the per-IP request limit on or off."""

    LOG_LEVEL: str = "INFO"
    """Root logging level."""

    DEBUG_LOG: bool = False
    """Emit one access log line per HTTP request."""

    @property
    def database_url(self) -> URL:
        """SQLAlchemy URL assembled from the `DB_*` fields."""
        if self.DB_DRIVER_NAME.startswith("sqlite"):
            return URL.create(self.DB_DRIVER_NAME, database=self.DB_DATABASE_NAME)
        return URL.create(
            self.DB_DRIVER_NAME,
            username=self.DB_USERNAME,
            password=self.DB_PASSWORD,
            host=self.DB_HOST,
            database=self.DB_DATABASE_NAME,
        )

    class Config:
        """
        Configuration for Pydantic settings. Loads values from `.env` file by default.
        """
        env_file = ".env"
        extra = "ignore"


# Singleton instance of Settings, ready to be imported across the app
settings = Settings()
"""Defines a Settings object that contains the contents of the .env file"""
