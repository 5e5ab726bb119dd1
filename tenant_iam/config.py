from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "Tenant IAM"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # "text" | "json"

    # Database settings
    database_url: str = "sqlite+aiosqlite:///./tenant_iam.db"

    # Security settings
    secret_key: str = "change-me"
    access_token_expire_minutes: int = 60 * 24
    bcrypt_rounds: int = 12

    # CORS settings
    allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()
