from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    # Database
    database_url: str = "postgresql+asyncpg://localhost/jobly"
    auto_create_tables: bool = True

    # Auth
    secret_key: str = "secret-dev"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    bcrypt_work_factor: int = 12

    # App
    allowed_origins: str = ""  # comma-separated
    debug: bool = False


settings = Settings()
