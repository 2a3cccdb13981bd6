from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = "sqlite:///./links.db"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    # Metadata extraction
    METADATA_TIMEOUT: float = 5.0
    METADATA_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    )
    FAVICON_SERVICE_URL: str = "https://www.google.com/s2/favicons?domain={domain}&sz=32"

    # Insert the example links into an empty table on startup
    SEED_EXAMPLES: bool = True

    class Config:
        env_file = ".env"


settings = Settings()
