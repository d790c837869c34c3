from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    APP_NAME: str = "Blip"

    # Session Management (pending OAuth state only)
    SESSION_COOKIE_NAME: str = "blip_session"
    SESSION_MAX_AGE_SECONDS: int = 600
    SESSION_HTTPS_ONLY: bool = False  # Set to True in production

    # Where OAuth callbacks send the browser once a platform is connected
    LANDING_URL: str = "/"

    # Composer uploads
    UPLOAD_DIR: str = "public/uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Security
    SECRET_KEY: str = "your-secret-key-here"  # Change this in production!

    class Config:
        env_file = ".env"
        extra = "ignore"  # Allow extra fields from environment variables

@lru_cache()
def get_settings():
    return Settings()
