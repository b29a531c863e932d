"""
Configuration management for the FastAPI application.
Uses Pydantic Settings for environment variable management.
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    API_TITLE: str = "Studio CMS API"
    API_VERSION: str = "0.1.0"
    API_DESCRIPTION: str = "Admin API for the photography studio marketing site"

    # CORS Configuration
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Database Configuration (Supabase PostgreSQL)
    DATABASE_URL: str = ""

    # Cloudinary Configuration
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""
    CLOUDINARY_API_BASE: str = "https://api.cloudinary.com"
    CLOUDINARY_UPLOAD_FOLDER: str = "photography"

    # Asset cleanup tuning
    CLOUDINARY_DELETE_CONCURRENCY: int = 8
    CLOUDINARY_TIMEOUT_SECONDS: float = 15.0
    CLOUDINARY_MAX_RETRIES: int = 3
    CLOUDINARY_RETRY_BACKOFF_SECONDS: float = 1.0

    # Admin Password
    # Should be bcrypt hashed password (see generate_password_hash.py)
    ADMIN_PASSWORD_HASH: str = ""

    # JWT Configuration
    # SECRET_KEY should be a long random string (e.g., generated with: openssl rand -hex 32)
    JWT_SECRET_KEY: str = "your-secret-key-change-this-in-production-use-openssl-rand-hex-32"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Rate limiting (login brute force protection)
    RATE_LIMIT_ENABLED: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings


# Global settings instance
settings = Settings()
