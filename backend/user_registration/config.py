# user_registration/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "User Registration API"
    env: str = os.getenv("ENV", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for frontend
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:3001",
    ]

    # Database (any Tortoise-supported URL: sqlite://, postgres://, mysql://)
    database_url: str = os.getenv("DATABASE_URL", "sqlite://db.sqlite3")
    # Create tables on startup instead of relying on Aerich migrations (dev only)
    generate_schemas: bool = _env_flag("GENERATE_SCHEMAS", "false")

    # JWT settings
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    jwt_alg: str = os.getenv("JWT_ALG", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

    # Password hashing work factor (bcrypt log2 rounds)
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Optional bootstrap admin, created on startup when no admin exists
    admin_email: str = os.getenv("ADMIN_EMAIL", "admin@example.com")
    admin_password: str | None = os.getenv("ADMIN_PASSWORD")

settings = Settings()  # Instantiate configuration
