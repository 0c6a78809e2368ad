import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv
from fastapi.security import HTTPBearer

BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env explicitly from project root
load_dotenv(BASE_DIR / ".env")

DEV_JWT_SECRET = "dev-secret-change-me"


def _split_csv(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    """Immutable runtime configuration handed to each service at construction."""

    PROJECT_NAME: str = "Accounts Backend"
    APP_ENV: str = "development"

    DATABASE_URL: str = "sqlite:///./accounts.db"

    JWT_SECRET: str = DEV_JWT_SECRET
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    OAUTH_STATE_EXPIRE_MINUTES: int = 10

    VERIFICATION_CODE_EXPIRE_MINUTES: int = 10
    RESET_TOKEN_EXPIRE_MINUTES: int = 60

    FRONTEND_URL: str = "http://localhost:3000"

    GOOGLE_CLIENT_ID: str | None = None
    GOOGLE_CLIENT_SECRET: str | None = None
    GOOGLE_REDIRECT_URI: str = "http://localhost:8000/auth/google/callback"

    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASS: str | None = None
    FROM_EMAIL: str | None = None

    ADMIN_EMAIL: str | None = None
    ADMIN_PASSWORD: str | None = None

    LOG_LEVEL: str = "INFO"
    cors_origins: tuple[str, ...] = field(default_factory=lambda: ("*",))

    @property
    def google_configured(self) -> bool:
        return bool(self.GOOGLE_CLIENT_ID and self.GOOGLE_CLIENT_SECRET)

    @property
    def smtp_configured(self) -> bool:
        return bool(self.SMTP_HOST and self.FROM_EMAIL)

    @classmethod
    def from_env(cls) -> "Settings":
        app_env = os.getenv("APP_ENV", "development").strip().lower()
        jwt_secret = os.getenv("JWT_SECRET")
        if not jwt_secret:
            if app_env not in {"development", "test"}:
                raise RuntimeError("Missing required environment variable: JWT_SECRET")
            jwt_secret = DEV_JWT_SECRET

        return cls(
            APP_ENV=app_env,
            DATABASE_URL=os.getenv("DATABASE_URL", cls.DATABASE_URL),
            JWT_SECRET=jwt_secret,
            ALGORITHM=os.getenv("ALGORITHM", cls.ALGORITHM),
            ACCESS_TOKEN_EXPIRE_DAYS=int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", cls.ACCESS_TOKEN_EXPIRE_DAYS)),
            VERIFICATION_CODE_EXPIRE_MINUTES=int(
                os.getenv("VERIFICATION_CODE_EXPIRE_MINUTES", cls.VERIFICATION_CODE_EXPIRE_MINUTES)
            ),
            RESET_TOKEN_EXPIRE_MINUTES=int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", cls.RESET_TOKEN_EXPIRE_MINUTES)),
            FRONTEND_URL=os.getenv("FRONTEND_URL", cls.FRONTEND_URL).rstrip("/"),
            GOOGLE_CLIENT_ID=os.getenv("GOOGLE_CLIENT_ID"),
            GOOGLE_CLIENT_SECRET=os.getenv("GOOGLE_CLIENT_SECRET"),
            GOOGLE_REDIRECT_URI=os.getenv("GOOGLE_REDIRECT_URI", cls.GOOGLE_REDIRECT_URI),
            SMTP_HOST=os.getenv("SMTP_HOST"),
            SMTP_PORT=int(os.getenv("SMTP_PORT", cls.SMTP_PORT)),
            SMTP_USER=os.getenv("SMTP_USER"),
            SMTP_PASS=os.getenv("SMTP_PASS"),
            FROM_EMAIL=os.getenv("FROM_EMAIL"),
            ADMIN_EMAIL=os.getenv("ADMIN_EMAIL"),
            ADMIN_PASSWORD=os.getenv("ADMIN_PASSWORD"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", cls.LOG_LEVEL).upper(),
            cors_origins=tuple(_split_csv(os.getenv("CORS_ORIGINS", "*"))),
        )


settings = Settings.from_env()

bearer_scheme = HTTPBearer(auto_error=False)
