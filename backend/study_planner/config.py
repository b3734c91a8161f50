"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent
DEV_ENVIRONMENTS = ("dev", "development", "test")


class Settings:
    ENV: str
    DATABASE_URL: str
    JWT_SECRET: str
    JWT_ALGORITHM: str
    JWT_EXPIRE_DAYS: int
    BCRYPT_ROUNDS: int
    HOST: str
    PORT: int
    FRONTEND_URL: str
    ALLOWED_ORIGINS: list
    DB_RETRY_DELAY_SECONDS: float
    ALLOW_CROSS_USER_LOOKUP: bool
    ALLOW_INSECURE_JWT: bool
    LOG_LEVEL: str

    def __init__(self):
        self.ENV = os.getenv("ENV", "development").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'study_planner.db'}")
        self.JWT_SECRET = os.getenv("JWT_SECRET", "change_me_for_prod")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.JWT_EXPIRE_DAYS = int(os.getenv("JWT_EXPIRE_DAYS", "7"))
        self.BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))
        self.HOST = os.getenv("HOST", "0.0.0.0")
        self.PORT = int(os.getenv("PORT", "5000"))
        self.FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
        self.ALLOWED_ORIGINS = self._origins(os.getenv("ALLOWED_ORIGINS", ""))
        self.DB_RETRY_DELAY_SECONDS = float(os.getenv("DB_RETRY_DELAY_SECONDS", "5"))
        self.ALLOW_CROSS_USER_LOOKUP = os.getenv("ALLOW_CROSS_USER_LOOKUP", "false").lower() == "true"
        self.ALLOW_INSECURE_JWT = os.getenv("ALLOW_INSECURE_JWT", "false").lower() == "true"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self._validate()

    def _origins(self, raw: str) -> list:
        # FRONTEND_URL is always allowed; order is kept for the 403 echo
        origins = [self.FRONTEND_URL.rstrip("/")]
        for origin in raw.split(","):
            origin = origin.strip().rstrip("/")
            if origin and origin not in origins:
                origins.append(origin)
        return origins

    def _validate(self):
        if self.ENV not in DEV_ENVIRONMENTS and not self.ALLOW_INSECURE_JWT and self.JWT_SECRET == "change_me_for_prod":
            raise RuntimeError("JWT_SECRET must be set to a non-default value in non-dev environments")
        if self.BCRYPT_ROUNDS < 4 or self.BCRYPT_ROUNDS > 31:
            raise RuntimeError("BCRYPT_ROUNDS must be between 4 and 31")


settings = Settings()
