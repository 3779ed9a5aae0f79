# backend/stockmaster/config.py
from __future__ import annotations

import os
import tempfile

from dotenv import load_dotenv
from sqlalchemy.engine import URL

BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# .env lives next to the backend package; real environment variables win.
load_dotenv(os.path.join(BACKEND_DIR, ".env"))


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def build_database_uri() -> str:
    """
    Resolve the store URL.

    DATABASE_URL wins. Otherwise DB_HOST/DB_USER/DB_PASSWORD/DB_NAME describe a
    MySQL server. With neither, a local SQLite file is used.
    """
    url = os.environ.get("DATABASE_URL")
    if url:
        return url

    host = os.environ.get("DB_HOST")
    if host:
        user = os.environ.get("DB_USER", "root")
        password = os.environ.get("DB_PASSWORD", "")
        name = os.environ.get("DB_NAME", "StockMaster")
        port = _env_int("DB_PORT", 3306)
        # URL.create quotes reserved characters in the credentials
        return URL.create(
            "mysql+pymysql",
            username=user,
            password=password or None,
            host=host,
            port=port,
            database=name,
        ).render_as_string(hide_password=False)

    return "sqlite:///" + os.path.join(BACKEND_DIR, "stockmaster.sqlite3")


def build_engine_options(uri: str) -> dict:
    # SQLite uses a single-file pool; sizing options do not apply there.
    if uri.startswith("sqlite"):
        return {}
    return {
        "pool_pre_ping": True,
        "pool_recycle": 300,
        "pool_size": _env_int("DB_POOL_SIZE", 10),
        "max_overflow": _env_int("DB_MAX_OVERFLOW", 0),
        "pool_timeout": _env_int("DB_POOL_TIMEOUT", 30),
    }


class Config:
    APP_ENV = os.environ.get("APP_ENV", "production")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    PORT = _env_int("PORT", 5000)

    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = build_database_uri()
    SQLALCHEMY_ENGINE_OPTIONS = build_engine_options(SQLALCHEMY_DATABASE_URI)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer tokens
    JWT_SECRET = os.environ.get("JWT_SECRET", "your-secret-key")
    JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_HOURS = _env_int("JWT_EXPIRE_HOURS", 24)
    BCRYPT_ROUNDS = _env_int("BCRYPT_ROUNDS", 12)

    # Profile pictures are served from /uploads/<filename>
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", os.path.join(BACKEND_DIR, "uploads"))
    MAX_UPLOAD_BYTES = 5 * 1024 * 1024
    MAX_CONTENT_LENGTH = MAX_UPLOAD_BYTES + 64 * 1024

    CORS_ORIGINS = [
        o.strip()
        for o in os.environ.get(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000",
        ).split(",")
        if o.strip()
    ]


class TestConfig(Config):
    TESTING = True
    APP_ENV = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    JWT_SECRET = "test-secret"
    BCRYPT_ROUNDS = 4
    UPLOAD_FOLDER = os.path.join(tempfile.gettempdir(), "stockmaster-test-uploads")
