# backend/storeconsole/config.py
from __future__ import annotations
import os


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/store_console.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///store_console.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Printed on the catalog PDF when the store profile has no name yet
    STORE_NAME = os.environ.get("STORE_NAME", "General Store")

    # Image host (unsigned upload preset)
    CLOUDINARY_CLOUD_NAME = os.environ.get("CLOUDINARY_CLOUD_NAME", "demo")
    CLOUDINARY_UPLOAD_PRESET = os.environ.get("CLOUDINARY_UPLOAD_PRESET", "store-console")
    CLOUDINARY_FOLDER = os.environ.get("CLOUDINARY_FOLDER", "shop-products")
    UPLOAD_MAX_BYTES = _int_env("UPLOAD_MAX_BYTES", 10 * 1024 * 1024)
    # Request body cap: the image plus room for the multipart envelope
    MAX_CONTENT_LENGTH = UPLOAD_MAX_BYTES + 64 * 1024
    UPLOAD_TIMEOUT_SECONDS = _int_env("UPLOAD_TIMEOUT_SECONDS", 30)

    # Link template for password reset mails, {token} is substituted
    PASSWORD_RESET_URL = os.environ.get(
        "PASSWORD_RESET_URL",
        "http://localhost:3000/reset-password?token={token}",
    )

    CORS_ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000",
        ).split(",")
        if origin.strip()
    ]
