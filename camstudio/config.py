import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List
from dotenv import load_dotenv

load_dotenv()

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"

@dataclass
class Settings:
    API_KEY: str
    BASE_URL: str
    TEXT_MODEL: str
    IMAGE_MODEL: str
    APP_REFERER: str
    APP_TITLE: str
    # Seconds. Image/video call sites use their own deadlines.
    REQUEST_TIMEOUT: float
    IMAGE_TIMEOUT: float
    VIDEO_TIMEOUT: float
    MAX_RETRIES: int
    RETRY_BASE_DELAY: float

@dataclass
class AuthSettings:
    SUPABASE_URL: str
    SUPABASE_JWT_SECRET: str
    JWT_AUDIENCE: str
    CORS_ORIGINS: List[str]

def _required(name: str) -> str:
    v = os.getenv(name)
    if not v:
        raise ValueError(f"{name} required")
    return v

def _float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")

def _load_settings() -> Settings:
    return Settings(
        API_KEY=_required("OPENROUTER_API_KEY"),
        BASE_URL=os.getenv("OPENROUTER_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        TEXT_MODEL=os.getenv("TEXT_MODEL", "google/gemini-2.5-flash"),
        IMAGE_MODEL=os.getenv("IMAGE_MODEL", "google/gemini-2.5-flash-image"),
        APP_REFERER=os.getenv("APP_REFERER", "https://novastudio.ai"),
        APP_TITLE=os.getenv("APP_TITLE", "NOVA STUDIO"),
        REQUEST_TIMEOUT=_float("REQUEST_TIMEOUT", 120.0),
        IMAGE_TIMEOUT=_float("IMAGE_TIMEOUT", 15.0),
        VIDEO_TIMEOUT=_float("VIDEO_TIMEOUT", 120.0),
        MAX_RETRIES=int(_float("MAX_RETRIES", 3)),
        RETRY_BASE_DELAY=_float("RETRY_BASE_DELAY", 2.0),
    )

def get_settings() -> Settings:
    # Read on every call so a rotated key is picked up without a restart.
    return _load_settings()

def _load_auth_settings() -> AuthSettings:
    cors_origins_str = _required("CORS_ORIGINS")
    cors_origins = [o.strip() for o in cors_origins_str.split(",") if o.strip()]

    if "*" in cors_origins:
        raise ValueError("CORS_ORIGINS must not contain '*' when using credentials/auth")

    return AuthSettings(
        SUPABASE_URL=_required("SUPABASE_URL").rstrip("/"),
        SUPABASE_JWT_SECRET=_required("SUPABASE_JWT_SECRET"),
        JWT_AUDIENCE=os.getenv("JWT_AUDIENCE", "authenticated"),
        CORS_ORIGINS=cors_origins,
    )

@lru_cache(maxsize=1)
def get_auth_settings() -> AuthSettings:
    return _load_auth_settings()
