import base64
import io
import os

import httpx
import pytest
from PIL import Image

# Auth/CORS settings are read when the app module is imported.
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.co")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-secret-for-camstudio-tests-0123456789")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:3000")
os.environ.setdefault("OPENROUTER_API_KEY", "sk-test")

from fastapi.testclient import TestClient  # noqa: E402
from camstudio.api.deps import verify_token  # noqa: E402
from camstudio.config import Settings  # noqa: E402
from camstudio.main import app  # noqa: E402


def make_png(width: int, height: int, color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


def png_data_uri(width: int, height: int) -> str:
    return "data:image/png;base64," + base64.b64encode(make_png(width, height)).decode("ascii")


def completion(content) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class SleepRecorder:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        API_KEY="sk-test",
        BASE_URL="https://api.test/v1",
        TEXT_MODEL="text-model",
        IMAGE_MODEL="image-model",
        APP_REFERER="https://novastudio.ai",
        APP_TITLE="NOVA STUDIO",
        REQUEST_TIMEOUT=5.0,
        IMAGE_TIMEOUT=5.0,
        VIDEO_TIMEOUT=5.0,
        MAX_RETRIES=3,
        RETRY_BASE_DELAY=2.0,
    )


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def client():
    # Override auth for functional tests
    app.dependency_overrides[verify_token] = lambda: "test-user-id"
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
