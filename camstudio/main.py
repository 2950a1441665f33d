from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from camstudio.api.camera import router as camera_router
from camstudio.api.generate import router as generate_router
from camstudio.config import get_auth_settings

app = FastAPI(title="Camera Studio", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_auth_settings().CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(camera_router)
app.include_router(generate_router)


@app.get("/health")
def health():
    return {"status": "ok"}
