import jwt
from fastapi import HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from camstudio.config import get_auth_settings
from camstudio.errors import CamStudioError, CameraValidationError, RequestTimeoutError, TransientServiceError

security = HTTPBearer(auto_error=True)

def verify_token(credentials: HTTPAuthorizationCredentials = Security(security)) -> str:
    token = credentials.credentials
    settings = get_auth_settings()
    issuer = f"{settings.SUPABASE_URL}/auth/v1"

    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=["HS256"],
            audience=settings.JWT_AUDIENCE,
            issuer=issuer,
            options={"require": ["exp", "sub", "aud", "iss"]},
            leeway=30,  # avoids failures from small clock skew
        )
        return payload["sub"]

    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def http_error(exc: CamStudioError) -> HTTPException:
    """Map a typed failure onto the status the UI uses to pick its message."""
    if isinstance(exc, CameraValidationError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, RequestTimeoutError):
        code = status.HTTP_504_GATEWAY_TIMEOUT
    elif isinstance(exc, TransientServiceError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_502_BAD_GATEWAY
    return HTTPException(
        status_code=code,
        detail={"code": type(exc).__name__, "message": exc.user_message, "error": exc.message},
    )
