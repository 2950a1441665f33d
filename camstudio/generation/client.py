from __future__ import annotations

import asyncio
from typing import Any, Literal

import httpx

from camstudio.config import Settings, get_settings
from camstudio.errors import FatalServiceError, RequestTimeoutError, ServiceError, TransientServiceError
from camstudio.generation.retry import is_retryable
from camstudio.logging import get_logger

logger = get_logger("client")


def build_headers(settings: Settings) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {settings.API_KEY}",
        "Content-Type": "application/json",
        "HTTP-Referer": settings.APP_REFERER,
        "X-Title": settings.APP_TITLE,
    }


def _read_error_body(resp: httpx.Response) -> dict:
    try:
        body = resp.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _error_from_response(resp: httpx.Response) -> ServiceError:
    body = _read_error_body(resp)
    nested = body.get("error")
    message = (
        body.get("message")
        or (nested.get("message") if isinstance(nested, dict) else None)
        or f"API request failed: {resp.status_code}"
    )
    error: ServiceError = FatalServiceError(str(message), status=resp.status_code)
    if is_retryable(error):
        error = TransientServiceError(str(message), status=resp.status_code)
    return error


async def _send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    headers: dict[str, str],
    payload: Any,
) -> Any:
    kwargs: dict[str, Any] = {"headers": headers}
    if payload is not None:
        kwargs["json"] = payload
    resp = await client.request(method, url, **kwargs)
    if resp.status_code < 200 or resp.status_code >= 300:
        raise _error_from_response(resp)
    return resp.json()


async def send_request(
    endpoint: str,
    payload: Any = None,
    *,
    method: Literal["GET", "POST"] = "POST",
    timeout: float = 120.0,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
) -> Any:
    """Send one request to the generation API and return the decoded JSON body.

    ``timeout`` is a hard deadline for the whole exchange; once it fires the
    in-flight request is abandoned and ``RequestTimeoutError`` is raised.
    Error responses raise ``TransientServiceError`` or ``FatalServiceError``.
    """
    settings = settings or get_settings()
    url = f"{settings.BASE_URL}{endpoint}"
    headers = build_headers(settings)

    try:
        if client is not None:
            return await asyncio.wait_for(_send(client, method, url, headers, payload), timeout)
        async with httpx.AsyncClient(timeout=httpx.Timeout(timeout)) as own_client:
            return await asyncio.wait_for(_send(own_client, method, url, headers, payload), timeout)
    except (asyncio.TimeoutError, httpx.TimeoutException):
        logger.warning(f"{method} {endpoint} timed out after {timeout:.1f}s")
        raise RequestTimeoutError()
    except ValueError as e:
        # 2xx with a body that is not JSON
        raise FatalServiceError(f"Invalid JSON in response: {e}")
    except httpx.HTTPError as e:
        error: ServiceError = FatalServiceError(f"Network error: {e}")
        if is_retryable(error):
            error = TransientServiceError(error.message)
        raise error
