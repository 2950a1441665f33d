from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from typing import Any, Callable

import httpx

from camstudio.config import Settings, get_settings
from camstudio.errors import RequestTimeoutError, ServiceError
from camstudio.generation.client import send_request
from camstudio.generation.images import DEFAULT_QUALITY, DEFAULT_TOLERANCE, GeneratedImage, ensure_aspect_ratio, is_data_uri
from camstudio.generation.normalizer import normalize_response
from camstudio.generation.retry import RetryEvent, retry_with_backoff
from camstudio.logging import get_logger

logger = get_logger("generation")

COMPLETIONS_ENDPOINT = "/chat/completions"
USAGE_ENDPOINT = "/auth/key"

SUPPORTED_ASPECT_RATIOS = ("1:1", "3:4", "4:3", "9:16", "16:9")
DEFAULT_ASPECT_RATIO = "1:1"
TEMPERATURE = 0.7

_DATA_URI_PREFIX = re.compile(r"^data:(image/[^;]+);base64,")


@dataclass
class GenerationResult:
    images: list[GeneratedImage] = field(default_factory=list)
    prompt: str = ""
    aspect_ratio: str = DEFAULT_ASPECT_RATIO


def normalize_aspect_ratio(aspect_ratio: str | None) -> str:
    if aspect_ratio in SUPPORTED_ASPECT_RATIOS:
        return aspect_ratio
    logger.warning(f"unsupported aspect ratio {aspect_ratio!r}, using {DEFAULT_ASPECT_RATIO}")
    return DEFAULT_ASPECT_RATIO


def reference_image_part(reference_image: str) -> dict:
    """Wrap raw base64 or a data URI as an ``image_url`` content part."""
    match = _DATA_URI_PREFIX.match(reference_image)
    mime = match.group(1) if match else "image/png"
    b64 = _DATA_URI_PREFIX.sub("", reference_image)
    return {"type": "image_url", "image_url": {"url": f"data:{mime};base64,{b64}"}}


def build_image_payload(model: str, prompt: str, aspect_ratio: str, reference_image: str | None = None) -> dict:
    content: Any = prompt
    if reference_image:
        content = [
            reference_image_part(reference_image),
            {"type": "text", "text": prompt},
        ]
    return {
        "model": model,
        "messages": [{"role": "user", "content": content}],
        "temperature": TEMPERATURE,
        "response_format": {
            "type": "image",
            "image_config": {"aspect_ratio": aspect_ratio},
        },
    }


async def _complete(
    payload: dict,
    *,
    settings: Settings,
    timeout: float,
    client: httpx.AsyncClient | None,
    on_retry: Callable[[RetryEvent], None] | None,
    sleep: Callable[[float], Any] | None,
) -> Any:
    async def attempt():
        return await send_request(
            COMPLETIONS_ENDPOINT, payload, timeout=timeout, settings=settings, client=client,
        )

    kwargs: dict[str, Any] = {
        "max_retries": settings.MAX_RETRIES,
        "base_delay": settings.RETRY_BASE_DELAY,
        "on_retry": on_retry,
    }
    if sleep is not None:
        kwargs["sleep"] = sleep
    return await retry_with_backoff(attempt, **kwargs)


async def _with_deadline(coro, operation_timeout: float | None):
    if operation_timeout is None:
        return await coro
    return await asyncio.wait_for(coro, operation_timeout)


async def generate_image(
    prompt: str,
    aspect_ratio: str = DEFAULT_ASPECT_RATIO,
    reference_image: str | None = None,
    *,
    timeout: float | None = None,
    operation_timeout: float | None = None,
    tolerance: float = DEFAULT_TOLERANCE,
    quality: float = DEFAULT_QUALITY,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
    on_retry: Callable[[RetryEvent], None] | None = None,
    sleep: Callable[[float], Any] | None = None,
) -> GenerationResult:
    """Generate images for ``prompt`` and correct their aspect ratio.

    ``timeout`` bounds each attempt; ``operation_timeout`` (if given) bounds
    the whole retry loop. Inline images are validated independently; a
    broken image is reported on that image and does not fail the batch.
    """
    settings = settings or get_settings()
    ratio = normalize_aspect_ratio(aspect_ratio)
    payload = build_image_payload(settings.IMAGE_MODEL, prompt, ratio, reference_image)

    try:
        data = await _with_deadline(
            _complete(
                payload,
                settings=settings,
                timeout=timeout if timeout is not None else settings.IMAGE_TIMEOUT,
                client=client,
                on_retry=on_retry,
                sleep=sleep,
            ),
            operation_timeout,
        )
    except asyncio.TimeoutError:
        raise RequestTimeoutError(f"Generation did not finish within {operation_timeout:.1f}s")

    normalized = normalize_response(data)

    async def check(item: str) -> GeneratedImage:
        if not is_data_uri(item):
            return GeneratedImage(url=item)
        return await asyncio.to_thread(ensure_aspect_ratio, item, ratio, tolerance, quality)

    images = await asyncio.gather(*(check(item) for item in normalized.items))
    logger.info(
        f"generated {len(images)} image(s) | ratio={ratio} | "
        f"corrected={sum(1 for i in images if i.corrected)} | failed={sum(1 for i in images if i.error)}"
    )
    return GenerationResult(images=list(images), prompt=prompt, aspect_ratio=ratio)


async def _complete_text(
    messages: list[dict],
    *,
    settings: Settings,
    timeout: float,
    client: httpx.AsyncClient | None,
    on_retry: Callable[[RetryEvent], None] | None,
    sleep: Callable[[float], Any] | None,
    max_tokens: int | None = None,
) -> str:
    payload: dict[str, Any] = {
        "model": settings.TEXT_MODEL,
        "messages": messages,
        "temperature": TEMPERATURE,
    }
    if max_tokens is not None:
        payload["max_tokens"] = max_tokens
    data = await _complete(
        payload, settings=settings, timeout=timeout, client=client, on_retry=on_retry, sleep=sleep,
    )
    return normalize_response(data, allow_text=True).items[0]


async def generate_text(
    prompt: str,
    system_instruction: str | None = None,
    *,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
    on_retry: Callable[[RetryEvent], None] | None = None,
    sleep: Callable[[float], Any] | None = None,
) -> str:
    settings = settings or get_settings()
    messages: list[dict] = []
    if system_instruction:
        messages.append({"role": "system", "content": system_instruction})
    messages.append({"role": "user", "content": prompt})
    return await _complete_text(
        messages,
        settings=settings,
        timeout=settings.REQUEST_TIMEOUT,
        client=client,
        on_retry=on_retry,
        sleep=sleep,
        max_tokens=2048,
    )


async def generate_multimodal(
    prompt: str,
    image: str | None = None,
    system_instruction: str | None = None,
    *,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
    on_retry: Callable[[RetryEvent], None] | None = None,
    sleep: Callable[[float], Any] | None = None,
) -> str:
    """Ask the text model about ``prompt`` with an optional image attached."""
    settings = settings or get_settings()
    messages: list[dict] = []
    if system_instruction:
        messages.append({"role": "system", "content": system_instruction})

    parts: list[dict] = [{"type": "text", "text": prompt}]
    if image:
        b64 = _DATA_URI_PREFIX.sub("", image)
        parts.append({"type": "image_url", "image_url": {"url": f"data:image/png;base64,{b64}"}})
    messages.append({"role": "user", "content": parts})

    return await _complete_text(
        messages,
        settings=settings,
        timeout=settings.REQUEST_TIMEOUT,
        client=client,
        on_retry=on_retry,
        sleep=sleep,
    )


async def generate_video(
    prompt: str,
    aspect_ratio: str | None = None,
    duration: float | None = None,
    *,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
    on_retry: Callable[[RetryEvent], None] | None = None,
    sleep: Callable[[float], Any] | None = None,
) -> str:
    # The text model has no video output; the result is a textual description.
    settings = settings or get_settings()
    if aspect_ratio or duration:
        logger.info(f"video options ignored by text model | ratio={aspect_ratio} duration={duration}")
    messages = [{"role": "user", "content": f"Generate a video: {prompt}"}]
    return await _complete_text(
        messages,
        settings=settings,
        timeout=settings.VIDEO_TIMEOUT,
        client=client,
        on_retry=on_retry,
        sleep=sleep,
    )


async def get_usage(
    *,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
) -> dict | None:
    """Key usage info from the API, or ``None`` when it cannot be fetched."""
    settings = settings or get_settings()
    try:
        return await send_request(
            USAGE_ENDPOINT, method="GET", timeout=settings.REQUEST_TIMEOUT, settings=settings, client=client,
        )
    except ServiceError as e:
        logger.warning(f"usage lookup failed: {e.message} (status={e.status})")
        return None
    except RequestTimeoutError:
        logger.warning("usage lookup timed out")
        return None
