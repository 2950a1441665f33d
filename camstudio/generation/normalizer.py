"""Turn the chat-completions response into a list of images (or text).

The message content arrives either as a string or as a list of parts. It is
first parsed into one of four tagged variants, then matched exhaustively.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Literal, Union, assert_never

from camstudio.errors import NormalizationError

DATA_URI_PATTERN = re.compile(r"data:image/[^;]+;base64,[a-zA-Z0-9+/=]+")


@dataclass(frozen=True)
class InlineImageContent:
    data_uri: str
    kind: Literal["inline_image"] = "inline_image"


@dataclass(frozen=True)
class ImagePartsContent:
    urls: tuple[str, ...]
    kind: Literal["image_parts"] = "image_parts"


@dataclass(frozen=True)
class TextContent:
    text: str
    kind: Literal["text"] = "text"


@dataclass(frozen=True)
class EmptyContent:
    kind: Literal["empty"] = "empty"


MessageContent = Union[InlineImageContent, ImagePartsContent, TextContent, EmptyContent]


@dataclass
class NormalizedResponse:
    kind: Literal["images", "text"]
    items: list[str] = field(default_factory=list)


def extract_message_content(response: Any) -> Any:
    if not isinstance(response, dict):
        return None
    choices = response.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    return message.get("content")


def _image_part_url(part: Any) -> str | None:
    if not isinstance(part, dict) or part.get("type") != "image_url":
        return None
    image_url = part.get("image_url")
    if isinstance(image_url, dict):
        url = image_url.get("url")
        return url if isinstance(url, str) and url else None
    return None


def parse_content(response: Any) -> MessageContent:
    content = extract_message_content(response)

    if isinstance(content, str):
        match = DATA_URI_PATTERN.search(content)
        if match:
            return InlineImageContent(match.group(0))
        if content.strip():
            return TextContent(content)
        return EmptyContent()

    if isinstance(content, list):
        urls = tuple(u for u in (_image_part_url(p) for p in content) if u)
        if urls:
            return ImagePartsContent(urls)

    return EmptyContent()


def normalize_response(response: Any, allow_text: bool = False) -> NormalizedResponse:
    """Return the images (or, for text call sites, the text) in ``response``.

    Raises ``NormalizationError`` when nothing usable is found. Text is only
    accepted when ``allow_text`` is set; image call sites never validate it.
    """
    match parse_content(response):
        case InlineImageContent(data_uri=data_uri):
            return NormalizedResponse("images", [data_uri])
        case ImagePartsContent(urls=urls):
            return NormalizedResponse("images", list(urls))
        case TextContent(text=text) if allow_text:
            return NormalizedResponse("text", [text])
        case TextContent():
            raise NormalizationError("no valid image data received")
        case EmptyContent():
            raise NormalizationError("no valid response received" if allow_text else "no valid image data received")
        case unreachable:
            assert_never(unreachable)
