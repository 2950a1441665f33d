"""Aspect-ratio validation and center-crop correction for generated images."""

from __future__ import annotations

import base64
import binascii
import io
import math
import re
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from camstudio.errors import CameraValidationError, ImageDecodeError
from camstudio.logging import get_logger

logger = get_logger("images")

DEFAULT_TOLERANCE = 0.05
DEFAULT_QUALITY = 0.95

_DATA_URI = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.*)$", re.DOTALL)
_LOSSY_FORMATS = {"JPEG", "WEBP"}


@dataclass
class AspectRatioCheck:
    valid: bool
    actual_ratio: str
    target_ratio: str
    difference: float
    width: int
    height: int


@dataclass
class GeneratedImage:
    """One image of a generation result.

    Inline images carry ``data_uri``; external references only carry ``url``
    and are passed through unvalidated.
    """
    data_uri: str | None = None
    url: str | None = None
    width: int | None = None
    height: int | None = None
    check: AspectRatioCheck | None = None
    corrected: bool = False
    error: ImageDecodeError | None = None

    @property
    def source(self) -> str:
        return self.data_uri or self.url or ""


def parse_aspect_ratio(value: str) -> tuple[float, float]:
    try:
        w_str, h_str = value.split(":")
        w, h = float(w_str), float(h_str)
    except (AttributeError, ValueError):
        raise CameraValidationError(f"Invalid aspect ratio: {value!r}, expected 'W:H'")
    if w <= 0 or h <= 0 or not (math.isfinite(w) and math.isfinite(h)):
        raise CameraValidationError(f"Invalid aspect ratio: {value!r}, expected 'W:H'")
    return w, h


def is_data_uri(value: str) -> bool:
    return value.startswith("data:")


def decode_data_uri(uri: str) -> tuple[str, bytes]:
    match = _DATA_URI.match(uri)
    if not match:
        raise ImageDecodeError("Not a base64 data URI")
    try:
        data = base64.b64decode(match.group("data"), validate=False)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Invalid base64 payload: {e}")
    return match.group("mime"), data


def encode_data_uri(data: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def _open(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Failed to load image: {e}")
    return image


def get_image_dimensions(data: bytes) -> tuple[int, int]:
    return _open(data).size


def validate_aspect_ratio(
    data: bytes,
    target_aspect_ratio: str,
    tolerance: float = DEFAULT_TOLERANCE,
) -> AspectRatioCheck:
    """Compare the image's ratio to ``target_aspect_ratio`` (relative difference)."""
    width, height = get_image_dimensions(data)
    tw, th = parse_aspect_ratio(target_aspect_ratio)
    target_ratio = tw / th
    actual_ratio = width / height
    difference = abs(actual_ratio - target_ratio) / target_ratio

    divisor = math.gcd(round(width), round(height)) or 1
    actual_str = f"{round(width) // divisor}:{round(height) // divisor}"

    return AspectRatioCheck(
        valid=difference <= tolerance,
        actual_ratio=actual_str,
        target_ratio=target_aspect_ratio,
        difference=difference,
        width=width,
        height=height,
    )


def center_crop_box(width: int, height: int, target_ratio: float) -> tuple[int, int, int, int]:
    current = width / height
    if current > target_ratio:
        # too wide: trim left and right
        crop_w = round(height * target_ratio)
        left = (width - crop_w) // 2
        return left, 0, left + crop_w, height
    if current < target_ratio:
        # too tall: trim top and bottom
        crop_h = round(width / target_ratio)
        top = (height - crop_h) // 2
        return 0, top, width, top + crop_h
    return 0, 0, width, height


def crop_to_aspect_ratio(
    data: bytes,
    target_aspect_ratio: str,
    quality: float = DEFAULT_QUALITY,
    image_format: str = "PNG",
) -> bytes:
    tw, th = parse_aspect_ratio(target_aspect_ratio)
    image = _open(data)
    box = center_crop_box(image.width, image.height, tw / th)
    cropped = image.crop(box)

    fmt = image_format.upper()
    save_kwargs = {}
    if fmt in _LOSSY_FORMATS:
        save_kwargs["quality"] = round(quality * 100)
        if cropped.mode not in ("RGB", "L"):
            cropped = cropped.convert("RGB")
    buf = io.BytesIO()
    cropped.save(buf, format=fmt, **save_kwargs)
    return buf.getvalue()


def calculate_target_dimensions(target_aspect_ratio: str, base_size: int = 1024) -> tuple[int, int]:
    w, h = parse_aspect_ratio(target_aspect_ratio)
    if w > h:
        return base_size, round(base_size * (h / w))
    if h > w:
        return round(base_size * (w / h)), base_size
    return base_size, base_size


def ensure_aspect_ratio(
    data_uri: str,
    target_aspect_ratio: str,
    tolerance: float = DEFAULT_TOLERANCE,
    quality: float = DEFAULT_QUALITY,
) -> GeneratedImage:
    """Validate one inline image and center-crop it when out of tolerance.

    A decode failure is recorded on the returned image instead of raised. If
    the crop itself fails the original image is kept.
    """
    try:
        _, data = decode_data_uri(data_uri)
        check = validate_aspect_ratio(data, target_aspect_ratio, tolerance)
    except ImageDecodeError as e:
        logger.error(f"could not inspect generated image: {e.message}")
        return GeneratedImage(data_uri=data_uri, error=e)

    if check.valid:
        logger.info(f"aspect ratio ok: {check.actual_ratio} ({check.width}x{check.height})")
        return GeneratedImage(data_uri=data_uri, width=check.width, height=check.height, check=check)

    logger.warning(
        f"aspect ratio mismatch: expected {target_aspect_ratio}, got {check.actual_ratio} "
        f"({check.width}x{check.height}), cropping"
    )
    try:
        cropped = crop_to_aspect_ratio(data, target_aspect_ratio, quality)
        width, height = get_image_dimensions(cropped)
    except (ImageDecodeError, Image.DecompressionBombError, OSError, ValueError) as e:
        logger.error(f"crop failed, keeping original image: {e}")
        return GeneratedImage(data_uri=data_uri, width=check.width, height=check.height, check=check)

    return GeneratedImage(
        data_uri=encode_data_uri(cropped, "image/png"),
        width=width,
        height=height,
        check=check,
        corrected=True,
    )
