from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from camstudio.errors import CameraValidationError

DEFAULT_MULTI_VIEW_STYLE = "photorealistic, 8k, highly detailed"


@dataclass(frozen=True)
class CameraAngle:
    id: str
    name: str
    description: str
    prompt_modifier: str


CAMERA_ANGLES: tuple[CameraAngle, ...] = (
    CameraAngle("front", "Front", "Standard front view", "front view, eye-level shot"),
    CameraAngle(
        "top-down", "Top-down", "Looking down from above",
        "bird's eye view, top-down perspective, high angle shot",
    ),
    CameraAngle(
        "bottom-up", "Bottom-up", "Looking up from below",
        "worm's eye view, low angle shot, looking up",
    ),
    CameraAngle(
        "left", "Left side", "45 degrees from the left",
        "left side view, 45 degree angle from left",
    ),
    CameraAngle(
        "right", "Right side", "45 degrees from the right",
        "right side view, 45 degree angle from right",
    ),
    CameraAngle("back", "Back", "Seen from behind", "back view, rear perspective"),
    CameraAngle(
        "isometric", "Isometric", "2.5D isometric projection",
        "isometric view, 2.5D perspective",
    ),
    CameraAngle(
        "dutch-angle", "Dutch angle", "Tilted camera for a dramatic effect",
        "dutch angle, tilted camera, canted angle",
    ),
    CameraAngle(
        "wide-angle", "Wide angle", "Ultra wide lens with exaggerated perspective",
        "wide angle lens, ultra wide, fisheye effect",
    ),
    CameraAngle(
        "telephoto", "Telephoto", "Compressed perspective",
        "telephoto lens, compressed perspective, shallow depth of field",
    ),
    CameraAngle(
        "macro", "Macro", "Extreme close-up detail",
        "macro shot, extreme close-up, detail view",
    ),
    CameraAngle(
        "aerial", "Aerial", "High overhead view",
        "aerial view, drone shot, overhead perspective",
    ),
)

_BY_ID = {angle.id: angle for angle in CAMERA_ANGLES}


def is_valid_camera_angle(angle_id: str) -> bool:
    return angle_id in _BY_ID


def get_camera_angle(angle_id: str) -> CameraAngle:
    angle = _BY_ID.get(angle_id)
    if angle is None:
        raise CameraValidationError(f"Unknown camera angle: {angle_id!r}")
    return angle


def build_angle_prompt(base_prompt: str, angle: CameraAngle, preserve_subject: bool = True) -> str:
    if preserve_subject:
        return f"{base_prompt}, {angle.prompt_modifier}, same subject, consistent lighting, photorealistic"
    return f"{base_prompt} from {angle.prompt_modifier}"


def build_multi_view_prompts(
    subject: str,
    angles: Iterable[CameraAngle],
    base_style: str = DEFAULT_MULTI_VIEW_STYLE,
) -> dict[str, str]:
    """One prompt per angle, keyed by angle id."""
    return {angle.id: f"{subject}, {angle.prompt_modifier}, {base_style}" for angle in angles}
