from __future__ import annotations

import math
from dataclasses import dataclass, replace

from camstudio.camera.presets import AXES, DEFAULT_TOLERANCE, resolve_preset
from camstudio.errors import CameraValidationError

AXIS_LIMITS: dict[str, tuple[float, float]] = {
    "horizontal": (-180.0, 180.0),
    "vertical": (-90.0, 90.0),
    "zoom": (0.1, 10.0),
}


def clamp_pose_value(axis: str, value: float) -> float:
    """Clamp a raw slider value into the axis domain. Non-finite input reads as 0."""
    if axis not in AXIS_LIMITS:
        raise CameraValidationError(f"Unknown camera axis: {axis!r}")
    lo, hi = AXIS_LIMITS[axis]
    clean = value if math.isfinite(value) else 0.0
    return min(hi, max(lo, clean))


@dataclass(frozen=True)
class CameraPose:
    horizontal: float = 0.0
    vertical: float = 0.0
    zoom: float = 5.0

    horizontal_preset: str | None = None
    vertical_preset: str | None = None
    zoom_preset: str | None = None

    def __post_init__(self):
        for axis in AXES:
            key = getattr(self, f"{axis}_preset")
            if key is None:
                continue
            canonical = resolve_preset(axis, key)
            if abs(canonical - getattr(self, axis)) > DEFAULT_TOLERANCE[axis]:
                raise CameraValidationError(
                    f"{axis} preset {key!r} expects {canonical}, got {getattr(self, axis)}"
                )

    def with_value(self, axis: str, value: float) -> "CameraPose":
        # Manual edits always drop the axis' preset.
        clean = clamp_pose_value(axis, value)
        return replace(self, **{axis: clean, f"{axis}_preset": None})

    def with_preset(self, axis: str, key: str) -> "CameraPose":
        value = resolve_preset(axis, key)
        return replace(self, **{axis: float(value), f"{axis}_preset": key})

    def is_close(self, other: "CameraPose", eps: float = 0.001) -> bool:
        return all(abs(getattr(self, a) - getattr(other, a)) < eps for a in AXES)


DEFAULT_POSE = CameraPose()
