from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal, Mapping

from camstudio.errors import CameraValidationError

Axis = Literal["horizontal", "vertical", "zoom"]
HorizontalPreset = Literal["front", "right", "left", "back"]
VerticalPreset = Literal["eye_level", "elevated", "low_angle"]
ZoomPreset = Literal["close_up", "medium", "wide"]

AXES: tuple[Axis, ...] = ("horizontal", "vertical", "zoom")


@dataclass(frozen=True)
class Preset:
    value: float
    label: str


HORIZONTAL_PRESETS: Mapping[str, Preset] = MappingProxyType({
    "front": Preset(0, "Front view"),
    "right": Preset(90, "Right side view"),
    "left": Preset(-90, "Left side view"),
    "back": Preset(180, "Back view"),
})

VERTICAL_PRESETS: Mapping[str, Preset] = MappingProxyType({
    "eye_level": Preset(0, "Eye level"),
    "elevated": Preset(45, "Elevated"),
    "low_angle": Preset(-45, "Low angle"),
})

ZOOM_PRESETS: Mapping[str, Preset] = MappingProxyType({
    "close_up": Preset(1.5, "Close-up"),
    "medium": Preset(5, "Medium"),
    "wide": Preset(8, "Wide"),
})

PRESET_TABLES: Mapping[str, Mapping[str, Preset]] = MappingProxyType({
    "horizontal": HORIZONTAL_PRESETS,
    "vertical": VERTICAL_PRESETS,
    "zoom": ZOOM_PRESETS,
})

# Table spacing is wider than twice these, so at most one preset can match.
DEFAULT_TOLERANCE: Mapping[str, float] = MappingProxyType({
    "horizontal": 0.5,
    "vertical": 0.5,
    "zoom": 0.2,
})


def _table(axis: str) -> Mapping[str, Preset]:
    table = PRESET_TABLES.get(axis)
    if table is None:
        raise CameraValidationError(f"Unknown camera axis: {axis!r}")
    return table


def resolve_preset(axis: str, key: str) -> float:
    """Return the canonical value of preset ``key`` on ``axis``."""
    preset = _table(axis).get(key)
    if preset is None:
        raise CameraValidationError(f"Unknown {axis} preset: {key!r}")
    return preset.value


def match_preset(axis: str, value: float, tolerance: float | None = None) -> str | None:
    """Return the preset key whose value lies within ``tolerance`` of ``value``.

    ``None`` means the value is custom.
    """
    table = _table(axis)
    if tolerance is None:
        tolerance = DEFAULT_TOLERANCE[axis]
    for key, preset in table.items():
        if abs(preset.value - value) <= tolerance:
            return key
    return None


def list_presets() -> dict[str, dict[str, dict]]:
    return {
        axis: {key: {"value": p.value, "label": p.label} for key, p in table.items()}
        for axis, table in PRESET_TABLES.items()
    }
