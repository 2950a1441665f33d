"""Qualitative labels for each camera axis.

Bands are checked from the most extreme to the least extreme and the first
match wins, so every input maps to exactly one label.
"""

from __future__ import annotations

from camstudio.camera.pose import CameraPose

SUBJECT_TOKEN = "<sks>"


def wrap_degrees(value: float) -> float:
    """Wrap an angle into [-180, 180]. 180 and -180 are both kept as-is."""
    if -180 <= value <= 180:
        return value
    return ((value + 180) % 360) - 180


def horizontal_descriptor(value: float) -> str:
    h = wrap_degrees(value)
    if h >= 165 or h <= -165:
        return "back view"
    if h > 95:
        return "right profile shot"
    if h > 20:
        return "three-quarter right view"
    if h < -95:
        return "left profile shot"
    if h < -20:
        return "three-quarter left view"
    return "front view"


def vertical_descriptor(value: float) -> str:
    if value >= 45:
        return "bird-eye high angle shot"
    if value >= 20:
        return "elevated angle shot"
    if value <= -45:
        return "worm-eye extreme low angle"
    if value <= -20:
        return "low angle shot"
    return "eye-level shot"


def zoom_descriptor(value: float) -> str:
    if value <= 2:
        return "close-up shot"
    if value <= 4:
        return "medium close shot"
    if value <= 7:
        return "medium shot"
    if value <= 8.5:
        return "wide shot"
    return "establishing shot"


def describe_pose(pose: CameraPose) -> dict[str, str]:
    return {
        "horizontal": horizontal_descriptor(pose.horizontal),
        "vertical": vertical_descriptor(pose.vertical),
        "zoom": zoom_descriptor(pose.zoom),
    }


def build_short_prompt(pose: CameraPose) -> str:
    """One-line preview, e.g. ``<sks> front view eye-level shot medium shot``."""
    d = describe_pose(pose)
    return f"{SUBJECT_TOKEN} {d['horizontal']} {d['vertical']} {d['zoom']}"
