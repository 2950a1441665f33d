from __future__ import annotations

from camstudio.camera.pose import CameraPose

DEFAULT_BASE_PROMPT = "Generate image"
QUALITY_SUFFIX = "professional photography, high quality, detailed"


def _horizontal_clause(h: float) -> str | None:
    if h > 60:
        return "viewed from the right side"
    if h < -60:
        return "viewed from the left side"
    if h > 20:
        return "slight right angle view"
    if h < -20:
        return "slight left angle view"
    if abs(h) < 10:
        return "front view"
    # 10..20 degrees either side gets no clause.
    return None


def _vertical_clause(v: float) -> str | None:
    if v > 30:
        return "elevated shot, looking down"
    if v < -30:
        return "low angle shot, looking up"
    if abs(v) < 10:
        return "eye level"
    return None


def _zoom_clause(z: float) -> str:
    if z < 2:
        return "close-up shot"
    if z > 7:
        return "wide shot"
    return "medium shot"


def compile_prompt(pose: CameraPose, base_prompt: str | None = None) -> str:
    """Merge a subject prompt with camera language for the generation model.

    The thresholds are coarser than the descriptor bands in
    ``camstudio.camera.descriptors`` and are tuned for prose, not reused.
    """
    prompt = base_prompt or DEFAULT_BASE_PROMPT
    if prompt.endswith("."):
        prompt = prompt[:-1]

    parts = [prompt]
    for clause in (
        _horizontal_clause(pose.horizontal),
        _vertical_clause(pose.vertical),
        _zoom_clause(pose.zoom),
    ):
        if clause:
            parts.append(clause)
    parts.append(QUALITY_SUFFIX)
    return ", ".join(parts)


def build_view_title(pose: CameraPose) -> str:
    return f"3D View (H:{round(pose.horizontal)}° V:{round(pose.vertical)}°)"


def format_camera_params(pose: CameraPose) -> str:
    return f"H:{pose.horizontal:.1f}° V:{pose.vertical:.1f}° Z:{pose.zoom:.1f}x"
