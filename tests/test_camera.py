import math

import pytest

from camstudio.camera.angles import (
    CAMERA_ANGLES,
    build_angle_prompt,
    build_multi_view_prompts,
    get_camera_angle,
    is_valid_camera_angle,
)
from camstudio.camera.descriptors import (
    build_short_prompt,
    horizontal_descriptor,
    vertical_descriptor,
    wrap_degrees,
    zoom_descriptor,
)
from camstudio.camera.pose import DEFAULT_POSE, CameraPose, clamp_pose_value
from camstudio.camera.presets import PRESET_TABLES, match_preset, resolve_preset
from camstudio.camera.prompt import build_view_title, compile_prompt, format_camera_params
from camstudio.errors import CameraValidationError

EPS = 1e-6


@pytest.mark.parametrize("value, expected", [
    (-180, "back view"),
    (-165, "back view"),
    (-165 + EPS, "left profile shot"),
    (-95 - EPS, "left profile shot"),
    (-95, "three-quarter left view"),
    (-20 - EPS, "three-quarter left view"),
    (-20, "front view"),
    (0, "front view"),
    (20, "front view"),
    (20 + EPS, "three-quarter right view"),
    (95, "three-quarter right view"),
    (95 + EPS, "right profile shot"),
    (165 - EPS, "right profile shot"),
    (165, "back view"),
    (180, "back view"),
])
def test_horizontal_bands(value, expected):
    assert horizontal_descriptor(value) == expected


def test_horizontal_wraps_out_of_range():
    assert wrap_degrees(190) == pytest.approx(-170)
    assert horizontal_descriptor(190) == "back view"
    assert horizontal_descriptor(-300) == "three-quarter right view"


@pytest.mark.parametrize("value, expected", [
    (90, "bird-eye high angle shot"),
    (45, "bird-eye high angle shot"),
    (45 - EPS, "elevated angle shot"),
    (20, "elevated angle shot"),
    (20 - EPS, "eye-level shot"),
    (0, "eye-level shot"),
    (-20 + EPS, "eye-level shot"),
    (-20, "low angle shot"),
    (-45 + EPS, "low angle shot"),
    (-45, "worm-eye extreme low angle"),
    (-90, "worm-eye extreme low angle"),
])
def test_vertical_bands(value, expected):
    assert vertical_descriptor(value) == expected


@pytest.mark.parametrize("value, expected", [
    (0.1, "close-up shot"),
    (2, "close-up shot"),
    (2 + EPS, "medium close shot"),
    (4, "medium close shot"),
    (7, "medium shot"),
    (8.5, "wide shot"),
    (8.5 + EPS, "establishing shot"),
    (10, "establishing shot"),
])
def test_zoom_bands(value, expected):
    assert zoom_descriptor(value) == expected


def test_every_sampled_angle_gets_exactly_one_label():
    labels = {"back view", "right profile shot", "three-quarter right view",
              "left profile shot", "three-quarter left view", "front view"}
    for i in range(-1800, 1801):
        assert horizontal_descriptor(i / 10) in labels


def test_short_prompt_uses_subject_token():
    assert build_short_prompt(DEFAULT_POSE) == "<sks> front view eye-level shot medium shot"


# presets

def test_preset_round_trip():
    for axis, table in PRESET_TABLES.items():
        for key in table:
            assert match_preset(axis, resolve_preset(axis, key)) == key


def test_match_preset_tolerance():
    assert match_preset("horizontal", 90.4) == "right"
    assert match_preset("horizontal", 91) is None
    assert match_preset("zoom", 1.65) == "close_up"
    assert match_preset("zoom", 1.8) is None
    assert match_preset("vertical", 44, tolerance=2) == "elevated"


def test_unknown_preset_is_a_validation_error():
    with pytest.raises(CameraValidationError):
        resolve_preset("horizontal", "top")
    with pytest.raises(CameraValidationError):
        resolve_preset("roll", "front")


# pose

def test_default_pose():
    assert (DEFAULT_POSE.horizontal, DEFAULT_POSE.vertical, DEFAULT_POSE.zoom) == (0, 0, 5)
    assert DEFAULT_POSE.horizontal_preset is None


def test_manual_value_clears_preset_and_clamps():
    pose = DEFAULT_POSE.with_preset("horizontal", "right")
    assert pose.horizontal == 90 and pose.horizontal_preset == "right"

    moved = pose.with_value("horizontal", 250)
    assert moved.horizontal == 180
    assert moved.horizontal_preset is None


def test_preset_must_match_value():
    with pytest.raises(CameraValidationError):
        CameraPose(horizontal=10, horizontal_preset="front")
    with pytest.raises(CameraValidationError):
        DEFAULT_POSE.with_preset("zoom", "extreme")


def test_clamp_pose_value():
    assert clamp_pose_value("zoom", 0) == 0.1
    assert clamp_pose_value("vertical", -120) == -90
    assert clamp_pose_value("horizontal", math.nan) == 0


def test_is_close():
    assert CameraPose(10, 5, 3).is_close(CameraPose(10.0005, 5, 3))
    assert not CameraPose(10, 5, 3).is_close(CameraPose(10.01, 5, 3))


# prompt compiler

def test_compile_prompt_front_scenario():
    pose = CameraPose(horizontal=0, vertical=0, zoom=5)
    assert compile_prompt(pose, "A red car.") == (
        "A red car, front view, eye level, medium shot, "
        "professional photography, high quality, detailed"
    )


def test_compile_prompt_is_deterministic():
    pose = CameraPose(horizontal=-75, vertical=40, zoom=9)
    assert compile_prompt(pose, "A cat") == compile_prompt(pose, "A cat")


def test_compile_prompt_default_base():
    assert compile_prompt(CameraPose(0, 0, 1)).startswith("Generate image, front view, eye level, close-up shot")


def test_compile_prompt_strips_one_period_only():
    assert compile_prompt(DEFAULT_POSE, "Wait..").startswith("Wait., ")


@pytest.mark.parametrize("h, clause", [
    (61, "viewed from the right side"),
    (-61, "viewed from the left side"),
    (21, "slight right angle view"),
    (-21, "slight left angle view"),
    (9, "front view"),
])
def test_horizontal_clause(h, clause):
    assert f"Shot, {clause}, " in compile_prompt(CameraPose(h, 45, 5), "Shot")


@pytest.mark.parametrize("h", [10, 15, 20, -10, -15, -20])
def test_horizontal_dead_zone_adds_no_clause(h):
    # 10..20 degrees either side is left without a horizontal clause.
    assert compile_prompt(CameraPose(h, 45, 5), "Shot") == (
        "Shot, elevated shot, looking down, medium shot, professional photography, high quality, detailed"
    )


@pytest.mark.parametrize("v, expected", [
    (31, "elevated shot, looking down"),
    (-31, "low angle shot, looking up"),
    (5, "eye level"),
])
def test_vertical_clause(v, expected):
    assert expected in compile_prompt(CameraPose(0, v, 5), "Shot")


def test_vertical_dead_zone_adds_no_clause():
    assert compile_prompt(CameraPose(0, 20, 5), "Shot") == (
        "Shot, front view, medium shot, professional photography, high quality, detailed"
    )


@pytest.mark.parametrize("z, expected", [(1.9, "close-up shot"), (2, "medium shot"), (7, "medium shot"), (7.1, "wide shot")])
def test_zoom_clause(z, expected):
    assert compile_prompt(CameraPose(0, 0, z), "Shot") == (
        f"Shot, front view, eye level, {expected}, professional photography, high quality, detailed"
    )


def test_view_title_and_params():
    pose = CameraPose(horizontal=42.26, vertical=-12.4, zoom=3.25)
    assert build_view_title(pose) == "3D View (H:42° V:-12°)"
    assert format_camera_params(pose) == "H:42.3° V:-12.4° Z:3.2x"


# named angles

def test_camera_angle_library():
    assert len(CAMERA_ANGLES) == 12
    assert is_valid_camera_angle("dutch-angle")
    assert not is_valid_camera_angle("sideways")
    with pytest.raises(CameraValidationError):
        get_camera_angle("sideways")


def test_build_angle_prompt():
    angle = get_camera_angle("back")
    assert build_angle_prompt("A red car", angle) == (
        "A red car, back view, rear perspective, same subject, consistent lighting, photorealistic"
    )
    assert build_angle_prompt("A red car", angle, preserve_subject=False) == "A red car from back view, rear perspective"


def test_build_multi_view_prompts():
    prompts = build_multi_view_prompts("A vase", [get_camera_angle("front"), get_camera_angle("macro")])
    assert prompts == {
        "front": "A vase, front view, eye-level shot, photorealistic, 8k, highly detailed",
        "macro": "A vase, macro shot, extreme close-up, detail view, photorealistic, 8k, highly detailed",
    }
