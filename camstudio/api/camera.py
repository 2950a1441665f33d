from fastapi import APIRouter, Depends
from camstudio.api.deps import http_error, verify_token
from camstudio.api.models import AngleSetRequest, CameraPromptRequest, CameraPromptResponse
from camstudio.camera.angles import CAMERA_ANGLES, DEFAULT_MULTI_VIEW_STYLE, build_multi_view_prompts, get_camera_angle
from camstudio.camera.descriptors import build_short_prompt, describe_pose
from camstudio.camera.presets import AXES, list_presets, match_preset
from camstudio.camera.prompt import build_view_title, compile_prompt, format_camera_params
from camstudio.errors import CameraValidationError
from camstudio.logging import get_logger

router = APIRouter(prefix="/camera")
logger = get_logger("camera")


@router.get("/presets")
def presets(user_id: str = Depends(verify_token)):
    return list_presets()


@router.post("/prompt", response_model=CameraPromptResponse)
def camera_prompt(request: CameraPromptRequest, user_id: str = Depends(verify_token)):
    try:
        pose = request.pose.to_pose()
    except CameraValidationError as e:
        logger.info(f"rejected pose for user_id={user_id}: {e.message}")
        raise http_error(e)

    return CameraPromptResponse(
        prompt=compile_prompt(pose, request.basePrompt),
        shortPrompt=build_short_prompt(pose),
        title=build_view_title(pose),
        params=format_camera_params(pose),
        descriptors=describe_pose(pose),
        presets={axis: match_preset(axis, getattr(pose, axis)) for axis in AXES},
    )


@router.get("/angles")
def angles(user_id: str = Depends(verify_token)):
    return [
        {"id": a.id, "name": a.name, "description": a.description, "promptModifier": a.prompt_modifier}
        for a in CAMERA_ANGLES
    ]


@router.post("/angles/prompts")
def angle_prompts(request: AngleSetRequest, user_id: str = Depends(verify_token)):
    try:
        selected = [get_camera_angle(i) for i in request.angle_ids] if request.angle_ids else list(CAMERA_ANGLES)
    except CameraValidationError as e:
        raise http_error(e)
    return build_multi_view_prompts(request.subject, selected, request.baseStyle or DEFAULT_MULTI_VIEW_STYLE)
