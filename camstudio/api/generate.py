import uuid
from fastapi import APIRouter, Depends
from camstudio.api.deps import http_error, verify_token
from camstudio.api.models import (
    AspectRatioCheckModel,
    GeneratedImageModel,
    ImageGenerateRequest,
    ImageGenerateResponse,
    TextGenerateRequest,
    TextGenerateResponse,
)
from camstudio.errors import CamStudioError
from camstudio.generation import service
from camstudio.generation.images import GeneratedImage, calculate_target_dimensions
from camstudio.generation.retry import RetryEvent
from camstudio.logging import get_logger

router = APIRouter()
logger = get_logger("generate")


def _image_model(image: GeneratedImage) -> GeneratedImageModel:
    check = None
    if image.check is not None:
        check = AspectRatioCheckModel(
            valid=image.check.valid,
            actualRatio=image.check.actual_ratio,
            targetRatio=image.check.target_ratio,
            width=image.check.width,
            height=image.check.height,
        )
    return GeneratedImageModel(
        src=image.source,
        width=image.width,
        height=image.height,
        corrected=image.corrected,
        check=check,
        error=image.error.message if image.error else None,
    )


@router.post("/generate/image", response_model=ImageGenerateResponse)
async def generate_image(request: ImageGenerateRequest, user_id: str = Depends(verify_token)):
    request_id = str(uuid.uuid4())[:8]
    logger.info(
        f"[{request_id}] image request | user_id={user_id} | "
        f"aspect_ratio={request.aspectRatio} | reference={request.referenceImage is not None}"
    )

    def on_retry(event: RetryEvent) -> None:
        logger.info(f"[{request_id}] retry {event.attempt}/{event.max_retries} in {event.delay:.1f}s")

    try:
        result = await service.generate_image(
            request.prompt,
            request.aspectRatio,
            request.referenceImage,
            on_retry=on_retry,
        )
    except CamStudioError as e:
        logger.error(f"[{request_id}] error: {e.message}")
        raise http_error(e)

    target_width, target_height = calculate_target_dimensions(result.aspect_ratio)
    return ImageGenerateResponse(
        prompt=result.prompt,
        aspectRatio=result.aspect_ratio,
        targetWidth=target_width,
        targetHeight=target_height,
        images=[_image_model(i) for i in result.images],
    )


@router.post("/generate/text", response_model=TextGenerateResponse)
async def generate_text(request: TextGenerateRequest, user_id: str = Depends(verify_token)):
    request_id = str(uuid.uuid4())[:8]
    logger.info(f"[{request_id}] text request | user_id={user_id} | image={request.image is not None}")
    try:
        if request.image:
            text = await service.generate_multimodal(request.prompt, request.image, request.systemInstruction)
        else:
            text = await service.generate_text(request.prompt, request.systemInstruction)
    except CamStudioError as e:
        logger.error(f"[{request_id}] error: {e.message}")
        raise http_error(e)
    return TextGenerateResponse(text=text)


@router.get("/usage")
async def usage(user_id: str = Depends(verify_token)):
    return {"usage": await service.get_usage()}
