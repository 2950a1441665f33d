import json
from typing import Any, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from camstudio.camera.pose import CameraPose

AspectRatio = Literal["1:1", "3:4", "4:3", "9:16", "16:9"]


class PoseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")
    horizontal: float = Field(0.0, ge=-180, le=180)
    vertical: float = Field(0.0, ge=-90, le=90)
    zoom: float = Field(5.0, ge=0.1, le=10)
    horizontalPreset: Optional[str] = None
    verticalPreset: Optional[str] = None
    zoomPreset: Optional[str] = None

    def to_pose(self) -> CameraPose:
        # Raises CameraValidationError for unknown or inconsistent presets.
        return CameraPose(
            horizontal=self.horizontal,
            vertical=self.vertical,
            zoom=self.zoom,
            horizontal_preset=self.horizontalPreset,
            vertical_preset=self.verticalPreset,
            zoom_preset=self.zoomPreset,
        )


class CameraPromptRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")
    pose: PoseModel = Field(default_factory=PoseModel)
    basePrompt: Optional[str] = None


class CameraPromptResponse(BaseModel):
    prompt: str
    shortPrompt: str
    title: str
    params: str
    descriptors: dict[str, str]
    presets: dict[str, Optional[str]]


class AngleSetRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")
    subject: str = Field(min_length=1)
    angle_ids: list[str] = Field(default_factory=list)
    baseStyle: Optional[str] = None

    @field_validator("angle_ids", mode="before")
    @classmethod
    def normalize_list(cls, v: Any) -> list[str]:
        if v is None or v == "":
            return []
        if isinstance(v, list):
            return [str(x) for x in v]
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
            except json.JSONDecodeError:
                raise ValueError("Invalid JSON string")
            if not isinstance(parsed, list):
                raise ValueError("Expected JSON list")
            return [str(x) for x in parsed]
        raise ValueError("Expected list or JSON-string list")


class ImageGenerateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")
    prompt: str = Field(min_length=1)
    aspectRatio: AspectRatio = "1:1"
    referenceImage: Optional[str] = None


class TextGenerateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")
    prompt: str = Field(min_length=1)
    systemInstruction: Optional[str] = None
    image: Optional[str] = None


class AspectRatioCheckModel(BaseModel):
    valid: bool
    actualRatio: str
    targetRatio: str
    width: int
    height: int


class GeneratedImageModel(BaseModel):
    src: str
    width: Optional[int] = None
    height: Optional[int] = None
    corrected: bool = False
    check: Optional[AspectRatioCheckModel] = None
    error: Optional[str] = None


class ImageGenerateResponse(BaseModel):
    prompt: str
    aspectRatio: str
    targetWidth: int
    targetHeight: int
    images: list[GeneratedImageModel]


class TextGenerateResponse(BaseModel):
    text: str
