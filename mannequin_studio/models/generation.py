"""Generation request and outcome models."""

import base64
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..errors import ErrorKind


def detect_mime_type(data: bytes, default: str = "image/png") -> str:
    """Detect image format from magic bytes."""
    if data[:3] == b'\xff\xd8\xff':
        return "image/jpeg"
    if data[:8] == b'\x89PNG\r\n\x1a\n':
        return "image/png"
    if data[:4] == b'RIFF' and data[8:12] == b'WEBP':
        return "image/webp"
    if data[:6] in (b'GIF87a', b'GIF89a'):
        return "image/gif"
    return default


class ImageBlob(BaseModel):
    """Raw image bytes plus their media type."""
    
    model_config = ConfigDict(frozen=True)
    
    data: bytes
    mime_type: str = "image/png"
    
    @classmethod
    def from_bytes(cls, data: bytes) -> "ImageBlob":
        return cls(data=data, mime_type=detect_mime_type(data))
    
    @classmethod
    def from_data_url(cls, value: str) -> "ImageBlob":
        """Decode a data URL ("data:image/png;base64,...") or bare base64."""
        if value.startswith("data:"):
            if "," not in value:
                raise ValueError("malformed data URL")
            header, encoded = value.split(",", 1)
            raw = base64.b64decode(encoded, validate=True)
            mime_type = header[5:].split(";", 1)[0] or detect_mime_type(raw)
            return cls(data=raw, mime_type=mime_type)
        return cls.from_bytes(base64.b64decode(value, validate=True))
    
    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")
    
    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"


class GeneratedImage(ImageBlob):
    """An image produced for one pose slot."""
    
    slot: int = Field(ge=0)
    pose: str


class ModelOptions(BaseModel):
    """Virtual model persona. All fields are free categorical strings."""
    
    sex: str = "femme"
    skin_tone: str = "métisse"
    body_type: str = "standard"
    age: str = "25-35 ans"
    style: str = "chic"
    expression: str = "souriante"
    ethnic_origin: str = "africaine"
    ambiance: str = "studio lumineux"
    marketing_tone: str = "inspirant"
    use_my_face: bool = False


class GenerationRequest(BaseModel):
    """Everything needed to run one generation. Immutable once built."""
    
    model_config = ConfigDict(frozen=True)
    
    images: tuple[ImageBlob, ...]
    options: ModelOptions = Field(default_factory=ModelOptions)
    product_description: str = ""
    face_image: ImageBlob | None = None
    
    @model_validator(mode="after")
    def _check_inputs(self) -> "GenerationRequest":
        if not self.images:
            raise ValueError("at least one product image is required")
        if self.options.use_my_face and self.face_image is None:
            raise ValueError("face_image is required when use_my_face is enabled")
        return self
    
    @property
    def image_generation_inputs(self) -> list[ImageBlob]:
        """Product images, with the face reference appended last when used."""
        inputs = list(self.images)
        if self.options.use_my_face and self.face_image is not None:
            inputs.append(self.face_image)
        return inputs


class GenerationOutcome(BaseModel):
    """Best-effort result of one generation.
    
    `images` is in pose order with failed poses omitted (never padded).
    """
    
    images: list[GeneratedImage]
    caption: str
    caption_is_fallback: bool = False
    failed_slots: dict[int, ErrorKind] = Field(default_factory=dict)


T = TypeVar("T")


def new_partial_result(size: int) -> list[T | None]:
    """Allocate one empty slot per pose before fan-out."""
    return [None] * size


def compact_slots(slots: list[T | None]) -> list[T]:
    """Drop empty slots, keeping slot order."""
    return [item for item in slots if item is not None]
