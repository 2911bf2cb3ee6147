"""FastAPI server for the mannequin studio.

Receives requests from the web client with:
- images: Base64-encoded product photos (data URLs)
- options: virtual model persona
- product_description: Optional, detected via /api/describe when empty
- face_image: Base64 face reference, required when options.use_my_face is set
"""

import io
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from PIL import Image
from pydantic import BaseModel, Field, ValidationError

from mannequin_studio import __version__, load_config, user_message
from mannequin_studio.errors import AllGenerationsFailedError, ErrorKind, GenerationError
from mannequin_studio.models import ImageBlob, ModelOptions
from mannequin_studio.pipeline import StudioPipeline


logger = logging.getLogger(__name__)

app = FastAPI(
    title="Mannequin Studio API",
    description="Virtual model product shoots with marketing captions",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class DescribeRequest(BaseModel):
    """Request body for product description detection."""
    images: list[str] = Field(min_length=1)  # Base64 data URLs


class DescribeResponse(BaseModel):
    success: bool
    description: str = ""
    error: str | None = None


class GenerateRequest(BaseModel):
    """Request body for a generation."""
    images: list[str] = Field(min_length=1)  # Base64 data URLs
    options: ModelOptions = Field(default_factory=ModelOptions)
    product_description: str = ""
    face_image: str | None = None  # Base64 data URL


class GenerateResponse(BaseModel):
    """Generated images (data URLs, pose order) and caption."""
    success: bool
    images: list[str] = Field(default_factory=list)
    poses: list[str] = Field(default_factory=list)
    caption: str | None = None
    failed_slots: list[int] = Field(default_factory=list)
    error: str | None = None
    error_kind: ErrorKind | None = None


# Initialize pipeline (will be done on first request)
_pipeline: StudioPipeline | None = None


def get_pipeline() -> StudioPipeline:
    """Get or create the pipeline instance."""
    global _pipeline
    if _pipeline is None:
        config = load_config()  # Loads from .env automatically via pydantic-settings
        logging.basicConfig(level=config.log_level)
        _pipeline = StudioPipeline(config)
    return _pipeline


def decode_image(data: str) -> ImageBlob:
    """Decode a base64 data URL and normalise it to PNG."""
    blob = ImageBlob.from_data_url(data)
    if not blob.data:
        raise ValueError("empty image")
    
    try:
        img = Image.open(io.BytesIO(blob.data))
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        output = io.BytesIO()
        img.save(output, format="PNG")
        return ImageBlob(data=output.getvalue(), mime_type="image/png")
    except Exception:
        # Let the service judge formats Pillow cannot read
        return blob


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Mannequin Studio API", "version": __version__}


@app.get("/health")
async def health():
    """Detailed health check."""
    pipeline = get_pipeline()
    gemini_ok = await pipeline.client.check_connection()
    
    return {
        "status": "ok" if gemini_ok else "degraded",
        "gemini": "connected" if gemini_ok else "disconnected",
    }


@app.post("/api/describe", response_model=DescribeResponse)
async def describe_product(request: DescribeRequest):
    """Detect a short product description from the uploaded images."""
    try:
        images = [decode_image(image) for image in request.images]
    except ValueError as e:
        return DescribeResponse(success=False, error=f"Invalid image data: {e}")
    
    description = await get_pipeline().describe(images)
    return DescribeResponse(success=bool(description), description=description)


@app.post("/api/generate", response_model=GenerateResponse)
async def generate(request: GenerateRequest):
    """Generate pose images and a marketing caption.
    
    Succeeds when at least one image was produced; the caption then falls
    back to a generic text if its own request failed.
    """
    try:
        images = [decode_image(image) for image in request.images]
        face_image = decode_image(request.face_image) if request.face_image else None
    except ValueError as e:
        return GenerateResponse(success=False, error=f"Invalid image data: {e}")
    
    try:
        outcome = await get_pipeline().generate(
            images=images,
            options=request.options,
            product_description=request.product_description,
            face_image=face_image,
        )
    except ValidationError as e:
        # First validator message, without pydantic's "Value error, " prefix
        message = e.errors()[0]["msg"].removeprefix("Value error, ")
        return GenerateResponse(success=False, error=message)
    except AllGenerationsFailedError as e:
        logger.error("Generation failed: %s", e)
        return GenerateResponse(
            success=False,
            error=user_message(e.cause_kind),
            error_kind=e.cause_kind,
        )
    except GenerationError as e:
        return GenerateResponse(success=False, error=user_message(e.kind), error_kind=e.kind)
    
    return GenerateResponse(
        success=True,
        images=[image.to_data_url() for image in outcome.images],
        poses=[image.pose for image in outcome.images],
        caption=outcome.caption,
        failed_slots=sorted(outcome.failed_slots),
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
