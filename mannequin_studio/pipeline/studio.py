"""Studio pipeline - wires the client, retry budgets and orchestrator together."""

import asyncio
import logging
from pathlib import Path

from ..config import StudioConfig
from ..models import (
    GenerationOutcome,
    GenerationRecord,
    GenerationRequest,
    ImageBlob,
    ModelOptions,
)
from ..agents import ProductDescriber
from ..services import GeminiClient, RetryingInvoker
from .orchestrator import FanOutOrchestrator, ProgressCallback, SlotCallback
from .session import GenerationSession


logger = logging.getLogger(__name__)


class StudioPipeline:
    """Entry point for product shoots.
    
    Flow:
    1. Optionally detect a product description from the uploaded images
    2. Fan out one image request per pose plus a caption request
    3. Return whatever succeeded, and hand it to the history store
    """
    
    def __init__(self, config: StudioConfig, client: GeminiClient | None = None, sleep=asyncio.sleep):
        self.config = config
        
        # Initialize services
        self.client = client or GeminiClient(
            config=config.gemini,
            api_key=config.gemini_api_key,
        )
        
        self.describer = ProductDescriber(
            self.client,
            RetryingInvoker(config.description_retry, sleep=sleep),
        )
        self.orchestrator = FanOutOrchestrator(
            self.client,
            image_invoker=RetryingInvoker(config.image_retry, sleep=sleep),
            caption_invoker=RetryingInvoker(config.caption_retry, sleep=sleep),
            config=config.generation,
        )
    
    async def describe(self, images: list[ImageBlob]) -> str:
        """Detect a product description, "" if detection failed."""
        return await self.describer.describe(images)
    
    async def generate(
        self,
        images: list[ImageBlob],
        options: ModelOptions,
        product_description: str = "",
        face_image: ImageBlob | None = None,
        on_progress: ProgressCallback | None = None,
        on_slot_complete: SlotCallback | None = None,
    ) -> GenerationOutcome:
        """Generate pose images and a caption.
        
        Raises:
            pydantic.ValidationError: for an invalid request (no images,
                use_my_face without face_image)
            AllGenerationsFailedError: if no image succeeded
        """
        request = GenerationRequest(
            images=tuple(images),
            options=options,
            product_description=product_description,
            face_image=face_image,
        )
        outcome = await self.orchestrator.run(request, on_progress, on_slot_complete)
        
        if self.config.save_history:
            await self.save_history(outcome, request)
        
        return outcome
    
    def new_session(self) -> GenerationSession:
        """Create a session whose successful outcomes go to history when enabled."""
        session = GenerationSession(self.orchestrator)
        if self.config.save_history:
            session.on_complete = lambda outcome: self.save_history(outcome, session.request)
        return session
    
    async def save_history(self, outcome: GenerationOutcome, request: GenerationRequest) -> Path | None:
        """Save the outcome off the event loop. A failed save never fails the generation."""
        try:
            return await asyncio.to_thread(self.save_record, outcome, request)
        except OSError:
            logger.exception("Could not save generation record to %s", self.config.output_dir)
            return None
    
    def save_record(self, outcome: GenerationOutcome, request: GenerationRequest) -> Path:
        """Write the outcome to the history directory."""
        record = GenerationRecord.from_outcome(
            outcome,
            options=request.options,
            product_description=request.product_description,
            output_dir=self.config.output_dir,
        )
        path = record.save()
        logger.info("Saved generation record %s", path)
        return path
    
    async def close(self):
        await self.client.close()
