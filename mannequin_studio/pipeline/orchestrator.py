"""Fan-Out Orchestrator - one image request per pose plus one caption request."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable

from ..config import GenerationConfig
from ..errors import AllGenerationsFailedError, GenerationError
from ..models import (
    GeneratedImage,
    GenerationOutcome,
    GenerationRequest,
    ImageBlob,
    compact_slots,
    new_partial_result,
)
from ..agents import build_caption_prompt, build_image_prompt, select_poses
from ..services import GeminiClient, RetryingInvoker, require_image, require_text


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]
SlotCallback = Callable[[GeneratedImage, int], None]

CAPTION_SLOT = -1


@dataclass
class TaskResult:
    """Settled result of one fanned-out task. Exactly one of value/error is set."""
    slot: int
    value: Any = None
    error: GenerationError | None = None


class FanOutOrchestrator:
    """Runs N pose images and one caption concurrently and keeps whatever succeeds.
    
    Flow:
    1. Pick the pose list for the product description
    2. Allocate one slot per pose, then launch every task at once
    3. Consume completions one at a time: fill the slot, notify, report progress
    4. Compact the slots in pose order and attach the caption (or the fallback)
    
    Task failures never abort siblings. The run only fails when no image
    at all was produced, caption or not.
    
    The orchestrator has no notion of cancellation: it always runs the
    batch to completion. Callers that want to stop listening drop the
    events themselves (see GenerationSession).
    """
    
    def __init__(
        self,
        client: GeminiClient,
        image_invoker: RetryingInvoker,
        caption_invoker: RetryingInvoker,
        config: GenerationConfig | None = None,
    ):
        self.client = client
        self.image_invoker = image_invoker
        self.caption_invoker = caption_invoker
        self.config = config or GenerationConfig()
    
    async def run(
        self,
        request: GenerationRequest,
        on_progress: ProgressCallback | None = None,
        on_slot_complete: SlotCallback | None = None,
    ) -> GenerationOutcome:
        """Generate every pose image and the caption for a request.
        
        Args:
            request: Validated generation request
            on_progress: Called with 0..100 after every settled task; never decreases
            on_slot_complete: Called with (image, slot) as each image lands,
                in completion order. The slot index is the pose index.
            
        Returns:
            GenerationOutcome with successful images in pose order
            
        Raises:
            AllGenerationsFailedError: if every pose image failed
        """
        poses = select_poses(request.product_description)
        total = len(poses) + 1
        slots: list[GeneratedImage | None] = new_partial_result(len(poses))
        errors: dict[int, GenerationError] = {}
        caption: str | None = None
        
        image_inputs = request.image_generation_inputs
        semaphore = asyncio.Semaphore(self.config.max_concurrency)
        
        logger.info(
            "Starting generation: %d poses + caption, %d input images",
            len(poses), len(image_inputs),
        )
        
        tasks = [
            asyncio.create_task(self._image_task(slot, pose, request, image_inputs, semaphore))
            for slot, pose in enumerate(poses)
        ]
        tasks.append(asyncio.create_task(self._caption_task(request)))
        
        completed = 0
        progress = 0
        self._report(on_progress, progress)
        
        try:
            for next_done in asyncio.as_completed(tasks):
                result = await next_done
                
                if result.slot == CAPTION_SLOT:
                    if result.error is None:
                        caption = result.value.strip()
                elif result.error is not None:
                    errors[result.slot] = result.error
                else:
                    slots[result.slot] = result.value
                    if on_slot_complete is not None:
                        on_slot_complete(result.value, result.slot)
                
                completed += 1
                progress = max(progress, min(99, completed * 100 // total))
                self._report(on_progress, progress)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
        
        self._report(on_progress, 100)
        
        images = compact_slots(slots)
        logger.info(
            "Generation finished: %d/%d images, caption %s",
            len(images), len(poses), "ok" if caption else "fallback",
        )
        
        if not images:
            raise AllGenerationsFailedError(errors)
        
        return GenerationOutcome(
            images=images,
            caption=caption or self.config.fallback_caption,
            caption_is_fallback=not caption,
            failed_slots={slot: error.kind for slot, error in errors.items()},
        )
    
    async def _image_task(
        self,
        slot: int,
        pose: str,
        request: GenerationRequest,
        image_inputs: list[ImageBlob],
        semaphore: asyncio.Semaphore,
    ) -> TaskResult:
        prompt = build_image_prompt(request.options, pose, request.product_description)
        
        # Permit is held per remote call, released during backoff sleeps
        async def call():
            async with semaphore:
                return await self.client.generate_image(image_inputs, prompt)
        
        try:
            blob = await self.image_invoker.invoke(
                call,
                validate=require_image,
                label=f"pose {slot}",
            )
        except GenerationError as e:
            logger.error("Pose %d failed: %s", slot, e.kind.value)
            return TaskResult(slot=slot, error=e)
        
        image = GeneratedImage(data=blob.data, mime_type=blob.mime_type, slot=slot, pose=pose)
        return TaskResult(slot=slot, value=image)
    
    async def _caption_task(self, request: GenerationRequest) -> TaskResult:
        prompt = build_caption_prompt(request.options, self.config.caption_language)
        # Caption is written from the product images only, never the face
        images = list(request.images)
        
        try:
            text = await self.caption_invoker.invoke(
                lambda: self.client.generate_text(images, prompt),
                validate=require_text,
                label="caption",
            )
        except GenerationError as e:
            logger.error("Caption failed: %s, using fallback", e.kind.value)
            return TaskResult(slot=CAPTION_SLOT, error=e)
        
        return TaskResult(slot=CAPTION_SLOT, value=text)
    
    @staticmethod
    def _report(on_progress: ProgressCallback | None, value: int) -> None:
        if on_progress is not None:
            on_progress(value)
