# Test fixtures and configuration
import asyncio
import pytest
import sys
from collections import defaultdict
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from mannequin_studio.config import GenerationConfig, ImageRetryConfig, RetryConfig
from mannequin_studio.models import ImageBlob, ModelOptions, GenerationRequest
from mannequin_studio.pipeline import FanOutOrchestrator
from mannequin_studio.services import RetryingInvoker


MINIMAL_PNG = bytes([
    0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A,  # PNG signature
    0x00, 0x00, 0x00, 0x0D, 0x49, 0x48, 0x44, 0x52,  # IHDR chunk
    0x00, 0x00, 0x00, 0x01, 0x00, 0x00, 0x00, 0x01,  # 1x1 dimensions
    0x08, 0x02, 0x00, 0x00, 0x00, 0x90, 0x77, 0x53,
    0xDE, 0x00, 0x00, 0x00, 0x0C, 0x49, 0x44, 0x41,  # IDAT chunk
    0x54, 0x08, 0xD7, 0x63, 0xF8, 0xCF, 0xC0, 0x00,
    0x00, 0x00, 0x03, 0x00, 0x01, 0x00, 0x05, 0xFE,
    0xD4, 0xAA, 0x00, 0x00, 0x00, 0x00, 0x49, 0x45,  # IEND chunk
    0x4E, 0x44, 0xAE, 0x42, 0x60, 0x82
])


class SleepRecorder:
    """Stand-in for asyncio.sleep that records delays without waiting."""
    
    def __init__(self):
        self.delays: list[float] = []
    
    async def __call__(self, delay: float):
        self.delays.append(delay)


class FakeGeminiClient:
    """Scripted client. Image calls are matched to a slot by the pose text in the prompt.
    
    Behaviors are per-attempt lists; the last entry repeats. An entry that is
    an exception is raised, anything else is returned.
    """
    
    def __init__(
        self,
        poses: list[str],
        image_behaviors: dict | None = None,
        caption_behavior: list | None = None,
        delays: dict | None = None,
        gates: dict | None = None,
    ):
        self.poses = poses
        self.image_behaviors = image_behaviors or {}
        self.caption_behavior = caption_behavior or ["Une légende qui donne envie."]
        self.delays = delays or {}
        self.gates = gates or {}
        self.image_calls: dict[int, list[list[ImageBlob]]] = defaultdict(list)
        self.caption_calls: list[list[ImageBlob]] = []
        self.in_flight = 0
        self.max_in_flight = 0
    
    def slot_for(self, prompt: str) -> int:
        return next(i for i, pose in enumerate(self.poses) if pose in prompt)
    
    @staticmethod
    def _pick(behaviors: list, attempt: int):
        outcome = behaviors[min(attempt, len(behaviors) - 1)]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome
    
    async def generate_image(self, images, prompt):
        slot = self.slot_for(prompt)
        attempt = len(self.image_calls[slot])
        self.image_calls[slot].append(list(images))
        
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if slot in self.gates:
                await self.gates[slot].wait()
            await asyncio.sleep(self.delays.get(slot, 0))
        finally:
            self.in_flight -= 1
        
        default = ImageBlob(data=MINIMAL_PNG + bytes([slot]), mime_type="image/png")
        return self._pick(self.image_behaviors.get(slot, [default]), attempt)
    
    async def generate_text(self, images, prompt):
        attempt = len(self.caption_calls)
        self.caption_calls.append(list(images))
        if "caption" in self.gates:
            await self.gates["caption"].wait()
        await asyncio.sleep(self.delays.get("caption", 0))
        return self._pick(self.caption_behavior, attempt)


@pytest.fixture
def minimal_png_bytes():
    """Minimal valid PNG image bytes."""
    return MINIMAL_PNG


@pytest.fixture
def product_image(minimal_png_bytes):
    return ImageBlob(data=minimal_png_bytes, mime_type="image/png")


@pytest.fixture
def face_image():
    return ImageBlob(data=b'\xff\xd8\xff\xe0' + b'\x00' * 16, mime_type="image/jpeg")


@pytest.fixture
def model_options():
    return ModelOptions(
        sex="femme",
        skin_tone="noire",
        body_type="athlétique",
        age="25-35 ans",
        style="chic",
        expression="confiante",
        ethnic_origin="ouest-africaine",
        ambiance="rooftop au coucher du soleil",
        marketing_tone="luxueux",
    )


@pytest.fixture
def sample_descriptions():
    """Sample product descriptions as sellers write them."""
    return {
        "watch": "Montre automatique en acier, cadran bleu nuit",
        "sneakers": "Baskets blanches en cuir avec semelle épaisse",
        "handbag": "Sac à main en cuir camel avec fermoir doré",
        "sunglasses": "Lunettes de soleil aviateur, verres polarisés",
        "serum": "Sérum hydratant à l'acide hyaluronique",
        "dress": "Robe longue en wax, coupe évasée",
        "unknown": "Ordinateur portable 14 pouces",
    }


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def make_request(product_image, model_options):
    """Build a GenerationRequest with sensible defaults."""
    def _make(**overrides):
        fields = {
            "images": (product_image,),
            "options": model_options,
            "product_description": "",
        }
        fields.update(overrides)
        return GenerationRequest(**fields)
    return _make


@pytest.fixture
def make_orchestrator(sleep_recorder):
    """Build an orchestrator with the production retry budgets and no real sleeping."""
    def _make(client, config: GenerationConfig | None = None):
        return FanOutOrchestrator(
            client,
            image_invoker=RetryingInvoker(ImageRetryConfig(), sleep=sleep_recorder),
            caption_invoker=RetryingInvoker(RetryConfig(), sleep=sleep_recorder),
            config=config,
        )
    return _make
