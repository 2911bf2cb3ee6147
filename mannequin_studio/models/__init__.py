"""Data models for the mannequin studio."""

from .generation import (
    ImageBlob,
    GeneratedImage,
    ModelOptions,
    GenerationRequest,
    GenerationOutcome,
    new_partial_result,
    compact_slots,
)
from .record import GenerationRecord

__all__ = [
    "ImageBlob",
    "GeneratedImage",
    "ModelOptions",
    "GenerationRequest",
    "GenerationOutcome",
    "new_partial_result",
    "compact_slots",
    "GenerationRecord",
]
