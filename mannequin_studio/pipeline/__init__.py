"""Generation orchestration."""

from .orchestrator import FanOutOrchestrator
from .session import CancellationToken, GenerationSession, SessionStatus
from .studio import StudioPipeline

__all__ = [
    "FanOutOrchestrator",
    "CancellationToken",
    "GenerationSession",
    "SessionStatus",
    "StudioPipeline",
]
