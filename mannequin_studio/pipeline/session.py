"""Generation Session - drives one user-initiated generation and owns its state."""

import inspect
import logging
from enum import Enum
from typing import Any, Callable

from ..agents import POSE_COUNT
from ..errors import GenerationError
from ..models import GeneratedImage, GenerationOutcome, GenerationRequest, new_partial_result
from .orchestrator import FanOutOrchestrator


logger = logging.getLogger(__name__)


class CancellationToken:
    """Cooperative cancellation flag.
    
    Cancelling only stops results from being applied. In-flight remote
    calls keep running to completion and their results are discarded.
    """
    
    def __init__(self):
        self._cancelled = False
    
    def cancel(self) -> None:
        self._cancelled = True
    
    @property
    def cancelled(self) -> bool:
        return self._cancelled


class SessionStatus(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    RESULTS_READY = "results_ready"
    CANCELLED = "cancelled"
    FAILED = "failed"


class GenerationSession:
    """Consumer-facing controller for one generation at a time.
    
    Every progress tick and slot event checks the current run's token
    before touching session state. Starting a new run cancels the previous
    one, so a stale run can never write into the new run's slots.
    """
    
    def __init__(
        self,
        orchestrator: FanOutOrchestrator,
        on_complete: Callable[[GenerationOutcome], Any] | None = None,
    ):
        self.orchestrator = orchestrator
        self.on_complete = on_complete
        
        self.request: GenerationRequest | None = None
        self.status = SessionStatus.IDLE
        self.progress = 0
        self.slots: list[GeneratedImage | None] = []
        self.outcome: GenerationOutcome | None = None
        self.error: GenerationError | None = None
        
        self._token = CancellationToken()
    
    @property
    def is_cancelled(self) -> bool:
        return self._token.cancelled
    
    async def start(self, request: GenerationRequest) -> GenerationOutcome | None:
        """Run a generation and apply its events to this session.
        
        Returns:
            The outcome, or None if the run was cancelled
            
        Raises:
            GenerationError: when no image could be generated (status FAILED)
        """
        self._token.cancel()
        token = CancellationToken()
        self._token = token
        
        slots: list[GeneratedImage | None] = new_partial_result(POSE_COUNT)
        self.request = request
        self.slots = slots
        self.status = SessionStatus.GENERATING
        self.progress = 0
        self.outcome = None
        self.error = None
        
        def on_progress(value: int) -> None:
            if token.cancelled:
                return
            self.progress = value
        
        def on_slot_complete(image: GeneratedImage, slot: int) -> None:
            if token.cancelled:
                return
            slots[slot] = image
        
        try:
            outcome = await self.orchestrator.run(request, on_progress, on_slot_complete)
        except GenerationError as e:
            if token.cancelled:
                logger.info("Cancelled generation ended with %s, ignoring", e.kind.value)
                return None
            self.status = SessionStatus.FAILED
            self.error = e
            raise
        
        if token.cancelled:
            logger.info("Generation finished after cancellation, discarding outcome")
            return None
        
        self.outcome = outcome
        self.status = SessionStatus.RESULTS_READY
        if self.on_complete is not None:
            await self._hand_off(outcome)
        return outcome
    
    async def _hand_off(self, outcome: GenerationOutcome) -> None:
        """Pass a finished outcome to `on_complete`, sync or async.
        
        The outcome is already final here, so a failing hand-off is logged
        and never surfaces from `start`.
        """
        try:
            result = self.on_complete(outcome)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("on_complete hand-off failed")
    
    def cancel(self) -> None:
        """Stop applying events from the current run and drop its partial results."""
        if self.status != SessionStatus.GENERATING:
            return
        self._token.cancel()
        self.status = SessionStatus.CANCELLED
        self.slots = []
