"""Bounded retries with exponential backoff around a single remote call."""

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, TypeVar

from ..config import RetryConfig
from ..errors import ErrorKind, GenerationError, NON_TRANSIENT_KINDS
from .error_classifier import classify_error


logger = logging.getLogger(__name__)

T = TypeVar("T")


def require_image(result: Any) -> None:
    """Reject a response that carried no image payload."""
    if result is None or not getattr(result, "data", None):
        raise GenerationError(ErrorKind.NO_IMAGE_DATA)


def require_text(result: Any) -> None:
    """Reject a blank text response."""
    if not isinstance(result, str) or not result.strip():
        raise GenerationError(ErrorKind.EMPTY_RESPONSE)


class RetryingInvoker:
    """Runs one remote call with bounded retries.
    
    Non-transient kinds (safety, key, billing, quota) fail on the first
    occurrence. Anything else is retried after
    `base_delay * 2**attempt + uniform(0, base_delay)` seconds, where
    `attempt` counts failures so far starting at 0. Once the budget is
    spent the call fails with MODEL_OVERLOADED if the last failure was an
    overload, RETRY_FAILED otherwise.
    
    Retries are sequential: attempt i+1 never starts before the backoff
    after attempt i has elapsed.
    """
    
    def __init__(
        self,
        policy: RetryConfig,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        jitter: Callable[[float, float], float] = random.uniform,
    ):
        self.policy = policy
        self._sleep = sleep
        self._jitter = jitter
    
    def backoff_delay(self, attempt: int) -> float:
        """Delay before the retry that follows failure number `attempt` (0-based)."""
        base = self.policy.base_delay
        return base * (2 ** attempt) + self._jitter(0, base)
    
    async def invoke(
        self,
        call: Callable[[], Awaitable[T]],
        validate: Callable[[T], None] | None = None,
        max_attempts: int | None = None,
        label: str = "call",
    ) -> T:
        """Run `call` until it succeeds or the budget is spent.
        
        Args:
            call: Zero-argument coroutine factory; invoked once per attempt
            validate: Optional check that raises GenerationError for a
                malformed but non-erroring result
            max_attempts: Overrides the policy's attempt ceiling; must be >= 1
            label: Name used in log lines
            
        Raises:
            GenerationError: with the classified kind on failure
        """
        attempts = max_attempts if max_attempts is not None else self.policy.max_attempts
        if attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {attempts}")
        last_error: BaseException | None = None
        last_kind = ErrorKind.RETRY_FAILED
        
        for attempt in range(attempts):
            try:
                result = await call()
                if validate is not None:
                    validate(result)
                return result
            except Exception as e:
                kind = classify_error(e)
                
                if kind in NON_TRANSIENT_KINDS:
                    logger.error("%s failed with %s, not retrying: %s", label, kind.value, e)
                    raise GenerationError(kind, str(e), cause=e) from e
                
                last_error, last_kind = e, kind
                
                if attempt + 1 < attempts:
                    delay = self.backoff_delay(attempt)
                    logger.warning(
                        "%s attempt %d/%d failed (%s), retrying in %.2fs",
                        label, attempt + 1, attempts, kind.value, delay,
                    )
                    await self._sleep(delay)
        
        final_kind = ErrorKind.MODEL_OVERLOADED if last_kind == ErrorKind.MODEL_OVERLOADED else ErrorKind.RETRY_FAILED
        logger.error("%s gave up after %d attempts (%s)", label, attempts, final_kind.value)
        raise GenerationError(
            final_kind,
            f"{label} failed after {attempts} attempts: {last_error}",
            cause=last_error,
        ) from last_error
