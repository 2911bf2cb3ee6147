"""Remote service clients and call wrappers."""

from .gemini_client import GeminiClient, GeminiAPIError
from .error_classifier import classify_error, classify_message
from .retry import RetryingInvoker, require_image, require_text

__all__ = [
    "GeminiClient",
    "GeminiAPIError",
    "classify_error",
    "classify_message",
    "RetryingInvoker",
    "require_image",
    "require_text",
]
