"""Maps remote-call failures to a stable ErrorKind."""

from typing import Callable

from ..errors import ErrorKind, GenerationError


def _has(*needles: str) -> Callable[[str], bool]:
    return lambda message: any(needle in message for needle in needles)


# Evaluated top to bottom, first match wins. The order is load-bearing:
# a message mentioning both a quota and a generic failure must come out as
# QUOTA_EXCEEDED, and a safety block outranks everything else.
CLASSIFICATION_RULES: list[tuple[Callable[[str], bool], ErrorKind]] = [
    (_has("safety"), ErrorKind.SAFETY_BLOCK),
    (_has("api key not valid", "api_key_invalid", "api key"), ErrorKind.API_KEY_INVALID),
    (_has("billing"), ErrorKind.BILLING_NOT_ENABLED),
    (_has("429", "quota", "resource_exhausted"), ErrorKind.QUOTA_EXCEEDED),
    (_has("503", "overloaded"), ErrorKind.MODEL_OVERLOADED),
]


def classify_message(message: str) -> ErrorKind:
    """Classify an error message. Unknown messages are TRANSIENT."""
    lowered = message.lower()
    for matches, kind in CLASSIFICATION_RULES:
        if matches(lowered):
            return kind
    return ErrorKind.TRANSIENT


def classify_error(error: BaseException) -> ErrorKind:
    """Classify any failure raised by a remote call."""
    if isinstance(error, GenerationError):
        return error.kind
    return classify_message(f"{type(error).__name__}: {error}")
