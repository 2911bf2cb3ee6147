"""Mannequin studio - virtual model product shoots on a generative image service."""

from .config import StudioConfig, load_config
from .errors import ErrorKind, GenerationError, AllGenerationsFailedError, user_message

__version__ = "1.0.0"

__all__ = [
    "StudioConfig",
    "load_config",
    "ErrorKind",
    "GenerationError",
    "AllGenerationsFailedError",
    "user_message",
]
