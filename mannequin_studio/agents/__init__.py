"""Prompting and product analysis helpers."""

from .pose_selector import select_poses, POSE_COUNT, POSE_TABLE, DEFAULT_POSES
from .prompt_builder import build_image_prompt, build_caption_prompt, DESCRIBE_PROMPT
from .product_describer import ProductDescriber

__all__ = [
    "select_poses",
    "POSE_COUNT",
    "POSE_TABLE",
    "DEFAULT_POSES",
    "build_image_prompt",
    "build_caption_prompt",
    "DESCRIBE_PROMPT",
    "ProductDescriber",
]
