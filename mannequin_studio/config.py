"""Configuration management for the mannequin studio."""

from pathlib import Path
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class GeminiConfig(BaseModel):
    """Generative service connection settings."""
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    text_model: str = "gemini-2.5-flash"
    image_model: str = "gemini-2.5-flash-image"
    timeout: float = 120.0  # image synthesis can be slow


class RetryConfig(BaseModel):
    """Retry budget for one kind of remote call."""
    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=0.5, gt=0)  # seconds


class ImageRetryConfig(RetryConfig):
    """Image calls are costlier: fewer attempts, longer backoff."""
    max_attempts: int = Field(default=2, ge=1)
    base_delay: float = Field(default=1.0, gt=0)


class GenerationConfig(BaseModel):
    """Fan-out generation settings."""
    fallback_caption: str = "Sublimez votre style avec notre nouvelle collection."
    caption_language: str = "French"
    max_concurrency: int = Field(default=5, ge=1)


class StudioConfig(BaseSettings):
    """Main studio configuration."""
    
    gemini_api_key: str | None = None
    
    # Sub-configs
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    
    # Retry budgets per call type
    description_retry: RetryConfig = Field(default_factory=RetryConfig)
    caption_retry: RetryConfig = Field(default_factory=RetryConfig)
    image_retry: ImageRetryConfig = Field(default_factory=ImageRetryConfig)
    
    # History
    output_dir: Path = Path("output/generations")
    save_history: bool = False
    
    log_level: str = "INFO"
    
    class Config:
        env_file = ".env"
        env_prefix = ""
        env_nested_delimiter = "__"
        extra = "ignore"


def load_config() -> StudioConfig:
    """Load configuration from environment and defaults."""
    return StudioConfig()
