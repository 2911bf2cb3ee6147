"""Product Describer - detects a short product description from uploaded images."""

import logging

from ..errors import GenerationError
from ..models import ImageBlob
from ..services import GeminiClient, RetryingInvoker, require_text
from .prompt_builder import DESCRIBE_PROMPT


logger = logging.getLogger(__name__)


class ProductDescriber:
    """Asks the text model what the product is.
    
    The result feeds pose selection, so failures degrade to an empty
    description (default poses) instead of raising.
    """
    
    def __init__(self, client: GeminiClient, invoker: RetryingInvoker):
        self.client = client
        self.invoker = invoker
    
    async def describe(self, images: list[ImageBlob]) -> str:
        """Return a one-line description, or "" if detection failed."""
        if not images:
            return ""
        
        try:
            text = await self.invoker.invoke(
                lambda: self.client.generate_text(images, DESCRIBE_PROMPT),
                validate=require_text,
                label="describe",
            )
        except GenerationError as e:
            logger.warning("Product description failed (%s), using default poses", e.kind.value)
            return ""
        
        return " ".join(text.split())
