"""Gemini REST API client for product description, image and caption generation."""

import base64
import logging
from typing import Any

import httpx

from ..config import GeminiConfig
from ..models import ImageBlob


logger = logging.getLogger(__name__)

# Finish reasons that mean the candidate was withheld by policy.
BLOCKED_FINISH_REASONS = {"SAFETY", "RECITATION", "PROHIBITED_CONTENT", "IMAGE_SAFETY", "BLOCKLIST", "SPII"}


class GeminiAPIError(Exception):
    """The service rejected a call or returned a blocked candidate.
    
    The message always reads "<status code> <STATUS>: <detail>" so callers
    can classify it from its text alone.
    """
    
    def __init__(self, status_code: int | None, status: str, message: str):
        self.status_code = status_code
        self.status = status
        self.detail = message
        prefix = f"{status_code} {status}" if status_code is not None else status
        super().__init__(f"{prefix}: {message}")


class GeminiClient:
    """Client for the Gemini `generateContent` endpoint."""
    
    def __init__(
        self,
        config: GeminiConfig,
        api_key: str | None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.api_key = api_key
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
    
    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                transport=self._transport,
            )
        return self._client
    
    async def check_connection(self) -> bool:
        """Verify the service is reachable and the key is accepted."""
        try:
            response = await self.client.get(
                f"/models/{self.config.text_model}",
                headers=self._headers(),
            )
            return response.status_code == 200
        except httpx.TransportError:
            return False
    
    async def generate_image(self, images: list[ImageBlob], prompt: str) -> ImageBlob | None:
        """Synthesize one image from reference images and a prompt.
        
        Returns None when the response carries no image payload.
        Raises GeminiAPIError on HTTP errors and safety blocks.
        """
        data = await self._generate_content(
            self.config.image_model,
            images,
            prompt,
            generation_config={"responseModalities": ["IMAGE"]},
        )
        
        for part in self._candidate_parts(data):
            inline = part.get("inlineData") or part.get("inline_data")
            if inline and inline.get("data"):
                return ImageBlob(
                    data=base64.b64decode(inline["data"]),
                    mime_type=inline.get("mimeType") or inline.get("mime_type") or "image/png",
                )
        return None
    
    async def generate_text(self, images: list[ImageBlob], prompt: str) -> str | None:
        """Generate text about the given images. Returns None when empty."""
        data = await self._generate_content(self.config.text_model, images, prompt)
        
        text = "".join(part.get("text", "") for part in self._candidate_parts(data))
        return text or None
    
    async def _generate_content(
        self,
        model: str,
        images: list[ImageBlob],
        prompt: str,
        generation_config: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """POST a generateContent request and return the decoded body."""
        parts: list[dict[str, Any]] = [
            {"inlineData": {"mimeType": image.mime_type, "data": image.to_base64()}}
            for image in images
        ]
        parts.append({"text": prompt})
        
        payload: dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}
        if generation_config:
            payload["generationConfig"] = generation_config
        
        response = await self.client.post(
            f"/models/{model}:generateContent",
            json=payload,
            headers=self._headers(),
        )
        
        if response.status_code != 200:
            raise self._error_from_response(response)
        
        data = response.json()
        self._raise_if_blocked(data)
        return data
    
    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["x-goog-api-key"] = self.api_key
        return headers
    
    @staticmethod
    def _error_from_response(response: httpx.Response) -> GeminiAPIError:
        """Build an error from a Google-style error body, or the raw text."""
        status = "UNKNOWN"
        message = response.text[:500]
        try:
            body = response.json()
        except ValueError:
            body = None
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            status = error.get("status") or status
            message = error.get("message") or message
        return GeminiAPIError(response.status_code, status, message)
    
    @staticmethod
    def _raise_if_blocked(data: dict[str, Any]) -> None:
        """Turn prompt-level or candidate-level policy blocks into errors."""
        block_reason = (data.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            raise GeminiAPIError(None, "SAFETY", f"prompt blocked ({block_reason})")
        
        candidates = data.get("candidates") or []
        if candidates:
            finish_reason = candidates[0].get("finishReason")
            if finish_reason in BLOCKED_FINISH_REASONS:
                raise GeminiAPIError(None, "SAFETY", f"candidate blocked (finishReason={finish_reason})")
    
    @staticmethod
    def _candidate_parts(data: dict[str, Any]) -> list[dict[str, Any]]:
        candidates = data.get("candidates") or []
        if not candidates:
            return []
        content = candidates[0].get("content") or {}
        return content.get("parts") or []
    
    async def close(self):
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
