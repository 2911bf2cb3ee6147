"""Tests for GeminiClient against a mocked HTTP transport."""

import base64
import json

import httpx
import pytest

from mannequin_studio.config import GeminiConfig
from mannequin_studio.errors import ErrorKind
from mannequin_studio.services import GeminiAPIError, GeminiClient, classify_error


def make_client(handler, api_key="test-key"):
    return GeminiClient(
        config=GeminiConfig(base_url="https://gemini.test/v1beta"),
        api_key=api_key,
        transport=httpx.MockTransport(handler),
    )


def image_response(data: bytes, mime_type="image/png"):
    return {
        "candidates": [{
            "finishReason": "STOP",
            "content": {"parts": [
                {"text": "Here is your image"},
                {"inlineData": {"mimeType": mime_type, "data": base64.b64encode(data).decode()}},
            ]},
        }]
    }


def text_response(*texts):
    return {"candidates": [{"finishReason": "STOP", "content": {"parts": [{"text": t} for t in texts]}}]}


class TestGenerateImage:
    
    @pytest.mark.asyncio
    async def test_request_shape(self, product_image, minimal_png_bytes):
        captured = {}
        
        def handler(request: httpx.Request):
            captured["url"] = str(request.url)
            captured["headers"] = request.headers
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=image_response(minimal_png_bytes))
        
        client = make_client(handler)
        await client.generate_image([product_image], "Pose de face")
        await client.close()
        
        assert captured["url"] == "https://gemini.test/v1beta/models/gemini-2.5-flash-image:generateContent"
        assert captured["headers"]["x-goog-api-key"] == "test-key"
        body = captured["body"]
        assert body["generationConfig"] == {"responseModalities": ["IMAGE"]}
        parts = body["contents"][0]["parts"]
        assert parts[0]["inlineData"]["mimeType"] == "image/png"
        assert base64.b64decode(parts[0]["inlineData"]["data"]) == product_image.data
        assert parts[-1] == {"text": "Pose de face"}
    
    @pytest.mark.asyncio
    async def test_extracts_inline_image(self, product_image):
        payload = b"\xff\xd8\xff\xe0generated"
        client = make_client(lambda request: httpx.Response(200, json=image_response(payload, "image/jpeg")))
        
        blob = await client.generate_image([product_image], "prompt")
        
        assert blob.data == payload
        assert blob.mime_type == "image/jpeg"
    
    @pytest.mark.asyncio
    async def test_text_only_response_is_empty(self, product_image):
        client = make_client(lambda request: httpx.Response(200, json=text_response("I cannot draw that")))
        
        assert await client.generate_image([product_image], "prompt") is None
    
    @pytest.mark.asyncio
    async def test_no_candidates_is_empty(self, product_image):
        client = make_client(lambda request: httpx.Response(200, json={"candidates": []}))
        
        assert await client.generate_image([product_image], "prompt") is None
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("finish_reason", ["SAFETY", "RECITATION", "IMAGE_SAFETY"])
    async def test_blocked_candidate_raises_safety(self, product_image, finish_reason):
        body = {"candidates": [{"finishReason": finish_reason, "content": {"parts": []}}]}
        client = make_client(lambda request: httpx.Response(200, json=body))
        
        with pytest.raises(GeminiAPIError) as exc_info:
            await client.generate_image([product_image], "prompt")
        
        assert classify_error(exc_info.value) == ErrorKind.SAFETY_BLOCK
    
    @pytest.mark.asyncio
    async def test_blocked_prompt_raises_safety(self, product_image):
        body = {"promptFeedback": {"blockReason": "OTHER"}}
        client = make_client(lambda request: httpx.Response(200, json=body))
        
        with pytest.raises(GeminiAPIError) as exc_info:
            await client.generate_image([product_image], "prompt")
        
        assert classify_error(exc_info.value) == ErrorKind.SAFETY_BLOCK


class TestErrorResponses:
    """HTTP errors keep status and message text for classification."""
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code,status,message,kind", [
        (429, "RESOURCE_EXHAUSTED", "You exceeded your current quota.", ErrorKind.QUOTA_EXCEEDED),
        (503, "UNAVAILABLE", "The model is overloaded. Please try again later.", ErrorKind.MODEL_OVERLOADED),
        (400, "INVALID_ARGUMENT", "API key not valid. Please pass a valid API key.", ErrorKind.API_KEY_INVALID),
        (400, "FAILED_PRECONDITION", "Billing is not enabled for this project.", ErrorKind.BILLING_NOT_ENABLED),
        (500, "INTERNAL", "An internal error has occurred.", ErrorKind.TRANSIENT),
    ])
    async def test_google_error_body(self, product_image, status_code, status, message, kind):
        body = {"error": {"code": status_code, "status": status, "message": message}}
        client = make_client(lambda request: httpx.Response(status_code, json=body))
        
        with pytest.raises(GeminiAPIError) as exc_info:
            await client.generate_text([product_image], "prompt")
        
        error = exc_info.value
        assert error.status_code == status_code
        assert str(error) == f"{status_code} {status}: {message}"
        assert classify_error(error) == kind
    
    @pytest.mark.asyncio
    async def test_plain_text_error_body(self, product_image):
        client = make_client(lambda request: httpx.Response(503, text="Service Unavailable"))
        
        with pytest.raises(GeminiAPIError) as exc_info:
            await client.generate_image([product_image], "prompt")
        
        assert "Service Unavailable" in str(exc_info.value)
        assert classify_error(exc_info.value) == ErrorKind.MODEL_OVERLOADED


class TestGenerateText:
    
    @pytest.mark.asyncio
    async def test_joins_text_parts(self, product_image):
        captured = {}
        
        def handler(request):
            captured["url"] = str(request.url)
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=text_response("Brillez ", "ce soir."))
        
        client = make_client(handler)
        
        assert await client.generate_text([product_image], "caption") == "Brillez ce soir."
        assert captured["url"].endswith("/models/gemini-2.5-flash:generateContent")
        assert "generationConfig" not in captured["body"]
    
    @pytest.mark.asyncio
    async def test_empty_text_is_none(self, product_image):
        client = make_client(lambda request: httpx.Response(200, json=text_response()))
        
        assert await client.generate_text([product_image], "caption") is None


class TestConnection:
    
    @pytest.mark.asyncio
    async def test_check_connection_ok(self):
        client = make_client(lambda request: httpx.Response(200, json={"name": "models/gemini-2.5-flash"}))
        assert await client.check_connection() is True
    
    @pytest.mark.asyncio
    async def test_check_connection_rejected_key(self):
        client = make_client(lambda request: httpx.Response(400, json={"error": {"status": "INVALID_ARGUMENT"}}))
        assert await client.check_connection() is False
    
    @pytest.mark.asyncio
    async def test_check_connection_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)
        
        client = make_client(handler)
        assert await client.check_connection() is False
    
    @pytest.mark.asyncio
    async def test_no_api_key_header_when_unset(self):
        captured = {}
        
        def handler(request):
            captured["headers"] = request.headers
            return httpx.Response(200, json={})
        
        client = make_client(handler, api_key=None)
        await client.check_connection()
        
        assert "x-goog-api-key" not in captured["headers"]


@pytest.mark.integration
class TestLiveService:
    """Hits the real API; run with `pytest -m integration` and GEMINI_API_KEY set."""
    
    @pytest.mark.asyncio
    async def test_connection(self):
        from mannequin_studio.config import load_config
        
        config = load_config()
        if not config.gemini_api_key:
            pytest.skip("GEMINI_API_KEY not set")
        
        client = GeminiClient(config=config.gemini, api_key=config.gemini_api_key)
        try:
            assert await client.check_connection() is True
        finally:
            await client.close()
