import base64
from typing import Any, Optional

import structlog
from core.config import Settings
from core.exceptions import ImageGenerationError
from domain.interfaces import ImageGenerator
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

logger = structlog.get_logger()


class GeminiImageGenerator(ImageGenerator):
    def __init__(self, settings: Settings, client: Optional[genai.Client] = None):
        self.model = settings.GEMINI_IMAGE_MODEL
        self.client = client or genai.Client(
            api_key=settings.GEMINI_API_KEY,
            http_options=self._http_options(settings),
        )

    @staticmethod
    def _http_options(settings: Settings) -> Optional[genai_types.HttpOptions]:
        # google-genai takes the timeout in milliseconds
        if settings.http_timeout is None:
            return None
        return genai_types.HttpOptions(timeout=int(settings.http_timeout * 1000))

    async def generate_image(self, prompt: str) -> bytes:
        """
        Text-to-image via Gemini. Returns the inline image of the first candidate.
        """
        logger.info("gemini_generation_started", model=self.model, prompt=prompt)

        try:
            response = await self.client.aio.models.generate_content(model=self.model, contents=prompt)
        except genai_errors.APIError as e:
            logger.error("gemini_generation_failed", error=str(e))
            raise ImageGenerationError(f"Image generation failed: {e}", original_error=e) from e

        image = self._extract_inline_image(response)
        if not image:
            raise ImageGenerationError("No image returned")

        logger.info("image_generated", size_bytes=len(image))
        return image

    @staticmethod
    def _extract_inline_image(response: Any) -> Optional[bytes]:
        candidates = getattr(response, "candidates", None) or []
        if not candidates or candidates[0].content is None:
            return None

        # Text parts may be interleaved; the last inline part wins
        image: Optional[bytes] = None
        for part in candidates[0].content.parts or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                image = inline.data

        # The SDK hands back raw bytes; raw REST payloads carry base64 text
        if isinstance(image, str):
            return base64.b64decode(image)
        return image
