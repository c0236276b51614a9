"""
Prompt enhancement with a Gemini text model.
Any failure returns the original prompt unchanged.
"""
from typing import List, Optional

import structlog
from google import genai
from google.genai import types

from .base import InlineImage

logger = structlog.get_logger()

ENHANCEMENT_INSTRUCTIONS = """You are an expert at creating detailed image generation prompts for app store covers.

User request: {prompt}
{context_line}
Create a detailed, specific prompt for generating an app store cover image. Include:
- Visual style and aesthetic
- Color palette
- Layout and composition
- Typography style (if any)
- Mood and tone
- Technical specifications (dimensions, format)

Return only the prompt, no explanations."""


class PromptEnhancer:
    """Rewrites a generation prompt with the help of a Gemini text model"""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-1.5-flash",
        enabled: bool = True,
        client: Optional[genai.Client] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.enabled = enabled
        self._client = client

    @property
    def available(self) -> bool:
        return self.enabled and bool(self.api_key or self._client)

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def build_contents(
        self,
        prompt: str,
        context: Optional[str],
        reference_images: Optional[List[InlineImage]] = None,
    ) -> List[types.Content]:
        parts = [
            types.Part.from_bytes(data=image.data, mime_type=image.mime_type)
            for image in reference_images or []
        ]
        context_line = f"Context: {context}\n" if context else ""
        parts.append(types.Part.from_text(
            text=ENHANCEMENT_INSTRUCTIONS.format(prompt=prompt, context_line=context_line)
        ))
        return [types.Content(role="user", parts=parts)]

    def enhance(
        self,
        prompt: str,
        context: Optional[str] = None,
        reference_images: Optional[List[InlineImage]] = None,
    ) -> str:
        if not self.available:
            return prompt

        try:
            response = self._get_client().models.generate_content(
                model=self.model,
                contents=self.build_contents(prompt, context, reference_images),
            )
            enhanced = (response.text or "").strip()
        except Exception as e:
            logger.warning(
                "Prompt enhancement failed, using original prompt",
                model=self.model,
                error=str(e),
                error_type=type(e).__name__
            )
            return prompt

        if not enhanced:
            return prompt

        logger.info("Prompt enhanced", model=self.model, preview=enhanced[:100])
        return enhanced
