"""AI-generated marketing copy for listings.

Sends one templated prompt per request to an OpenAI-compatible
chat-completions endpoint and returns the generated text.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from adilla.config import GeneratorConfig
from adilla.errors import GenerationFailure
from adilla.models import DescriptionRequest

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a real estate copywriter."

PROMPT_TEMPLATE = """Your task is to create an engaging and attractive property description based on the given details.

Property Type: {property_type}
Location: {location}
Bedrooms: {bedrooms:g}
Bathrooms: {bathrooms:g}
Square Footage: {square_footage:g}
Amenities: {amenities}
Unique Features: {unique_features}

Write a compelling description that highlights the best aspects of the property and appeals to potential tenants or buyers. Use positive and evocative language to create a sense of home and comfort. The description should be approximately 150-200 words."""


def build_prompt(request: DescriptionRequest) -> str:
    return PROMPT_TEMPLATE.format(**request.model_dump())


def _extract_text(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content.strip() if isinstance(content, str) else ""


class DescriptionGenerator:
    """Generates listing descriptions through a text-generation API."""

    def __init__(self, config: GeneratorConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers={"Authorization": f"Bearer {self.config.api_key}"},
                timeout=self.config.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def generate(self, request: DescriptionRequest) -> str:
        """Return a generated description, or raise GenerationFailure."""
        if not self.config.api_key:
            raise GenerationFailure("No API key configured for the description generator")

        payload = {
            "model": self.config.model,
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(request)},
            ],
        }

        try:
            client = await self._get_client()
            resp = await client.post("/chat/completions", json=payload)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise GenerationFailure(f"Description request failed: {e}") from e
        except ValueError as e:
            raise GenerationFailure(f"Description response was not JSON: {e}") from e

        text = _extract_text(data)
        if not text:
            raise GenerationFailure("Description generator returned no text")

        logger.info(
            "Generated %d-word description for %s in %s",
            len(text.split()),
            request.property_type,
            request.location,
        )
        return text

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
