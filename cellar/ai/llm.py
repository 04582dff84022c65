"""
LLM client used by the pairing and enrichment proxies.

Wraps an OpenAI-compatible chat-completions endpoint. Prompts are single
user turns (optionally with an image); answers are plain text from which
the callers extract a JSON object.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from cellar.app.settings import settings
from cellar.errors import AIConfigError

logger = logging.getLogger(__name__)

# Greedy: from the first "{" to the last "}" (the model may wrap JSON in prose or fences)
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """
    Pull the JSON object out of a model answer.

    Returns:
        The parsed object, or None when the answer holds no "{...}" span.

    Raises:
        ValueError: If a span is found but is not valid JSON.
    """
    match = _JSON_OBJECT.search(text or "")
    if not match:
        return None
    parsed = json.loads(match.group(0))
    if not isinstance(parsed, dict):
        raise ValueError("expected a JSON object")
    return parsed


class LLMClient:
    """
    Thin async client for one model on an OpenAI-compatible API.
    """

    def __init__(self, api_key: str, model: str, base_url: Optional[str] = None):
        """
        Args:
            api_key:  API key for the provider.
            model:    Name of the model to use.
            base_url: Provider base URL; None means the OpenAI default.
        """
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url)
        self.model = model

    async def complete(
        self,
        prompt: str,
        max_tokens: int = 1024,
        image_base64: Optional[str] = None,
        image_media_type: Optional[str] = None,
    ) -> str:
        """
        Send a single user message and return the text of the reply.

        When an image is given it is sent inline as a data URL before the
        prompt text.
        """
        content: Any = prompt
        if image_base64:
            parts: List[Dict[str, Any]] = [
                {
                    "type": "image_url",
                    "image_url": {
                        "url": f"data:{image_media_type or 'image/jpeg'};base64,{image_base64}"
                    },
                },
                {"type": "text", "text": prompt},
            ]
            content = parts

        logger.info(f"LLM request to {self.model} (max_tokens={max_tokens}, image={bool(image_base64)})")
        resp = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": content}],
            max_tokens=max_tokens,
        )
        return resp.choices[0].message.content or ""


_client: Optional[LLMClient] = None


def get_llm() -> LLMClient:
    """
    Return the shared LLM client, creating it on first use.

    Raises:
        AIConfigError: If no API key is configured.
    """
    global _client
    if not settings.LLM_API_KEY:
        raise AIConfigError("LLM API key not configured on server")
    if _client is None:
        _client = LLMClient(settings.LLM_API_KEY, settings.LLM_MODEL, settings.LLM_BASE_URL)
    return _client
