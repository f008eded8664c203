"""
Completion client for CV generation.

Sends one prompt to an OpenAI-compatible chat completions endpoint (Groq by
default) and returns the raw assistant text. Any failure, including an empty
answer or a timeout, surfaces as `CompletionFailed`; retry is left to the user.
"""
import asyncio
import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from .config import Settings
from .errors import CompletionFailed

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    async def complete(self, prompt: str) -> str: ...


class AIService:
    """Chat-completions client configured from `Settings`."""

    def __init__(self, settings: Settings):
        self.api_key = settings.llm_api_key
        self.base_url = settings.llm_base_url.rstrip("/")
        self.model = settings.llm_model
        self.temperature = settings.llm_temperature
        self.timeout = settings.llm_timeout
        self.system_prompt = settings.llm_system_prompt

    def _use_local(self) -> bool:
        return self.base_url.startswith("http://localhost") or \
               self.base_url.startswith("https://localhost") or \
               "host.docker.internal" in self.base_url

    async def complete(self, prompt: str) -> str:
        if not self.api_key and not self._use_local():
            raise CompletionFailed("No LLM API key configured")

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
        }

        try:
            # Overall deadline on top of httpx's per-operation timeout
            data = await asyncio.wait_for(self._post(headers, payload), timeout=self.timeout)
        except CompletionFailed:
            raise
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.error(f"Completion timed out after {self.timeout}s")
            raise CompletionFailed(f"Completion request timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            logger.error(f"Completion request failed: {e}")
            raise CompletionFailed(f"Completion request failed: {e}") from e

        content = _extract_content(data)
        if not content or not content.strip():
            raise CompletionFailed("Completion returned no content")
        logger.info(f"Completion received from {self.model} ({len(content)} chars)")
        return content

    async def _post(self, headers: Dict[str, str], payload: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{self.base_url}/chat/completions",
                headers=headers,
                json=payload,
            )
        if response.status_code != 200:
            raise CompletionFailed(f"API call failed: {response.status_code} {response.text}")
        try:
            return response.json()
        except ValueError as e:
            raise CompletionFailed(f"API returned a non-JSON body: {e}") from e


def _extract_content(data: Dict[str, Any]) -> Optional[str]:
    try:
        return data["choices"][0]["message"].get("content")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None


def get_ai_service(settings: Settings) -> AIService:
    return AIService(settings)
