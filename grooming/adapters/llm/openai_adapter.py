"""OpenAI adapter — implements RecommendationOracle using the OpenAI API."""

from __future__ import annotations

import logging

from openai import AsyncOpenAI, OpenAIError

from grooming.application.ports.oracle_port import OracleError, RecommendationOracle
from grooming.config import settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are an experienced engineering manager assigning backlog tickets to engineers \
during grooming. You weigh prior work on the same epic first, then domain \
specialization, then current workload. You always answer with a single valid JSON \
object and nothing else."""


def is_placeholder_key(api_key: str) -> bool:
    key = (api_key or "").strip()
    return not key or "your-openai-api-key" in key


class OpenAIAdapter(RecommendationOracle):
    """OpenAI implementation of RecommendationOracle."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_retries: int = 2,
        client: AsyncOpenAI | None = None,
    ):
        self._api_key = api_key if api_key is not None else settings.openai_api_key
        self._model = model or settings.openai_model
        if client is not None:
            self._client = client
        elif is_placeholder_key(self._api_key):
            self._client = None
        else:
            self._client = AsyncOpenAI(api_key=self._api_key, max_retries=max_retries)

    @property
    def model(self) -> str:
        return self._model

    async def complete(self, prompt: str, temperature: float) -> str:
        """Send one chat completion and return the raw message content."""
        if self._client is None:
            raise OracleError("OPENAI_API_KEY is not set (or placeholder)")

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=temperature,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            raise OracleError(f"OpenAI request failed: {e}") from e

        if not response.choices:
            raise OracleError("OpenAI returned no choices")
        content = response.choices[0].message.content or ""
        if not content.strip():
            raise OracleError("OpenAI returned an empty message")

        logger.debug("OpenAI %s replied with %d chars (t=%.2f)", self._model, len(content), temperature)
        return content
