from __future__ import annotations

from typing import Optional, Sequence

from openai import AsyncOpenAI

from careercoach.ai.types import ChatMessage


class OpenAIProvider:
    def __init__(
        self,
        model: str,
        api_key: str,
        base_url: Optional[str] = None,
        timeout_s: float = 12.0,
        max_retries: int = 1,
        temperature: float = 0.3,
        max_output_tokens: int = 1500,
    ):
        if not api_key:
            raise RuntimeError("OPENAI_API_KEY is missing")
        self._model = model
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url or None,
            timeout=timeout_s,
            max_retries=max_retries,
        )

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        payload = [{"role": m.role, "content": m.content} for m in messages]
        response = await self._client.chat.completions.create(
            model=self._model,
            messages=payload,
            temperature=self._temperature,
            max_tokens=self._max_output_tokens,
            response_format={"type": "json_object"},
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def close(self) -> None:
        await self._client.close()
