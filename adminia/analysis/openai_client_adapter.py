from typing import Any

import httpx
import openai

from adminia.analysis.client_base import BaseAnalysisClient
from adminia.analysis.exceptions import (
    AnalysisConfigurationError,
    AnalysisFailedError,
    AnalysisNetworkError,
)


class OpenAIClientAdapter(BaseAnalysisClient):
    """Analysis client adapter built on the OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
        requires_api_key: bool = True,
    ) -> None:
        self._client: openai.OpenAI | None = None
        if api_key or not requires_api_key:
            self._client = openai.OpenAI(
                api_key=api_key or "unused",
                timeout=timeout_seconds,
                base_url=base_url,
                max_retries=0,
            )

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        system_prompt: str | None,
        user_text: str,
        image_data_url: str | None = None,
        json_response: bool = False,
    ) -> str:
        if self._client is None:
            raise AnalysisConfigurationError("AI provider API key is not configured")

        request: dict[str, Any] = {
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "messages": self._build_messages(system_prompt, user_text, image_data_url),
        }
        if json_response:
            request["response_format"] = {"type": "json_object"}

        try:
            response = self._client.chat.completions.create(**request)
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise AnalysisNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise AnalysisNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise AnalysisFailedError("AI returned no choices")
        return response.choices[0].message.content or ""

    @staticmethod
    def _build_messages(
        system_prompt: str | None,
        user_text: str,
        image_data_url: str | None,
    ) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        if image_data_url is None:
            messages.append({"role": "user", "content": user_text})
        else:
            messages.append(
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": user_text},
                        {"type": "image_url", "image_url": {"url": image_data_url}},
                    ],
                }
            )
        return messages
