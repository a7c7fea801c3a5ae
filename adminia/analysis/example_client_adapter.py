"""Offline analysis client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseAnalysisClient and register the provider in AnalyzerFactory.
"""

import json
from typing import ClassVar

from adminia.analysis.client_base import BaseAnalysisClient


class ExampleClientAdapter(BaseAnalysisClient):
    """Adapter that answers with a fixed analysis and a fixed transcription.

    No network calls. Useful for local development and demos without an API key.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "category": "other",
        "confidence": 0.5,
        "extractedData": {},
        "summary": "Example analysis generated without an AI provider.",
        "keyInformation": [],
        "documentType": "Unknown",
    }
    DEFAULT_TRANSCRIPTION: ClassVar[str] = ""

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
        _ = model, temperature, max_tokens, system_prompt, user_text, image_data_url
        if json_response:
            return json.dumps(self.DEFAULT_RESPONSE)
        return self.DEFAULT_TRANSCRIPTION
