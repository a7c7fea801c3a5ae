"""AI-powered document categorization and data extraction."""

import base64
import binascii
import json
from pathlib import Path
from typing import Any

from adminia.analysis.base import BaseDocumentAnalyzer
from adminia.analysis.client_base import BaseAnalysisClient
from adminia.analysis.exceptions import AnalysisInputError, AnalysisResponseError
from adminia.analysis.models import AnalysisResult
from adminia.analysis.prompt_loader import load_analysis_prompt, load_extraction_prompt
from adminia.analysis.validator import build_analysis_result
from adminia.logging.logger import Log

DEFAULT_IMAGE_INSTRUCTION = "Analyze this document image and extract key information."


class DocumentAnalyzer(BaseDocumentAnalyzer):
    """Analyzes document text and images through an AI provider client."""

    def __init__(
        self,
        *,
        client: BaseAnalysisClient,
        model: str,
        temperature: float = 0.0,
        max_tokens: int = 1000,
        prompt_template_path: Path | None = None,
        response_example_path: Path | None = None,
        extraction_prompt_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(1.0, temperature))
        self._max_tokens = max_tokens
        self._analysis_prompt = load_analysis_prompt(prompt_template_path, response_example_path)
        self._extraction_prompt = load_extraction_prompt(extraction_prompt_path)

    def analyze(
        self,
        text: str | None = None,
        image_base64: str | None = None,
        image_mime_type: str = "image/jpeg",
    ) -> AnalysisResult:
        has_text = bool(text and text.strip())
        if not has_text and not image_base64:
            raise AnalysisInputError("Analysis needs document text or an image")

        image_data_url = self._image_data_url(image_base64, image_mime_type) if image_base64 else None
        user_text = text.strip() if text and has_text else DEFAULT_IMAGE_INSTRUCTION
        Log.debug(f"Analysis prompt:\n{user_text}")

        raw_response = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            system_prompt=self._analysis_prompt,
            user_text=user_text,
            image_data_url=image_data_url,
            json_response=True,
        )
        Log.debug(f"AI raw response:\n{raw_response}")

        result = build_analysis_result(self._parse_json(raw_response))
        Log.info(
            f"Analysis complete: category={result.category} "
            f"confidence={result.confidence:.2f}"
        )
        return result

    def extract_text(self, image_base64: str, image_mime_type: str = "image/jpeg") -> str:
        if not image_base64:
            raise AnalysisInputError("Text extraction needs an image")
        raw_response = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            system_prompt=None,
            user_text=self._extraction_prompt,
            image_data_url=self._image_data_url(image_base64, image_mime_type),
            json_response=False,
        )
        text = raw_response.strip()
        Log.info(f"Extracted {len(text)} chars of text from image")
        return text

    @staticmethod
    def _image_data_url(image_base64: str, image_mime_type: str) -> str:
        try:
            base64.b64decode(image_base64, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise AnalysisInputError(f"Image is not valid base64: {exc}") from exc
        mime_type = image_mime_type if image_mime_type.startswith("image/") else "image/jpeg"
        return f"data:{mime_type};base64,{image_base64}"

    @staticmethod
    def _parse_json(raw: str) -> dict[str, Any]:
        cleaned = raw.strip()
        if not cleaned:
            raise AnalysisResponseError("AI returned empty response")
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise AnalysisResponseError(f"Invalid JSON response: {exc}") from exc

        if not isinstance(parsed, dict):
            raise AnalysisResponseError("JSON response must be an object")
        return parsed
