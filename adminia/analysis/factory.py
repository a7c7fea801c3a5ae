from typing import ClassVar

from adminia.analysis.analyzer import DocumentAnalyzer
from adminia.analysis.base import BaseDocumentAnalyzer
from adminia.analysis.example_client_adapter import ExampleClientAdapter
from adminia.analysis.openai_client_adapter import OpenAIClientAdapter
from adminia.config.settings import Settings
from adminia.logging.logger import Log


class AnalyzerFactory:
    """Creates the configured document analyzer."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }
    KEYLESS_PROVIDERS: ClassVar[frozenset[str]] = frozenset({"ollama"})

    @classmethod
    def create(cls, settings: Settings) -> BaseDocumentAnalyzer:
        """Create a configured analyzer from application settings.

        A missing API key does not fail here; every analysis call fails fast instead.
        """
        provider = settings.analysis_provider.lower()
        if provider == "example":
            return DocumentAnalyzer(client=ExampleClientAdapter(), model="example")

        base_url = cls._resolve_base_url(provider, settings)
        requires_api_key = provider not in cls.KEYLESS_PROVIDERS
        if requires_api_key and not settings.analysis_api_key:
            Log.warning(
                f"No API key configured for analysis provider '{provider}'; "
                "document analysis will fail until one is set"
            )
        client = OpenAIClientAdapter(
            api_key=settings.analysis_api_key,
            timeout_seconds=settings.analysis_timeout_seconds,
            base_url=base_url,
            requires_api_key=requires_api_key,
        )
        return DocumentAnalyzer(
            client=client,
            model=settings.analysis_model_name,
            temperature=settings.analysis_temperature,
            max_tokens=settings.analysis_max_tokens,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        override = settings.analysis_base_url.strip()
        if provider == "openai":
            return override or None
        if provider == "openai_compatible":
            if not override:
                raise ValueError(
                    "analysis_base_url is required for analysis_provider=openai_compatible"
                )
            return override
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return override or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown analysis provider '{provider}'. Choose from: {supported}"
        )
