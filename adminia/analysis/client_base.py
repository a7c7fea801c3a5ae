from abc import ABC, abstractmethod


class BaseAnalysisClient(ABC):
    """Contract for provider-specific multimodal chat clients."""

    @abstractmethod
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
        """Return the provider response as plain text ("" when the model said nothing).

        Args:
            image_data_url: Inline image as a `data:<mime>;base64,...` URL.
            json_response: Ask the provider to answer with a JSON object only.

        Raises:
            AnalysisFailedError: on any provider failure.
        """
