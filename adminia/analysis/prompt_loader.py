from pathlib import Path

from adminia.analysis.exceptions import AnalysisConfigurationError
from adminia.documents.categories import describe_categories

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def _read(path: Path, what: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise AnalysisConfigurationError(f"Failed to load {what}: {exc}") from exc


def load_analysis_prompt(
    template_path: Path | None = None,
    example_path: Path | None = None,
) -> str:
    """Build the system instruction fixing the output schema and the categories.

    Args:
        template_path: Prompt template with {categories} and {json_example}
                       placeholders. Defaults to the bundled analysis_prompt.txt.
        example_path: JSON response example. Defaults to the bundled
                      analysis_response_example.json.

    Raises:
        AnalysisConfigurationError: if a file cannot be read.
    """
    template = _read(template_path or _DEFAULT_PROMPT_DIR / "analysis_prompt.txt", "analysis prompt")
    example = _read(
        example_path or _DEFAULT_PROMPT_DIR / "analysis_response_example.json",
        "analysis response example",
    )
    return template.format(categories=describe_categories(), json_example=example.strip())


def load_extraction_prompt(path: Path | None = None) -> str:
    """Load the text-extraction instruction used for images."""
    return _read(path or _DEFAULT_PROMPT_DIR / "extraction_prompt.txt", "extraction prompt").strip()
