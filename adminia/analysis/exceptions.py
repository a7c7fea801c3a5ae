from adminia.exceptions import AdminiaError, InvalidInputError


class AnalysisFailedError(AdminiaError):
    """Raised when document analysis fails."""


class AnalysisNetworkError(AnalysisFailedError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class AnalysisResponseError(AnalysisFailedError):
    """Raised when the AI provider returns something other than a JSON object."""


class AnalysisConfigurationError(AnalysisFailedError):
    """Raised when the AI provider is not usable with the current settings."""


class AnalysisInputError(InvalidInputError):
    """Raised when neither text nor image content is given for analysis."""
