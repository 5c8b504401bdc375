class EnhancementError(Exception):
    """Base class for failures surfaced by the enhancement pipeline."""

    message = "AI enhancement failed."

    def __init__(self, message: str = ""):
        super().__init__(message or self.message)

    @property
    def error_description(self) -> str:
        return str(self)


class NotConfigured(EnhancementError):
    message = "AI provider not configured. Please check your API key."


class InvalidResponse(EnhancementError):
    message = "Invalid response from AI provider."


class EnhancementFailed(EnhancementError):
    message = "AI enhancement failed to process the text."


class NetworkError(EnhancementError):
    message = "Network connection failed. Check your internet."


class CustomError(EnhancementError):
    """Provider-specific failure carrying the provider's own description."""

    def __init__(self, message: str):
        super().__init__(message or "An unknown provider error occurred.")
