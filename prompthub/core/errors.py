class PromptHubError(Exception):
    """Base exception for the prompt hub backend."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.message}


class ValidationError(PromptHubError):
    """Raised when a required input is missing or empty."""
    status_code = 400

    def __init__(self, field: str, message: str = None):
        super().__init__(message or f"{field} is required")
        self.field = field

    def to_dict(self) -> dict:
        return {**super().to_dict(), "field": self.field}


class MissingCredential(PromptHubError):
    """Raised when the API key for a vendor is not configured."""

    def __init__(self, provider: str, setting: str):
        super().__init__(f"{provider} API key missing. Please set {setting}.")
        self.provider = provider
        self.setting = setting

    def to_dict(self) -> dict:
        return {**super().to_dict(), "setting": self.setting}


class ProviderError(PromptHubError):
    """Raised when a vendor call fails or answers with a non-2xx status."""
    status_code = 502

    def __init__(self, message: str, provider_status: int = None, body=None):
        super().__init__(message)
        self.provider_status = provider_status
        # Parsed vendor error body, when there was one
        self.body = body


class InvalidResponseShape(ProviderError):
    """Raised when a vendor answered 2xx but no text could be extracted."""


class StoreError(PromptHubError):
    """Raised when a record store call fails."""


class StoreConflict(StoreError):
    """Raised when a write violates a uniqueness constraint."""
    status_code = 409


class NotFound(PromptHubError):
    """Raised when a lookup or update targets a non-existent record."""
    status_code = 404
