"""Custom exception hierarchy for the chat relay service."""


class AgentError(Exception):
    """Base exception for service-level issues."""


class ConfigurationError(AgentError):
    """Raised when configuration is invalid or missing."""


class ExternalServiceError(AgentError):
    """Raised when an external dependency responds with an error."""


class RateLimitExceeded(ExternalServiceError):
    """Raised when the upstream API reports rate limiting."""


class ModelResponseError(ExternalServiceError):
    """Raised when the model endpoint returns a response that cannot be used."""
