"""Custom exception classes for FinAdvisor."""


class AdvisorError(Exception):
    """Base exception for FinAdvisor."""
    pass


class ConfigError(AdvisorError):
    """Configuration-related errors."""
    pass


class ValidationError(AdvisorError):
    """Malformed transaction, profile or budget records."""
    pass


class LLMError(AdvisorError):
    """Generation collaborator errors."""
    pass


# Retryable errors
class RetryableError(AdvisorError):
    """Base class for errors that should trigger retry."""
    pass


class RetryableLLMError(RetryableError, LLMError):
    """Collaborator errors that can be retried."""
    pass


class CollaboratorTimeoutError(RetryableLLMError):
    """Collaborator did not answer within the configured timeout."""
    pass
