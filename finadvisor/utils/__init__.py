"""Utility modules."""
from .logger import get_logger, set_user_context
from .exceptions import (
    AdvisorError,
    ConfigError,
    ValidationError,
    LLMError,
    RetryableError,
    RetryableLLMError,
    CollaboratorTimeoutError
)
from .retry import retry_with_backoff

__all__ = [
    "get_logger",
    "set_user_context",
    "AdvisorError",
    "ConfigError",
    "ValidationError",
    "LLMError",
    "RetryableError",
    "RetryableLLMError",
    "CollaboratorTimeoutError",
    "retry_with_backoff"
]
