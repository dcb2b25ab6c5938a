"""Logging infrastructure with user context."""
import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional


class UserContextFilter(logging.Filter):
    """Add user context to log records."""

    def __init__(self):
        super().__init__()
        self.user_id: Optional[str] = None

    def filter(self, record):
        """Add user_id to record."""
        record.user_id = self.user_id or "system"
        return True


class AdvisorLogger:
    """Centralized logging manager."""

    def __init__(self, log_level: str = "INFO", log_dir: Optional[Path] = None):
        self.log_dir = log_dir or self._default_log_dir()
        self.log_file = self.log_dir / "advisor.log"
        self.user_filter = UserContextFilter()

        self.logger = logging.getLogger("finadvisor")
        self.logger.setLevel(getattr(logging, log_level.upper()))

        # Remove existing handlers
        self.logger.handlers.clear()

        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] [user:%(user_id)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(self.user_filter)
        self.logger.addHandler(console_handler)

        # File handler with rotation (30 files, 10MB per file)
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                self.log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=30,
                encoding="utf-8"
            )
        except OSError as e:
            self.logger.warning(f"File logging disabled, cannot write to {self.log_dir}: {e}")
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            file_handler.addFilter(self.user_filter)
            self.logger.addHandler(file_handler)

    @staticmethod
    def _default_log_dir() -> Path:
        env_dir = os.getenv("FINADVISOR_LOG_DIR")
        if env_dir:
            return Path(env_dir)
        return Path.home() / ".finadvisor" / "logs"

    def set_user_context(self, user_id: Optional[str]):
        """Set current user context for logging."""
        self.user_filter.user_id = user_id

    def get_logger(self) -> logging.Logger:
        """Get the configured logger."""
        return self.logger


# Global logger instance
_logger_instance: Optional[AdvisorLogger] = None


def get_logger(log_level: str = "INFO") -> logging.Logger:
    """Get or create global logger instance."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = AdvisorLogger(log_level)
    return _logger_instance.get_logger()


def set_user_context(user_id: Optional[str]):
    """Set user context for logging."""
    global _logger_instance
    if _logger_instance:
        _logger_instance.set_user_context(user_id)
