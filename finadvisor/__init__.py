"""FinAdvisor: financial insight pipeline answering questions from a user's own transactions."""

__version__ = "0.1.0"
