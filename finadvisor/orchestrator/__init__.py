"""Request orchestration module."""
from .pipeline import AdvisorPipeline

__all__ = ["AdvisorPipeline"]
