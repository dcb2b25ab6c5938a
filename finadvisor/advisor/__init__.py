"""Advice dispatch module."""
from .models import AdviceResponse, ConversationTurn
from .collaborator import ChatCollaborator, build_collaborators
from .fallback import generate_fallback
from .dispatcher import AdviceDispatcher

__all__ = [
    "AdviceResponse",
    "ConversationTurn",
    "ChatCollaborator",
    "build_collaborators",
    "generate_fallback",
    "AdviceDispatcher",
]
