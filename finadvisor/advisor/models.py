"""Data models for advice dispatch."""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from finadvisor.utils.exceptions import ValidationError

STRATEGY_REALTIME = "realtime"
STRATEGY_FINANCE = "finance"
STRATEGY_GENERAL = "general"


class ConversationTurn(BaseModel):
    """One prior message of the conversation."""
    role: Literal["user", "assistant", "system"]
    content: str = Field(min_length=1)


@dataclass(frozen=True)
class AdviceResponse:
    """Answer returned to the request layer."""
    response: str
    model: str
    confidence: float
    fallback: bool
    conversation_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


def turns_from_records(records: Optional[Iterable[Any]]) -> List[ConversationTurn]:
    """
    Validate conversation history handed over by the request layer.

    Args:
        records: ConversationTurn objects or dicts with role and content

    Returns:
        List of ConversationTurn, oldest first

    Raises:
        ValidationError: If a turn is malformed
    """
    turns = []
    for index, record in enumerate(records or []):
        if isinstance(record, ConversationTurn):
            turns.append(record)
            continue
        try:
            turns.append(ConversationTurn(**record))
        except (PydanticValidationError, TypeError) as e:
            raise ValidationError(f"Invalid conversation turn at index {index}: {e}")
    return turns
