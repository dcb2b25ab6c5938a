"""Generation collaborator backed by a langchain chat model."""
from typing import List, Optional, Sequence

from langchain.chat_models import init_chat_model
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from .models import ConversationTurn
from finadvisor.config.settings import AdvisorSettings
from finadvisor.utils.exceptions import ConfigError, LLMError, RetryableLLMError
from finadvisor.utils.logger import get_logger

logger = get_logger()

MESSAGE_TYPES = {
    "user": HumanMessage,
    "assistant": AIMessage,
    "system": SystemMessage,
}


class ChatCollaborator:
    """Sends a prompt, a system role and prior turns to a chat model."""

    def __init__(self, model: BaseChatModel, model_name: str):
        """
        Initialize collaborator.

        Args:
            model: Any langchain chat model
            model_name: Identifier reported back in AdviceResponse.model
        """
        self.model = model
        self.model_name = model_name

    @classmethod
    def from_settings(cls, settings: AdvisorSettings, realtime: bool = False) -> "ChatCollaborator":
        """
        Build a collaborator for the configured provider.

        Args:
            settings: Advisor settings
            realtime: Use the realtime model name and temperature

        Raises:
            ConfigError: If the provider API key is not set
        """
        api_key = settings.api_key()
        if not api_key:
            raise ConfigError(f"{settings.llm_api_key_env} environment variable is not set")

        if realtime:
            model_name = settings.llm_realtime_model_name or settings.llm_model_name
            temperature = settings.llm_realtime_temperature
        else:
            model_name = settings.llm_model_name
            temperature = settings.llm_temperature

        model = init_chat_model(
            model=model_name,
            model_provider=settings.llm_provider,
            api_key=api_key,
            temperature=temperature,
            max_tokens=settings.llm_max_tokens,
            timeout=settings.llm_timeout_seconds
        )

        logger.info(f"Chat collaborator initialized with {settings.llm_provider}:{model_name}")
        return cls(model, model_name)

    def generate(self, prompt: str, system_role: str, history: Sequence[ConversationTurn] = ()) -> str:
        """
        Generate a completion.

        Args:
            prompt: User prompt
            system_role: System instructions
            history: Prior conversation turns, oldest first

        Returns:
            Completion text

        Raises:
            RetryableLLMError: If the model call fails
            LLMError: If the model returns an empty completion
        """
        messages = self._build_messages(prompt, system_role, history)

        try:
            response = self.model.invoke(messages)
        except Exception as e:
            logger.error(f"Chat model {self.model_name} call failed: {e}")
            raise RetryableLLMError(f"Chat model call failed: {e}") from e

        text = _content_text(response.content)
        if not text.strip():
            raise LLMError(f"Chat model {self.model_name} returned an empty completion")

        logger.debug(f"Chat model {self.model_name} returned {len(text)} characters")
        return text

    @staticmethod
    def _build_messages(prompt: str, system_role: str, history: Sequence[ConversationTurn]) -> List[BaseMessage]:
        messages: List[BaseMessage] = [SystemMessage(content=system_role)]
        for turn in history:
            messages.append(MESSAGE_TYPES[turn.role](content=turn.content))
        messages.append(HumanMessage(content=prompt))
        return messages


def _content_text(content) -> str:
    """Flatten message content, which may be a list of text blocks."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return ""


def build_collaborators(settings: AdvisorSettings) -> tuple[Optional[ChatCollaborator], Optional[ChatCollaborator]]:
    """
    Build the default and realtime collaborators from settings.

    Returns (None, None) when no API key is configured, leaving the
    advisor on deterministic answers only.
    """
    if not settings.api_key():
        logger.warning(f"{settings.llm_api_key_env} not set, advisor will answer from local data only")
        return None, None

    collaborator = ChatCollaborator.from_settings(settings)
    realtime = None
    if settings.llm_realtime_model_name:
        realtime = ChatCollaborator.from_settings(settings, realtime=True)
    return collaborator, realtime
