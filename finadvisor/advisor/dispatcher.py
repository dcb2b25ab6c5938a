"""Advice dispatch: strategy selection, collaborator call and fallback boundary."""
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import asdict
from typing import Any, Dict, Iterable, List, Optional

from .collaborator import ChatCollaborator
from .fallback import generate_fallback
from .models import (
    AdviceResponse,
    ConversationTurn,
    STRATEGY_FINANCE,
    STRATEGY_GENERAL,
    STRATEGY_REALTIME,
    turns_from_records,
)
from .prompts import build_prompt, system_role
from finadvisor.analysis.models import AnalysisSnapshot, format_money
from finadvisor.config.settings import AdvisorSettings, get_settings
from finadvisor.rules.models import RuleOutput
from finadvisor.semantics import ClassificationBundle, assess_complexity, needs_realtime_data
from finadvisor.utils.exceptions import CollaboratorTimeoutError
from finadvisor.utils.logger import get_logger
from finadvisor.utils.retry import retry_with_backoff

logger = get_logger()

COLLABORATOR_CONFIDENCE = 0.95
LAST_RESORT_MODEL = "basic-fallback"
LAST_RESORT_CONFIDENCE = 0.5


class AdviceDispatcher:
    """Answers a classified question, falling back to local templates on any failure."""

    def __init__(
        self,
        collaborator: Optional[ChatCollaborator] = None,
        realtime_collaborator: Optional[ChatCollaborator] = None,
        settings: Optional[AdvisorSettings] = None
    ):
        """
        Initialize dispatcher.

        Args:
            collaborator: Generation collaborator; None answers from local templates only
            realtime_collaborator: Collaborator with live web access, used for
                questions about current prices or news
            settings: Advisor settings, defaults to the global instance
        """
        self.collaborator = collaborator
        self.realtime_collaborator = realtime_collaborator
        self.settings = settings or get_settings()
        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="collaborator")

        self._generate = retry_with_backoff(
            max_attempts=self.settings.llm_max_attempts,
            backoff_factor=self.settings.llm_backoff_factor
        )(self._generate_once)

    def respond(
        self,
        question: str,
        snapshot: AnalysisSnapshot,
        rule_output: RuleOutput,
        classification: ClassificationBundle,
        history: Optional[Iterable[Any]] = None,
        conversation_id: Optional[str] = None
    ) -> AdviceResponse:
        """
        Produce an answer for one question.

        Args:
            question: The user's question
            snapshot: Analysis snapshot for the user
            rule_output: Rule engine output for the snapshot
            classification: Classification of the question
            history: Prior conversation turns, oldest first
            conversation_id: Passed through to the response

        Returns:
            AdviceResponse; fallback is True whenever the text came from local templates

        Raises:
            ValidationError: If a history turn is malformed
        """
        turns = turns_from_records(history)
        needs_realtime = needs_realtime_data(question)
        strategy = self.select_strategy(classification, needs_realtime)

        metadata: Dict[str, Any] = {
            "strategy": strategy,
            "needs_realtime": needs_realtime,
            "is_personal_finance": classification.is_personal_finance,
            "question_type": classification.question_type,
            "complexity": asdict(assess_complexity(question)),
        }

        collaborator = self.collaborator
        if strategy == STRATEGY_REALTIME and self.realtime_collaborator is not None:
            collaborator = self.realtime_collaborator

        if collaborator is None:
            logger.info("No generation collaborator configured, answering from local data")
            return self._fallback(classification, snapshot, rule_output, metadata, conversation_id)

        prompt = build_prompt(
            strategy,
            question,
            snapshot,
            rule_output,
            top_categories=self.settings.top_categories
        )
        role = system_role(strategy)
        trailing = self._history_slice(turns, strategy)

        logger.info(
            f"Dispatching {classification.question_type} question via {strategy} strategy "
            f"to {collaborator.model_name} with {len(trailing)} history turns"
        )

        try:
            text = self._generate(collaborator, prompt, role, trailing)
        except Exception as e:
            logger.warning(f"Generation collaborator failed ({type(e).__name__}): {e}")
            metadata["error"] = type(e).__name__
            return self._fallback(classification, snapshot, rule_output, metadata, conversation_id)

        return AdviceResponse(
            response=text,
            model=collaborator.model_name,
            confidence=COLLABORATOR_CONFIDENCE,
            fallback=False,
            conversation_id=conversation_id,
            metadata=metadata
        )

    @staticmethod
    def select_strategy(classification: ClassificationBundle, needs_realtime: bool) -> str:
        """Realtime questions go to web search; only personal-finance questions get the user's data."""
        if needs_realtime:
            return STRATEGY_REALTIME
        if classification.is_personal_finance:
            return STRATEGY_FINANCE
        return STRATEGY_GENERAL

    def _history_slice(self, turns: List[ConversationTurn], strategy: str) -> List[ConversationTurn]:
        limit = self.settings.realtime_history_turns if strategy == STRATEGY_REALTIME else self.settings.history_turns
        if limit <= 0:
            return []
        return turns[-limit:]

    def _generate_once(
        self,
        collaborator: ChatCollaborator,
        prompt: str,
        role: str,
        history: List[ConversationTurn]
    ) -> str:
        future = self._executor.submit(collaborator.generate, prompt, role, history)
        try:
            return future.result(timeout=self.settings.llm_timeout_seconds)
        except FuturesTimeoutError:
            future.cancel()
            raise CollaboratorTimeoutError(
                f"{collaborator.model_name} did not answer within {self.settings.llm_timeout_seconds}s"
            )

    def _fallback(
        self,
        classification: ClassificationBundle,
        snapshot: AnalysisSnapshot,
        rule_output: RuleOutput,
        metadata: Dict[str, Any],
        conversation_id: Optional[str]
    ) -> AdviceResponse:
        try:
            text, model, confidence = generate_fallback(classification, snapshot, rule_output)
        except Exception as e:
            logger.error(f"Fallback generation failed: {e}", exc_info=True)
            text = last_resort_message(snapshot, rule_output)
            model = LAST_RESORT_MODEL
            confidence = LAST_RESORT_CONFIDENCE

        return AdviceResponse(
            response=text,
            model=model,
            confidence=confidence,
            fallback=True,
            conversation_id=conversation_id,
            metadata=metadata
        )

    def close(self):
        """Release the collaborator worker threads."""
        self._executor.shutdown(wait=False)


def last_resort_message(snapshot: AnalysisSnapshot, rule_output: RuleOutput) -> str:
    """Generic answer built from the health score and total spend."""
    return (
        "I can still help based on your data. "
        f"Your financial health score is {rule_output.health_score}/100 and you have spent "
        f"{format_money(snapshot.total_spent, snapshot.profile.currency)} in total. "
        "Try asking about your savings, spending or investments."
    )
