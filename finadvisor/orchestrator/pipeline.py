"""Per-request advisor pipeline."""
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime
from typing import Any, Hashable, Iterable, List, Optional, Sequence, Union

from finadvisor.advisor import AdviceDispatcher, AdviceResponse, build_collaborators
from finadvisor.analysis import (
    AnalysisSnapshot,
    Budget,
    SnapshotCache,
    Transaction,
    UserProfile,
    analyze,
    budgets_from_records,
    compute_budget_statuses,
    local_naive,
    profile_from_record,
    transactions_from_records,
)
from finadvisor.config.settings import AdvisorSettings, get_settings
from finadvisor.rules import apply_rules
from finadvisor.semantics import ClassificationBundle, classify
from finadvisor.utils.logger import get_logger, set_user_context

logger = get_logger()


class AdvisorPipeline:
    """Runs classify, analyze, rules and dispatch for one question."""

    def __init__(
        self,
        dispatcher: AdviceDispatcher,
        settings: Optional[AdvisorSettings] = None,
        cache: Optional[SnapshotCache] = None
    ):
        """
        Initialize pipeline.

        Args:
            dispatcher: Advice dispatcher owning the collaborator boundary
            settings: Advisor settings, defaults to the global instance
            cache: Optional snapshot cache shared across requests
        """
        self.dispatcher = dispatcher
        self.settings = settings or get_settings()
        self.cache = cache

    @classmethod
    def from_settings(cls, settings: Optional[AdvisorSettings] = None, cache: Optional[SnapshotCache] = None) -> "AdvisorPipeline":
        """Build a pipeline with collaborators configured from settings."""
        settings = settings or get_settings()
        is_valid, message = settings.validate()
        if not is_valid:
            logger.warning(f"Configuration problem: {message}")

        collaborator, realtime = build_collaborators(settings)
        dispatcher = AdviceDispatcher(collaborator, realtime, settings)
        return cls(dispatcher, settings, cache)

    def answer(
        self,
        question: str,
        transactions: Iterable[Union[Transaction, dict]],
        profile: Optional[Union[UserProfile, dict]] = None,
        budgets: Optional[Iterable[Union[Budget, dict]]] = None,
        history: Optional[Iterable[Any]] = None,
        conversation_id: Optional[str] = None,
        user_id: Optional[str] = None,
        data_version: Optional[Hashable] = None,
        now: Optional[datetime] = None
    ) -> AdviceResponse:
        """
        Answer a question from the user's own transactions.

        Args:
            question: Free-text question
            transactions: Transaction objects or raw records
            profile: UserProfile or raw profile record
            budgets: Budget objects or raw budget records; None means the
                user has not set up any budgets
            history: Prior conversation turns, oldest first
            conversation_id: Passed through to the response
            user_id: Used for log context and, with data_version, the snapshot cache
            data_version: Version of the user's transaction data
            now: Reference time, defaults to the current time

        Returns:
            AdviceResponse

        Raises:
            ValidationError: If a transaction, profile, budget or history record is malformed
        """
        set_user_context(user_id)
        start_time = time.time()
        try:
            now = local_naive(now) if now else datetime.now()
            transactions = self._transactions(transactions)
            profile = self._profile(profile)

            with ThreadPoolExecutor(max_workers=2, thread_name_prefix="pipeline") as executor:
                classification_future = executor.submit(classify, question)
                snapshot_future = executor.submit(
                    self._snapshot, transactions, profile, user_id, data_version, now
                )
                classification: ClassificationBundle = classification_future.result()
                snapshot: AnalysisSnapshot = snapshot_future.result()

            budget_statuses = None
            if budgets is not None:
                budget_statuses = compute_budget_statuses(self._budgets(budgets), transactions, now)

            rule_output = apply_rules(snapshot, profile, budget_statuses)

            response = self.dispatcher.respond(
                question,
                snapshot,
                rule_output,
                classification,
                history=history,
                conversation_id=conversation_id
            )

            duration = time.time() - start_time
            logger.info(
                f"Answered {classification.question_type} question with {response.model} "
                f"(fallback={response.fallback}) in {duration:.2f}s"
            )
            return response
        finally:
            set_user_context(None)

    def _snapshot(
        self,
        transactions: List[Transaction],
        profile: UserProfile,
        user_id: Optional[str],
        data_version: Optional[Hashable],
        now: datetime
    ) -> AnalysisSnapshot:
        if self.cache is None or user_id is None or data_version is None:
            return analyze(transactions, profile, now)
        snapshot = self.cache.get_or_compute(user_id, data_version, lambda: analyze(transactions, profile, now))
        # Profile is not part of the cache key
        if snapshot.profile != profile:
            snapshot = replace(snapshot, profile=profile)
        return snapshot

    @staticmethod
    def _transactions(items: Iterable[Union[Transaction, dict]]) -> List[Transaction]:
        transactions = []
        for item in items:
            if not isinstance(item, Transaction):
                item = transactions_from_records([item])[0]
            elif item.date.tzinfo is not None:
                item = replace(item, date=local_naive(item.date))
            transactions.append(item)
        return transactions

    def _profile(self, profile: Optional[Union[UserProfile, dict]]) -> UserProfile:
        if isinstance(profile, UserProfile):
            return profile
        return profile_from_record(profile, default_currency=self.settings.currency)

    @staticmethod
    def _budgets(items: Sequence[Union[Budget, dict]]) -> List[Budget]:
        return [
            item if isinstance(item, Budget) else budgets_from_records([item])[0]
            for item in items
        ]

    def close(self):
        self.dispatcher.close()
