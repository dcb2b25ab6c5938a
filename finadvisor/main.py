"""Command-line entry point."""
import sys
import json
import argparse
from pathlib import Path

from finadvisor.advisor import AdviceDispatcher
from finadvisor.config.settings import AdvisorSettings
from finadvisor.orchestrator import AdvisorPipeline
from finadvisor.utils.exceptions import AdvisorError
from finadvisor.utils.logger import get_logger

logger = get_logger()


def _load_settings(config_path: str = None) -> AdvisorSettings:
    """Load and validate settings, exiting on invalid configuration."""
    settings = AdvisorSettings.load(Path(config_path) if config_path else None)
    logger.setLevel(settings.log_level.upper())

    is_valid, message = settings.validate()
    if not is_valid:
        logger.critical(f"Invalid configuration: {message}")
        sys.exit(1)
    return settings


def check_config_command(settings: AdvisorSettings) -> None:
    """Print the effective configuration."""
    key_state = "set" if settings.api_key() else "missing"
    print(f"{settings.app_name} {settings.app_version}")
    print(f"Provider: {settings.llm_provider} ({settings.llm_model_name}), API key {key_state}")
    if settings.llm_realtime_model_name:
        print(f"Realtime model: {settings.llm_realtime_model_name}")
    print(f"Timeout: {settings.llm_timeout_seconds}s, attempts: {settings.llm_max_attempts}")
    print(f"Currency: {settings.currency}")


def ask_command(settings: AdvisorSettings, question: str, data_path: str, offline: bool) -> None:
    """Answer one question against a JSON data file."""
    data = {}
    if data_path:
        with open(data_path, "r", encoding="utf-8") as f:
            data = json.load(f)

    if offline:
        pipeline = AdvisorPipeline(AdviceDispatcher(settings=settings), settings)
    else:
        pipeline = AdvisorPipeline.from_settings(settings)

    try:
        response = pipeline.answer(
            question,
            data.get("transactions", []),
            profile=data.get("profile"),
            budgets=data.get("budgets"),
            history=data.get("history")
        )
    finally:
        pipeline.close()

    print(response.response)
    source = "local templates" if response.fallback else "collaborator"
    print(f"\n[{response.model} via {source}, confidence {response.confidence}]")


def main():
    """Main entry point for FinAdvisor."""
    parser = argparse.ArgumentParser(description="FinAdvisor financial insight pipeline")
    parser.add_argument(
        "command",
        choices=["ask", "check-config"],
        help="Command to execute"
    )
    parser.add_argument("question", nargs="?", help="Question to answer (for ask)")
    parser.add_argument(
        "--data",
        help="JSON file with transactions, profile, budgets and history (for ask)"
    )
    parser.add_argument("--config", help="Path to advisor.yaml")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Answer from local data only, without calling the chat model"
    )

    args = parser.parse_args()

    try:
        settings = _load_settings(args.config)

        if args.command == "check-config":
            check_config_command(settings)
            return

        if not args.question:
            parser.error("ask requires a question")
        ask_command(settings, args.question, args.data, args.offline)
    except (AdvisorError, FileNotFoundError, json.JSONDecodeError) as e:
        logger.critical(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
