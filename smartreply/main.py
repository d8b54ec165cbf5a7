"""Smart-reply entry point and composition root.

Usage examples:
    # Seed a message and regenerate replies for every participant
    python -m smartreply.main add-message conv1 alice "Are we still on for lunch?" --generate

    # Generate (or fetch cached) replies for one user
    python -m smartreply.main generate conv1 bob

    # Show the stored record
    python -m smartreply.main show conv1 bob
"""

import argparse
import asyncio
import logging
import sys
import uuid
from dataclasses import dataclass

from smartreply.analysis import AIContextAnalyzer, HeuristicContextAnalyzer
from smartreply.cache import SmartReplyCache
from smartreply.clock import ms_to_iso, now_ms
from smartreply.config import PipelineConfig, Settings, settings
from smartreply.coordinator import GenerationCoordinator
from smartreply.llm.client import AnthropicCompletionService
from smartreply.llm.models import resolve_model
from smartreply.models import ConversationMessage, GenerationOptions
from smartreply.pipeline import PipelineOrchestrator
from smartreply.stores import ConversationStore, MessageStore, SettingsStore, SqliteRecordStore
from smartreply.triggers import SmartReplyTriggers

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level),
)
logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the command line needs, wired once."""

    coordinator: GenerationCoordinator
    triggers: SmartReplyTriggers
    cache: SmartReplyCache
    messages: MessageStore
    settings_store: SettingsStore
    conversations: ConversationStore


def build_services(s: Settings = settings) -> Services:
    """Construct the stores, pipeline and coordinator from *s*."""
    config = PipelineConfig.from_settings(s)
    completion = AnthropicCompletionService(s.anthropic_api_key, config.generation_timeout_ms)

    ai_analyzer = None
    if s.ai_analysis_available:
        ai_analyzer = AIContextAnalyzer(completion, resolve_model(s.analysis_model))
    else:
        logger.info("AI analysis unavailable, using heuristic analysis only")

    orchestrator = PipelineOrchestrator(
        config,
        completion,
        HeuristicContextAnalyzer(),
        ai_analyzer,
    )
    messages = MessageStore(s.database_path)
    settings_store = SettingsStore(s.database_path)
    conversations = ConversationStore(s.database_path)
    cache = SmartReplyCache(SqliteRecordStore(s.database_path), config.cache_expiration_ms)
    coordinator = GenerationCoordinator(
        settings_store,
        messages,
        cache,
        orchestrator,
        max_retries=s.max_retries,
    )
    return Services(
        coordinator=coordinator,
        triggers=SmartReplyTriggers(coordinator, conversations),
        cache=cache,
        messages=messages,
        settings_store=settings_store,
        conversations=conversations,
    )


# -- Commands ------------------------------------------------------------------


async def _generate(services: Services, args: argparse.Namespace) -> int:
    outcome = await services.coordinator.generate_smart_replies(
        args.conversation_id,
        args.user_id,
        GenerationOptions(force_refresh=args.force, target_language=args.target_language),
    )
    if not outcome.success:
        print(f"ERROR: {outcome.error}", file=sys.stderr)
        return 1
    if outcome.smart_replies is None:
        print("Smart replies are disabled for this conversation.")
        return 0

    source = "cache" if outcome.cache_hit else "generated"
    print(f"Replies ({source}, {outcome.processing_time_ms}ms):")
    for reply in outcome.smart_replies.replies:
        print(f"  - {reply}")
    return 0


async def _show(services: Services, args: argparse.Namespace) -> int:
    record = await services.cache.get(SmartReplyCache.key(args.conversation_id, args.user_id))
    if record is None:
        print("No smart replies stored.")
        return 1

    expired = services.cache.is_expired(record)
    print(f"{record.id} ({record.generated_by}, generated {ms_to_iso(record.generated_at)})")
    print(f"Expired: {'yes' if expired else 'no'}")
    print(f"Tone: {record.context_analysis.tone}  Language: {record.context_analysis.language}")
    for reply in record.replies:
        print(f"  - {reply}")
    return 0


async def _add_message(services: Services, args: argparse.Namespace) -> int:
    message = ConversationMessage(
        id=args.message_id or uuid.uuid4().hex,
        text=args.text,
        sender_id=args.sender_id,
        timestamp_ms=now_ms(),
    )
    await services.messages.add_message(args.conversation_id, message)

    participants = await services.conversations.get_participants(args.conversation_id)
    if args.sender_id not in participants:
        await services.conversations.set_participants(
            args.conversation_id, [*participants, args.sender_id]
        )
    print(f"Stored message {message.id}")

    if args.generate:
        results = await services.triggers.on_message_created(args.conversation_id, message)
        for user_id, outcome in results.items():
            status = "ok" if outcome is not None and outcome.success else "failed"
            print(f"  {user_id}: {status}")
    return 0


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Smart-reply generation")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate or fetch cached replies")
    gen.add_argument("conversation_id")
    gen.add_argument("user_id")
    gen.add_argument("--force", action="store_true", help="Bypass the cache")
    gen.add_argument("--target-language", help="Reply language (default: detected)")

    show = sub.add_parser("show", help="Print the stored replies for a user")
    show.add_argument("conversation_id")
    show.add_argument("user_id")

    add = sub.add_parser("add-message", help="Store a message in the local database")
    add.add_argument("conversation_id")
    add.add_argument("sender_id")
    add.add_argument("text")
    add.add_argument("--message-id", help="Message ID (default: random)")
    add.add_argument(
        "--generate", action="store_true", help="Regenerate replies for all participants"
    )
    return parser


_COMMANDS = {
    "generate": _generate,
    "show": _show,
    "add-message": _add_message,
}


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    services = build_services()
    return asyncio.run(_COMMANDS[args.command](services, args))


if __name__ == "__main__":
    sys.exit(main())
