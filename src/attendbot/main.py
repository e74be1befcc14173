"""Application entry point for the attendance bot."""

import asyncio
import json
import sys

from attendbot.agent.graph import build_ingestion_graph, build_query_graph, run_query
from attendbot.attendance.classifier import MessageClassifier
from attendbot.attendance.extractor import DetailsExtractor
from attendbot.attendance.repository import (
    check_connection,
    create_tables,
    get_async_engine,
    get_async_session_factory,
)
from attendbot.attendance.service import AttendanceService
from attendbot.attendance.timeframes import local_today
from attendbot.config import get_settings
from attendbot.llm.provider import get_completion_backend
from attendbot.slack.app import create_slack_app, start_socket_mode
from attendbot.utils.cache import get_cache
from attendbot.utils.errors import ConfigurationError
from attendbot.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

USAGE = """Usage:
  attendbot                 Start the Slack bot (Socket Mode)
  attendbot parse <text>    Classify and extract a message without storing it
  attendbot query <text>    Answer a query against the attendance table"""


async def initialize_storage():
    """Create the engine and service, and probe the database.

    Returns:
        Tuple of (engine, service).
    """
    settings = get_settings()

    engine = get_async_engine()
    if settings.auto_create_tables:
        await create_tables(engine)

    session_factory = get_async_session_factory(engine)
    if not await check_connection(session_factory):
        logger.warning("database_connection_issue")

    return engine, AttendanceService(session_factory)


async def run_bot():
    """Run the Slack bot until interrupted."""
    settings = get_settings()
    logger.info("starting_bot", env=settings.app_env, provider=settings.llm_provider)

    backend = get_completion_backend(settings)
    engine, service = await initialize_storage()

    cache = get_cache()
    await cache.connect()

    ingestion_graph = build_ingestion_graph(backend, service, settings.ignore_unclassified)
    query_graph = build_query_graph(backend, service)
    app = create_slack_app(settings, ingestion_graph, query_graph, cache)

    try:
        await start_socket_mode(app, settings.slack_app_token)
    finally:
        await cache.disconnect()
        await engine.dispose()


async def run_parse(text: str) -> dict:
    """Classify and extract a message, returning a JSON-ready dict."""
    settings = get_settings()
    backend = get_completion_backend(settings)
    today = local_today(settings.timezone)

    classification = await MessageClassifier(backend).classify(text, today)
    details = await DetailsExtractor(backend).extract(text, today)

    return {
        "classification": classification.model_dump(),
        "category": classification.mapped_category.value,
        "details": details.model_dump(mode="json", by_alias=True),
    }


async def run_single_query(text: str) -> str:
    """Run one query through the query graph and return the reply."""
    backend = get_completion_backend()
    engine, service = await initialize_storage()

    try:
        final_state = await run_query(build_query_graph(backend, service), text)
        return final_state.get("response") or "(No response generated)"
    finally:
        await engine.dispose()


def main():
    """Main entry point."""
    settings = get_settings()
    setup_logging(log_level=settings.log_level, json_format=settings.log_json)

    args = sys.argv[1:]
    try:
        if not args:
            asyncio.run(run_bot())
        elif args[0] == "parse" and len(args) > 1:
            result = asyncio.run(run_parse(" ".join(args[1:])))
            print(json.dumps(result, indent=2))
        elif args[0] == "query" and len(args) > 1:
            print(asyncio.run(run_single_query(" ".join(args[1:]))))
        else:
            print(USAGE)
            sys.exit(2)
    except ConfigurationError as e:
        logger.error("configuration_error", error=e.message)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("shutting_down")


if __name__ == "__main__":
    main()
