"""Slack Bolt app: attendance message ingestion and the query slash command."""

from typing import Any

from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp
from slack_sdk.web.async_client import AsyncWebClient

from attendbot.agent.graph import run_ingestion, run_query
from attendbot.agent.state import IngestionState
from attendbot.attendance.formatting import NO_RESULTS_TEXT, format_error
from attendbot.attendance.schemas import IncomingMessage
from attendbot.config import Settings
from attendbot.slack.users import SlackUserDirectory
from attendbot.utils.cache import RedisCache
from attendbot.utils.logging import get_logger, slack_event_context

logger = get_logger(__name__)


def parse_message_event(event: dict[str, Any]) -> IncomingMessage | None:
    """Turn a Slack ``message`` event into an IncomingMessage.

    Plain user messages and ``message_changed`` edits are accepted. Bot
    messages, other subtypes, empty text and edits that leave the text
    unchanged return None.
    """
    subtype = event.get("subtype")

    if subtype is None:
        text = (event.get("text") or "").strip()
        if event.get("bot_id") or not event.get("user") or not text:
            return None
        return IncomingMessage(
            user_id=event["user"],
            text=text,
            ts=event["ts"],
            channel_id=event.get("channel"),
        )

    if subtype == "message_changed":
        edited = event.get("message") or {}
        previous = event.get("previous_message") or {}
        text = (edited.get("text") or "").strip()

        if event.get("bot_id") or edited.get("bot_id") or not edited.get("user") or not text:
            return None
        if text == (previous.get("text") or "").strip():
            # Link unfurls and reactions also arrive as message_changed
            return None

        return IncomingMessage(
            user_id=edited["user"],
            text=text,
            ts=edited.get("ts") or event["ts"],
            channel_id=event.get("channel"),
            is_edit=True,
            original_ts=previous.get("ts") or edited.get("ts"),
        )

    return None


async def handle_message_event(
    event: dict[str, Any],
    client: AsyncWebClient,
    ingestion_graph,
    cache: RedisCache | None = None,
) -> IngestionState | None:
    """Store an attendance message. Errors are logged, never raised to Bolt."""
    message = parse_message_event(event)
    if message is None:
        logger.debug("message_event_ignored", subtype=event.get("subtype"))
        return None

    with slack_event_context(
        user_id=message.user_id, channel_id=message.channel_id, ts=message.ts
    ):
        try:
            profile = await SlackUserDirectory(client, cache).lookup(message.user_id)
            message = message.model_copy(update=profile.model_dump())
            return await run_ingestion(ingestion_graph, message)
        except Exception as e:
            logger.error("message_processing_failed", error=str(e), exc_info=True)
            return None


async def handle_query_command(command: dict[str, Any], ack, respond, query_graph) -> str:
    """Answer the query slash command.

    ``ack()`` goes out first so Slack does not time out the command while
    the model and database are busy.
    """
    await ack()

    text = (command.get("text") or "").strip()
    with slack_event_context(
        user_id=command.get("user_id"), channel_id=command.get("channel_id")
    ):
        logger.info("query_command_received", query_preview=text[:100])
        try:
            state = await run_query(query_graph, text)
            reply = state.get("response") or NO_RESULTS_TEXT
        except Exception as e:
            logger.error("query_command_failed", error=str(e), exc_info=True)
            reply = format_error(e)

        await respond(reply)
    return reply


def create_slack_app(
    settings: Settings,
    ingestion_graph,
    query_graph,
    cache: RedisCache | None = None,
) -> AsyncApp:
    """Create the Bolt app with the message listener and slash command.

    Args:
        settings: Application settings (tokens, command name).
        ingestion_graph: Compiled ingestion graph.
        query_graph: Compiled query graph.
        cache: Cache for Slack user profiles.
    """
    app = AsyncApp(
        token=settings.slack_bot_token,
        signing_secret=settings.slack_signing_secret,
    )

    @app.event("message")
    async def on_message(event: dict, client: AsyncWebClient) -> None:
        await handle_message_event(event, client, ingestion_graph, cache)

    @app.command(settings.slack_command)
    async def on_query_command(ack, command: dict, respond) -> None:
        await handle_query_command(command, ack, respond, query_graph)

    logger.info("slack_app_created", command=settings.slack_command)
    return app


async def start_socket_mode(app: AsyncApp, app_token: str) -> None:
    """Connect to Slack over Socket Mode and serve events until cancelled."""
    handler = AsyncSocketModeHandler(app, app_token)
    logger.info("starting_socket_mode")
    await handler.start_async()
