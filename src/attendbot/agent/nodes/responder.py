"""Responder node: renders the Slack reply."""

from attendbot.agent.state import QueryState
from attendbot.attendance.formatting import format_error, format_query_response
from attendbot.utils.logging import get_logger

logger = get_logger(__name__)


async def responder_node(state: QueryState) -> dict:
    """Format the query results, or the error that stopped the pipeline."""
    error = state.get("error")
    if error:
        logger.info("responding_with_error", error=error)
        return {"response": format_error(error)}

    records = state.get("records", [])
    response = format_query_response(state["plan"], records)

    logger.info("query_answered", results=len(records), response_length=len(response))
    return {"response": response}
