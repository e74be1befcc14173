"""Extractor node: pulls dates, duration and flags out of the message."""

from attendbot.agent.state import IngestionState
from attendbot.attendance.extractor import DetailsExtractor
from attendbot.utils.logging import get_logger

logger = get_logger(__name__)


def create_extractor_node(extractor: DetailsExtractor):
    """Create the extractor node."""

    async def extractor_node(state: IngestionState) -> dict:
        message = state["message"]

        try:
            details = await extractor.extract(message.text, state["today"])
        except ValueError as e:
            logger.warning("extractor_rejected_message", user_id=message.user_id, error=str(e))
            return {"error": str(e)}

        return {"details": details}

    return extractor_node
