"""Recorder node: persists the classified message."""

from attendbot.agent.state import IngestionState
from attendbot.attendance.service import AttendanceService
from attendbot.utils.errors import AttendBotError
from attendbot.utils.logging import get_logger

logger = get_logger(__name__)


def create_recorder_node(service: AttendanceService):
    """Create the recorder node.

    Storage failures end up in ``state["error"]`` so a bad message never
    breaks the Slack event loop.
    """

    async def recorder_node(state: IngestionState) -> dict:
        message = state["message"]

        try:
            result = await service.record_attendance(
                message, state["classification"], state["details"]
            )
        except AttendBotError as e:
            logger.error("recorder_failed", user_id=message.user_id, error=e.message)
            return {"error": e.message}

        return {"result": result}

    return recorder_node
