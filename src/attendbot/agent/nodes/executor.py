"""Executor node: runs the plan against the attendance table."""

from attendbot.agent.state import QueryState
from attendbot.attendance.service import AttendanceService
from attendbot.utils.errors import AttendBotError
from attendbot.utils.logging import get_logger

logger = get_logger(__name__)


def create_executor_node(service: AttendanceService):
    """Create the executor node."""

    async def executor_node(state: QueryState) -> dict:
        try:
            records = await service.search(state["plan"], state["today"])
        except AttendBotError as e:
            logger.error("executor_failed", error=e.message)
            return {"error": e.message}

        return {"records": records}

    return executor_node
