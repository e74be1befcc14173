"""Planner node: turns the question into a QueryPlan."""

from attendbot.agent.state import QueryState
from attendbot.attendance.planner import QueryPlanner
from attendbot.utils.logging import get_logger

logger = get_logger(__name__)


def create_planner_node(planner: QueryPlanner):
    """Create the planner node."""

    async def planner_node(state: QueryState) -> dict:
        logger.info("planning_query", query_preview=state["query"][:100])

        try:
            plan = await planner.plan(state["query"], state["today"])
        except ValueError as e:
            return {"error": str(e)}

        return {"plan": plan}

    return planner_node
