"""Conditional edge logic for the ingestion and query graphs."""

from attendbot.agent.state import IngestionState, QueryState
from attendbot.utils.logging import get_logger

logger = get_logger(__name__)


def after_classification(state: IngestionState) -> str:
    """Continue to extraction unless classification failed or was skipped."""
    if state.get("error"):
        logger.debug("ingestion_stopped", stage="classifier", error=state["error"])
        return "end"
    if state.get("skipped"):
        return "end"
    return "extractor"


def after_extraction(state: IngestionState) -> str:
    """Store the record only when details were extracted."""
    if state.get("error") or state.get("details") is None:
        logger.debug("ingestion_stopped", stage="extractor", error=state.get("error"))
        return "end"
    return "recorder"


def after_planning(state: QueryState) -> str:
    """Run the plan, or go straight to the responder to report the error."""
    if state.get("error") or state.get("plan") is None:
        return "responder"
    return "executor"
