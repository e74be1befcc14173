"""Classifier node: assigns an attendance category to the message."""

from attendbot.agent.state import IngestionState
from attendbot.attendance.classifier import MessageClassifier
from attendbot.attendance.schemas import Category
from attendbot.utils.logging import get_logger

logger = get_logger(__name__)


def create_classifier_node(classifier: MessageClassifier, ignore_unclassified: bool = False):
    """Create the classifier node.

    Args:
        classifier: Classifier bound to a completion backend.
        ignore_unclassified: Mark messages that map to no category as skipped.
    """

    async def classifier_node(state: IngestionState) -> dict:
        message = state["message"]

        try:
            classification = await classifier.classify(message.text, state["today"])
        except ValueError as e:
            logger.warning("classifier_rejected_message", user_id=message.user_id, error=str(e))
            return {"error": str(e)}

        skipped = ignore_unclassified and classification.mapped_category is Category.UNKNOWN
        if skipped:
            logger.info("message_skipped_unclassified", user_id=message.user_id)

        return {"classification": classification, "skipped": skipped}

    return classifier_node
