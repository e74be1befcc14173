"""Pipeline processing nodes."""

from attendbot.agent.nodes.classifier import create_classifier_node
from attendbot.agent.nodes.extractor import create_extractor_node
from attendbot.agent.nodes.recorder import create_recorder_node
from attendbot.agent.nodes.planner import create_planner_node
from attendbot.agent.nodes.executor import create_executor_node
from attendbot.agent.nodes.responder import responder_node

__all__ = [
    "create_classifier_node",
    "create_extractor_node",
    "create_recorder_node",
    "create_planner_node",
    "create_executor_node",
    "responder_node",
]
