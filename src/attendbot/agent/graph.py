"""LangGraph pipelines for attendance ingestion and queries."""

from datetime import date

from langgraph.graph import END, START, StateGraph

from attendbot.agent.edges import after_classification, after_extraction, after_planning
from attendbot.agent.nodes import (
    create_classifier_node,
    create_executor_node,
    create_extractor_node,
    create_planner_node,
    create_recorder_node,
    responder_node,
)
from attendbot.agent.state import (
    IngestionState,
    QueryState,
    create_ingestion_state,
    create_query_state,
)
from attendbot.attendance.classifier import MessageClassifier
from attendbot.attendance.extractor import DetailsExtractor
from attendbot.attendance.planner import QueryPlanner
from attendbot.attendance.schemas import IncomingMessage
from attendbot.attendance.service import AttendanceService
from attendbot.attendance.timeframes import local_today
from attendbot.config import get_settings
from attendbot.llm.provider import CompletionBackend
from attendbot.utils.logging import get_logger

logger = get_logger(__name__)


def build_ingestion_graph(
    backend: CompletionBackend,
    service: AttendanceService,
    ignore_unclassified: bool = False,
):
    """Build the graph that stores one attendance message.

    Graph structure:
        START → classifier → extractor → recorder → END
                    ↓            ↓
                   END          END     (skipped or failed)
    """
    builder = StateGraph(IngestionState)

    builder.add_node(
        "classifier",
        create_classifier_node(MessageClassifier(backend), ignore_unclassified),
    )
    builder.add_node("extractor", create_extractor_node(DetailsExtractor(backend)))
    builder.add_node("recorder", create_recorder_node(service))

    builder.add_edge(START, "classifier")
    builder.add_conditional_edges(
        "classifier",
        after_classification,
        {"extractor": "extractor", "end": END},
    )
    builder.add_conditional_edges(
        "extractor",
        after_extraction,
        {"recorder": "recorder", "end": END},
    )
    builder.add_edge("recorder", END)

    graph = builder.compile()
    logger.info("ingestion_graph_built", provider=backend.name)
    return graph


def build_query_graph(backend: CompletionBackend, service: AttendanceService):
    """Build the graph that answers one natural-language query.

    Graph structure:
        START → planner → executor → responder → END
                   ↓                     ↑
                   └─────── error ───────┘
    """
    builder = StateGraph(QueryState)

    builder.add_node("planner", create_planner_node(QueryPlanner(backend)))
    builder.add_node("executor", create_executor_node(service))
    builder.add_node("responder", responder_node)

    builder.add_edge(START, "planner")
    builder.add_conditional_edges(
        "planner",
        after_planning,
        {"executor": "executor", "responder": "responder"},
    )
    builder.add_edge("executor", "responder")
    builder.add_edge("responder", END)

    graph = builder.compile()
    logger.info("query_graph_built", provider=backend.name)
    return graph


def _today(today: date | None) -> date:
    return today or local_today(get_settings().timezone)


async def run_ingestion(
    graph,
    message: IncomingMessage,
    today: date | None = None,
) -> IngestionState:
    """Run the ingestion graph for one message.

    Returns:
        Final state; ``result`` holds the upsert outcome when the message was stored.
    """
    logger.info(
        "ingesting_message",
        user_id=message.user_id,
        is_edit=message.is_edit,
        text_preview=message.text[:100],
    )

    final_state = await graph.ainvoke(create_ingestion_state(message, _today(today)))

    logger.info(
        "ingestion_completed",
        user_id=message.user_id,
        stored=final_state.get("result") is not None,
        skipped=final_state.get("skipped", False),
        has_error=bool(final_state.get("error")),
    )
    return final_state


async def run_query(graph, query: str, today: date | None = None) -> QueryState:
    """Run the query graph.

    Returns:
        Final state; ``response`` holds the Slack reply text.
    """
    final_state = await graph.ainvoke(create_query_state(query, _today(today)))

    logger.info(
        "query_completed",
        results=len(final_state.get("records", [])),
        has_error=bool(final_state.get("error")),
    )
    return final_state
