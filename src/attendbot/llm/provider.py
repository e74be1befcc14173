"""LLM provider configuration.

Every provider is wrapped in a ``CompletionBackend`` that takes a rendered
prompt plus the raw user message and returns the model's text.
"""

import json
from typing import Any, Literal

import httpx
from langchain_core.language_models import BaseLanguageModel
from langchain_huggingface import HuggingFaceEndpoint
from langchain_openai import ChatOpenAI
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from attendbot.config import Settings, get_settings
from attendbot.utils.errors import ConfigurationError, WorkflowRequestError
from attendbot.utils.logging import get_logger

logger = get_logger(__name__)

Task = Literal["classification", "details", "query"]


class CompletionBackend:
    """Turns a prompt into model text."""

    name = "base"

    async def complete(self, prompt: str, message: str, task: Task) -> str:
        """Run the prompt and return the raw model output.

        Args:
            prompt: Fully rendered prompt.
            message: The user message the prompt was rendered for.
            task: Which pipeline step is asking.
        """
        raise NotImplementedError


class ChatModelBackend(CompletionBackend):
    """Backend for LangChain chat and text-generation models."""

    def __init__(self, llm: BaseLanguageModel, name: str = "chat"):
        self.llm = llm
        self.name = name

    async def complete(self, prompt: str, message: str, task: Task) -> str:
        logger.debug("invoking_llm", provider=self.name, task=task)
        response = await self.llm.ainvoke(prompt)
        # Chat models return a message, text-generation endpoints a plain string
        content = getattr(response, "content", response)
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part) for part in content
            )
        return str(content)


class WorkflowBackend(CompletionBackend):
    """Backend that POSTs ``{prompt, message}`` to a workflow webhook.

    The webhook answers with ``{"response_body": {"choices": [{"text": ...}]}}``.
    """

    name = "workflow"

    def __init__(
        self,
        urls: dict[str, str],
        default_url: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.urls = urls
        self.default_url = default_url
        self.timeout = timeout
        self._transport = transport

    def url_for(self, task: Task) -> str:
        url = self.urls.get(task) or self.default_url
        if not url:
            raise ConfigurationError(f"No workflow URL configured for {task}")
        return url

    @retry(
        retry=retry_if_exception_type(WorkflowRequestError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def complete(self, prompt: str, message: str, task: Task) -> str:
        url = self.url_for(task)
        logger.info("calling_workflow", task=task)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json={"prompt": prompt, "message": message})
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "workflow_request_failed", task=task, status_code=e.response.status_code
            )
            raise WorkflowRequestError(
                f"HTTP {e.response.status_code} from workflow",
                details={"task": task, "status": e.response.status_code},
            ) from e
        except httpx.RequestError as e:
            logger.error("workflow_request_error", task=task, error=str(e))
            raise WorkflowRequestError(
                f"Workflow request failed: {e}", details={"task": task}
            ) from e

        try:
            body = response.json()
        except ValueError:
            return response.text

        return extract_workflow_text(body)


def extract_workflow_text(body: Any) -> str:
    """Pull the model text out of a workflow response body."""
    if isinstance(body, str):
        return body

    if isinstance(body, dict):
        choices = (body.get("response_body") or {}).get("choices") or []
        if choices and isinstance(choices[0], dict) and "text" in choices[0]:
            return str(choices[0]["text"])

    return json.dumps(body)


def get_completion_backend(settings: Settings | None = None) -> CompletionBackend:
    """Build the completion backend selected by ``llm_provider``.

    Raises:
        ConfigurationError: If the selected provider is missing credentials or URLs.
    """
    settings = settings or get_settings()
    provider = settings.llm_provider

    logger.debug("initializing_llm", provider=provider)

    if provider == "openai":
        if not settings.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is required for the openai provider")
        llm = ChatOpenAI(
            model=settings.llm_model,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            api_key=settings.openai_api_key,
        )
        return ChatModelBackend(llm, name="openai")

    if provider == "huggingface":
        if not settings.huggingface_api_key:
            raise ConfigurationError(
                "HUGGINGFACE_API_KEY is required for the huggingface provider"
            )
        llm = HuggingFaceEndpoint(
            repo_id=settings.huggingface_model,
            temperature=max(settings.llm_temperature, 0.01),
            max_new_tokens=settings.llm_max_tokens,
            huggingfacehub_api_token=settings.huggingface_api_key,
        )
        return ChatModelBackend(llm, name="huggingface")

    urls = {
        "classification": settings.workflow_classification_url,
        "details": settings.workflow_details_url,
        "query": settings.workflow_query_url,
    }
    urls = {task: url for task, url in urls.items() if url}
    if not settings.workflow_url and len(urls) < 3:
        raise ConfigurationError(
            "WORKFLOW_URL (or one URL per task) is required for the workflow provider"
        )
    return WorkflowBackend(urls, default_url=settings.workflow_url, timeout=settings.workflow_timeout)
