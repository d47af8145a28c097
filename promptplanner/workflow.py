"""Workflow that turns a project description into a development plan."""

import asyncio
import logging
from typing import Dict, Any, Optional

import aiohttp

from promptplanner import config as app_config
from promptplanner.llm_provider import get_llm_provider, CATALOGUE, PlannerError, LLMProviderError
from promptplanner.models import ProviderSettings, ProjectAnalysis, Plan
from promptplanner.prompt import build_analysis_prompt, generate_steps
from promptplanner.utils import extract_json_object, AnalysisParseError

logger = logging.getLogger(__name__)


class RelayConnectionError(PlannerError):
    """The relay could not be reached at all."""
    pass


def relay_diagnostic(relay_url: str, error: Exception) -> str:
    return (
        "Could not reach the relay server. Please check:\n"
        "1. The relay is running (promptplanner serve)\n"
        f"2. The relay is listening at {relay_url}\n"
        "3. The network connection is working\n"
        f"\nOriginal error: {error}"
    )


class WorkflowContext:
    """Context for workflow execution."""

    def __init__(self):
        self.results = {}
        self.errors = {}

    def add_result(self, key: str, value: Any):
        """Add a result to the context."""
        self.results[key] = value

    def get_result(self, key: str, default: Any = None) -> Any:
        """Get a result from the context."""
        return self.results.get(key, default)

    def add_error(self, key: str, error: Exception):
        """Add an error to the context."""
        self.errors[key] = error


class WorkflowStep:
    """Base class for workflow steps.

    Steps raise PlannerError for anything the user should see; the workflow
    records it under the step's name and stops.
    """

    def __init__(self, name: str):
        self.name = name

    async def execute(self, context: WorkflowContext) -> None:
        raise NotImplementedError("Subclass must implement execute")


class ValidationStep(WorkflowStep):
    """Check the description and provider settings before anything is sent."""

    def __init__(self):
        super().__init__("validation")

    async def execute(self, context: WorkflowContext) -> None:
        description = (context.get_result("description") or "").strip()
        settings: ProviderSettings = context.get_result("settings")

        if not description:
            raise PlannerError("Please enter a project description")
        if not settings.api_key:
            raise PlannerError("Please configure an API key first")

        provider_cls = CATALOGUE.get(settings.provider)
        default_model = provider_cls.default_model if provider_cls else ""
        model = settings.model or default_model
        if not model:
            raise PlannerError("Please select a model")
        if (provider_cls is None or settings.provider == "custom") and not settings.endpoint:
            raise PlannerError("Please enter the API endpoint")

        context.add_result("description", description)
        context.add_result("model", model)


class PromptGenerationStep(WorkflowStep):
    def __init__(self):
        super().__init__("prompt_generation")

    async def execute(self, context: WorkflowContext) -> None:
        context.add_result("prompt", build_analysis_prompt(context.get_result("description")))


class RelayCallStep(WorkflowStep):
    """Post the analysis prompt to the relay and keep the vendor's JSON reply."""

    def __init__(self, relay_url: Optional[str] = None, session: Optional[aiohttp.ClientSession] = None):
        super().__init__("relay_call")
        self.relay_url = (relay_url or app_config.RELAY_URL).rstrip("/")
        self.session = session

    def build_request(self, context: WorkflowContext) -> Dict[str, Any]:
        settings: ProviderSettings = context.get_result("settings")
        body = {
            "apiKey": settings.api_key,
            "model": context.get_result("model"),
            "messages": [{"role": "user", "content": context.get_result("prompt")}],
        }
        # Built-in providers are dispatched by name on the relay side.
        if settings.provider not in CATALOGUE or settings.provider == "custom":
            body["customEndpoint"] = settings.endpoint
        return body

    async def execute(self, context: WorkflowContext) -> None:
        settings: ProviderSettings = context.get_result("settings")
        url = f"{self.relay_url}/api/ai/{settings.provider}"
        body = self.build_request(context)
        logger.info(f"Calling relay: {url} ({context.get_result('model')})")

        if self.session is not None:
            data = await self._post(self.session, url, body)
        else:
            async with aiohttp.ClientSession() as session:
                data = await self._post(session, url, body)
        context.add_result("response_data", data)

    async def _post(self, session: aiohttp.ClientSession, url: str, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            async with session.post(
                url,
                json=body,
                headers={"Accept": "application/json"},
                timeout=aiohttp.ClientTimeout(total=app_config.TIMEOUT),
            ) as resp:
                if resp.status >= 400:
                    try:
                        error_data = await resp.json(content_type=None)
                        message = error_data.get("error") or resp.reason
                    except (ValueError, AttributeError, aiohttp.ContentTypeError):
                        message = resp.reason
                    raise PlannerError(f"API call failed ({resp.status}): {message}")
                return await resp.json(content_type=None)
        except aiohttp.ClientConnectionError as e:
            logger.error(f"Relay connection error: {e}")
            raise RelayConnectionError(relay_diagnostic(self.relay_url, e))
        except asyncio.TimeoutError as e:
            raise PlannerError(f"The relay did not answer within {app_config.TIMEOUT}s") from e
        except ValueError as e:
            raise PlannerError(f"The relay returned invalid JSON: {e}") from e


class ResponseEvaluationStep(WorkflowStep):
    """Pull the reply text out of the vendor response and parse the JSON analysis."""

    def __init__(self):
        super().__init__("response_evaluation")

    async def execute(self, context: WorkflowContext) -> None:
        settings: ProviderSettings = context.get_result("settings")
        provider = get_llm_provider(settings.provider, settings.endpoint or None)

        try:
            text = provider.extract_response(context.get_result("response_data"))
        except LLMProviderError as e:
            logger.warning(f"Unusable AI response: {e}")
            raise PlannerError("Unexpected response format from the AI service") from e
        context.add_result("llm_response", text)
        logger.debug(f"Raw analysis text: {text}")

        try:
            analysis = extract_json_object(text)
        except AnalysisParseError as e:
            raise PlannerError("Could not parse the AI analysis, please check the API configuration") from e
        context.add_result("analysis", analysis)


class PlanStepGeneration(WorkflowStep):
    def __init__(self):
        super().__init__("plan")

    async def execute(self, context: WorkflowContext) -> None:
        settings: ProviderSettings = context.get_result("settings")
        analysis = ProjectAnalysis.from_dict(context.get_result("analysis"))
        steps = generate_steps(analysis)
        context.add_result("plan", Plan(
            analysis=analysis,
            steps=steps,
            type=analysis.project_type,
            provider=settings.provider,
            model=context.get_result("model"),
        ))
        logger.info(f"Plan ready: '{analysis.project_name}' ({analysis.project_type or 'unspecified type'}, {len(steps)} steps)")


class PlanningWorkflow:
    """Main workflow for planning a project."""

    def __init__(self, relay_url: Optional[str] = None, session: Optional[aiohttp.ClientSession] = None):
        self.steps = [
            ValidationStep(),
            PromptGenerationStep(),
            RelayCallStep(relay_url=relay_url, session=session),
            ResponseEvaluationStep(),
            PlanStepGeneration(),
        ]

    async def execute(self, description: str, settings: ProviderSettings) -> Dict[str, Any]:
        """Execute the workflow for one project description."""
        context = WorkflowContext()
        context.add_result("description", description)
        context.add_result("settings", settings)

        for step in self.steps:
            logger.debug(f"Executing step: {step.name}")
            try:
                await step.execute(context)
            except PlannerError as e:
                logger.warning(f"Step {step.name} failed: {e}")
                context.add_error(step.name, e)
                break  # Stop workflow on first failure

        return {
            "plan": context.get_result("plan"),
            "analysis": context.get_result("analysis"),
            "llm_response": context.get_result("llm_response"),
            "errors": context.errors,
        }


async def create_plan(
    description: str,
    settings: ProviderSettings,
    relay_url: Optional[str] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> Plan:
    """Run the planning workflow and return the plan, raising the first step error."""
    result = await PlanningWorkflow(relay_url=relay_url, session=session).execute(description, settings)
    if result["errors"]:
        raise next(iter(result["errors"].values()))
    return result["plan"]
