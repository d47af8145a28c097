"""PromptPlanner - project analysis and development prompts with AI."""

from promptplanner.logging_config import setup_logging

# Set up logging configuration
setup_logging()

# Version of the promptplanner package
__version__ = "0.1.0"

# Import main components
from promptplanner.llm_provider import get_llm_provider, list_providers, PlannerError
from promptplanner.models import ProviderSettings, ProjectAnalysis, Plan, PlanStep
from promptplanner.utils import extract_json_object
from promptplanner.workflow import PlanningWorkflow, create_plan

__all__ = [
    'get_llm_provider',
    'list_providers',
    'PlannerError',
    'ProviderSettings',
    'ProjectAnalysis',
    'Plan',
    'PlanStep',
    'extract_json_object',
    'PlanningWorkflow',
    'create_plan',
]
