import asyncio
import json
import pytest
from aiohttp import web
from aiohttp import test_utils

from promptplanner.models import ProviderSettings
from promptplanner.relay import create_app
from promptplanner.workflow import create_plan, PlanningWorkflow, PlannerError, RelayConnectionError

ANALYSIS = {
    "projectType": "tool",
    "projectName": "CSV Cleaner",
    "complexity": "low",
    "estimatedHours": "12",
    "mainFeatures": ["Deduplicate rows", "Fix encodings"],
    "technicalChallenges": ["Large files"],
    "recommendedTech": ["Python", "pandas"],
    "developmentPhases": [{"phase": "MVP", "description": "CLI", "tasks": ["Parse"], "estimatedHours": "6"}],
    "riskFactors": [],
    "recommendations": ["Stream input"],
    "successCriteria": ["Handles 1 GB files"],
}


def claude_reply(text):
    return {"content": [{"type": "text", "text": text}]}


def chat_reply(text):
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def run_with_fake_relay(reply, settings, description="A tool that cleans CSV files", status=200):
    """Run the planning workflow against a stand-in relay returning `reply`."""
    received = []

    async def relay(request):
        received.append({"provider": request.match_info["provider"], "body": await request.json()})
        return web.json_response(reply, status=status)

    async def runner():
        app = web.Application()
        app.router.add_post("/api/ai/{provider}", relay)
        async with test_utils.TestServer(app) as server:
            relay_url = str(server.make_url(""))
            return await PlanningWorkflow(relay_url=relay_url).execute(description, settings)

    return asyncio.run(runner()), received


def test_claude_plan_through_relay():
    settings = ProviderSettings(provider="claude", api_key="sk-ant-key")
    result, received = run_with_fake_relay(claude_reply(json.dumps(ANALYSIS)), settings)

    assert result["errors"] == {}
    plan = result["plan"]
    assert plan.analysis.project_name == "CSV Cleaner"
    assert plan.type == "tool"
    assert plan.model == "claude-3-sonnet-20240229"
    assert [s.id for s in plan.steps] == ["tool_architecture", "tool_functions", "tool_experience", "tool_completion"]

    assert received[0]["provider"] == "claude"
    body = received[0]["body"]
    assert body["apiKey"] == "sk-ant-key"
    assert body["model"] == "claude-3-sonnet-20240229"
    assert "customEndpoint" not in body
    assert body["messages"][0]["role"] == "user"
    assert "A tool that cleans CSV files" in body["messages"][0]["content"]


def test_explicit_model_is_used():
    settings = ProviderSettings(provider="openai", api_key="sk-key", model="gpt-4o")
    result, received = run_with_fake_relay(chat_reply(json.dumps(ANALYSIS)), settings)
    assert received[0]["body"]["model"] == "gpt-4o"
    assert result["plan"].model == "gpt-4o"


def test_relay_error_is_reported_with_status():
    settings = ProviderSettings(provider="openai", api_key="bad-key")
    result, _ = run_with_fake_relay({"error": "Invalid API key"}, settings, status=401)
    assert result["plan"] is None
    assert str(result["errors"]["relay_call"]) == "API call failed (401): Invalid API key"


def test_unparseable_reply():
    settings = ProviderSettings(provider="openai", api_key="sk-key")
    result, _ = run_with_fake_relay(chat_reply("Sorry, I can't produce JSON today."), settings)
    assert "Could not parse the AI analysis" in str(result["errors"]["response_evaluation"])


def test_empty_reply_text():
    settings = ProviderSettings(provider="claude", api_key="sk-key")
    result, _ = run_with_fake_relay({"content": []}, settings)
    assert str(result["errors"]["response_evaluation"]) == "Unexpected response format from the AI service"


@pytest.mark.parametrize("description,settings,message", [
    ("   ", ProviderSettings(provider="claude", api_key="k"), "Please enter a project description"),
    ("An app", ProviderSettings(provider="claude", api_key=""), "Please configure an API key first"),
    ("An app", ProviderSettings(provider="custom", api_key="k", endpoint="http://x"), "Please select a model"),
    ("An app", ProviderSettings(provider="custom", api_key="k", model="m"), "Please enter the API endpoint"),
])
def test_validation_errors(description, settings, message):
    with pytest.raises(PlannerError) as exc:
        asyncio.run(create_plan(description, settings, relay_url="http://127.0.0.1:1"))
    assert str(exc.value) == message


def test_unreachable_relay_gives_diagnostic():
    settings = ProviderSettings(provider="claude", api_key="sk-key")
    with pytest.raises(RelayConnectionError) as exc:
        asyncio.run(create_plan("An app", settings, relay_url="http://127.0.0.1:1"))
    assert "Could not reach the relay server" in str(exc.value)
    assert "http://127.0.0.1:1" in str(exc.value)


def test_custom_provider_end_to_end_through_real_relay():
    """Planner -> relay -> fake OpenAI-compatible vendor."""
    received = []

    async def vendor_chat(request):
        received.append({"headers": dict(request.headers), "body": await request.json()})
        reply = "Here is your plan:\n```json\n" + json.dumps(ANALYSIS) + "\n```"
        return web.json_response(chat_reply(reply))

    async def runner():
        vendor_app = web.Application()
        vendor_app.router.add_post("/v1/chat/completions", vendor_chat)
        async with test_utils.TestServer(vendor_app) as vendor, \
                test_utils.TestServer(create_app()) as relay:
            settings = ProviderSettings(
                provider="custom",
                api_key="sk-custom-123456789",
                model="local-model",
                endpoint=str(vendor.make_url("/v1/chat/completions")),
            )
            return await create_plan("A tool that cleans CSV files", settings, relay_url=str(relay.make_url("")))

    plan = asyncio.run(runner())
    assert plan.analysis.project_name == "CSV Cleaner"
    assert plan.provider == "custom"
    assert len(plan.steps) == 4

    assert received[0]["headers"]["Authorization"] == "Bearer sk-custom-123456789"
    assert received[0]["body"]["model"] == "local-model"
    assert received[0]["body"]["temperature"] == 0.1


def test_provider_name_is_case_insensitive():
    settings = ProviderSettings(provider=" Claude ", api_key="sk-ant-key")
    result, received = run_with_fake_relay(claude_reply(json.dumps(ANALYSIS)), settings)
    assert result["errors"] == {}
    assert received[0]["provider"] == "claude"
    assert received[0]["body"]["model"] == "claude-3-sonnet-20240229"
    assert "customEndpoint" not in received[0]["body"]
    assert result["plan"].provider == "claude"
