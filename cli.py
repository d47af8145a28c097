import asyncio
import json
import os
import subprocess

import click

from promptplanner import config as app_config
from promptplanner.dynamic_config import load_yaml_config, apply_config
from promptplanner.llm_provider import provider_catalogue
from promptplanner.models import ProviderSettings
from promptplanner.workflow import create_plan, PlannerError


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True), help='Optional YAML configuration file.')
@click.pass_context
def cli(ctx, config):
    """
    🧠 PromptPlanner - project analysis and development prompts from your LLM of choice
    """
    yaml_config = load_yaml_config(config)
    apply_config(yaml_config)
    if config:
        click.echo(f"📄 Loaded config: {config}", err=True)
    ctx.obj = yaml_config


@cli.command()
@click.option('--host', type=str, default=None, help='Interface to bind the relay to.')
@click.option('--port', '-p', type=int, default=None, help='Relay port (default: $PORT or 3001).')
@click.pass_obj
def serve(yaml_config, host, port):
    """Run the relay that forwards planner requests to AI vendors."""
    from promptplanner.relay import run_relay

    apply_config(yaml_config or {}, host=host, port=port)
    click.echo(f"🚀 Relay starting on http://{app_config.RELAY_HOST}:{app_config.RELAY_PORT}")
    run_relay(app_config.RELAY_HOST, app_config.RELAY_PORT)


@cli.command()
@click.argument('description')
@click.option('--provider', type=click.Choice(list(provider_catalogue())), default=None, help='AI service to use.')
@click.option('--model', '-m', type=str, default='', help='Model name (default: provider default).')
@click.option('--api-key', envvar='PROMPTPLANNER_API_KEY', type=str, default='', help='API key for the AI service.')
@click.option('--endpoint', type=str, default='', help='API endpoint for the custom provider.')
@click.option('--relay-url', type=str, default=None, help='Relay base URL.')
@click.option('--json', 'as_json', is_flag=True, help='Print the plan as JSON.')
def plan(description, provider, model, api_key, endpoint, relay_url, as_json):
    """Analyze DESCRIPTION and print the development checklist."""
    settings = ProviderSettings(
        provider=provider or app_config.DEFAULT_PROVIDER,
        api_key=api_key,
        model=model,
        endpoint=endpoint,
    )
    try:
        result = asyncio.run(create_plan(description, settings, relay_url=relay_url))
    except PlannerError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    analysis = result.analysis
    click.echo(f"📋 {analysis.project_name} ({analysis.project_type or 'unspecified type'})")
    click.echo(f"   Complexity: {analysis.complexity or 'N/A'} | Estimated hours: {analysis.estimated_hours or 'N/A'}")
    for index, step in enumerate(result.steps, start=1):
        click.echo(f"\n[ ] Step {index}: {step.title} ({step.type})")
        click.echo("-" * 60)
        click.echo(step.prompt)


@cli.command()
def providers():
    """List the supported AI services and their models."""
    for key, entry in provider_catalogue().items():
        click.echo(f"{key:<10} {entry['name']}")
        if entry['endpoint']:
            click.echo(f"           endpoint: {entry['endpoint']}")
        for model in entry['models']:
            marker = '*' if model == entry['defaultModel'] else ' '
            click.echo(f"         {marker} {model}")


@cli.command()
@click.pass_context
def ui(ctx):
    """Launch the planner in the browser (streamlit)."""
    import promptplanner.dashboard as dashboard

    # streamlit runs in its own process; hand it the resolved settings
    env = dict(os.environ, PROMPTPLANNER_RELAY_URL=app_config.RELAY_URL)
    config = ctx.parent.params.get("config")
    if config:
        env["PROMPTPLANNER_CONFIG"] = os.path.abspath(config)

    click.echo(f"📊 Opening planner UI (relay: {app_config.RELAY_URL})...")
    subprocess.run(["streamlit", "run", os.path.abspath(dashboard.__file__)], env=env)


if __name__ == "__main__":
    cli()
