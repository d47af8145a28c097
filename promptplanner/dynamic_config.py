import os
import yaml

from promptplanner import config as app_config


def load_yaml_config(file_path):
    if not file_path or not os.path.exists(file_path):
        return {}
    with open(file_path, "r") as f:
        return yaml.safe_load(f) or {}


def get_config_value(cli_value, yaml_value, env_var, default=None):
    """
    Resolve config value in priority order:
    CLI arg → YAML config → ENV → default
    """
    if cli_value is not None:
        return cli_value
    if yaml_value is not None:
        return yaml_value
    if env_var and os.getenv(env_var) is not None:
        return os.getenv(env_var)
    return default


def apply_config(yaml_config, host=None, port=None, relay_url=None):
    """Merge CLI options, a YAML mapping and the environment into the config module."""
    relay_cfg = yaml_config.get("relay", {})
    app_config.RELAY_HOST = get_config_value(host, relay_cfg.get("host"), "PROMPTPLANNER_HOST", app_config.RELAY_HOST)
    app_config.RELAY_PORT = int(get_config_value(port, relay_cfg.get("port"), "PORT", app_config.RELAY_PORT))
    app_config.CORS_ORIGINS = relay_cfg.get("cors_origins", app_config.CORS_ORIGINS)
    app_config.MAX_BODY_SIZE = int(relay_cfg.get("max_body_size", app_config.MAX_BODY_SIZE))

    planner_cfg = yaml_config.get("planner", {})
    app_config.RELAY_URL = get_config_value(relay_url, planner_cfg.get("relay_url"), "PROMPTPLANNER_RELAY_URL", app_config.RELAY_URL)
    app_config.DEFAULT_PROVIDER = planner_cfg.get("provider", app_config.DEFAULT_PROVIDER)

    llm_cfg = yaml_config.get("llm", {})
    app_config.MAX_TOKENS = int(llm_cfg.get("max_tokens", app_config.MAX_TOKENS))
    app_config.TEMPERATURE = float(llm_cfg.get("temperature", app_config.TEMPERATURE))
    app_config.TIMEOUT = float(get_config_value(None, llm_cfg.get("timeout"), "PROMPTPLANNER_TIMEOUT", app_config.TIMEOUT))
