import os

# === Relay Config ===
RELAY_HOST = "127.0.0.1"
RELAY_PORT = int(os.getenv("PORT", "3001"))
MAX_BODY_SIZE = 10 * 1024 * 1024  # 10 MiB request body limit
CORS_ORIGINS = ["http://localhost:3000", "http://localhost:8501", "*"]

# === Planner Client Config ===
RELAY_URL = os.getenv("PROMPTPLANNER_RELAY_URL", f"http://localhost:{RELAY_PORT}")
DEFAULT_PROVIDER = "claude"

# === LLM Request Config ===
MAX_TOKENS = 4000
TEMPERATURE = 0.1  # OpenAI-compatible providers only
TIMEOUT = 120  # seconds, relay -> vendor and planner -> relay
ANTHROPIC_VERSION = "2023-06-01"

# === Logging ===
LOG_FILE = os.getenv("PROMPTPLANNER_LOG_FILE", "promptplanner.log")
