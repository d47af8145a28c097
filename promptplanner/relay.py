"""Same-origin relay that forwards planner requests to the selected vendor API.

The planner cannot call vendor APIs directly from the browser because of
cross-origin restrictions, so it posts to this relay instead:

    POST /api/ai/<provider>  {"apiKey", "model", "messages", "customEndpoint"?}

The relay attaches the provider's auth headers, builds the provider-specific
body and returns the vendor's JSON unchanged (or a JSON error).
"""

import asyncio
import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional

import aiohttp
from aiohttp import web

from promptplanner import config as app_config
from promptplanner.llm_provider import get_llm_provider, list_providers, PROVIDERS, UnsupportedProviderError
from promptplanner.utils import mask_key, redact_api_key

logger = logging.getLogger(__name__)

RELAY_STATS = {
    "total_requests": 0,
    "errors": 0,
    "total_time": 0.0,
}

CLIENT_SESSION = web.AppKey("client_session", aiohttp.ClientSession)


def json_error(status: int, error: str, **extra) -> web.Response:
    body = {"error": error}
    body.update(extra)
    return web.json_response(body, status=status)


def _origin_allowed(origin: Optional[str]) -> bool:
    return bool(origin) and ("*" in app_config.CORS_ORIGINS or origin in app_config.CORS_ORIGINS)


@web.middleware
async def cors_middleware(request: web.Request, handler):
    """Answer preflight requests and echo allowed origins on every response."""
    origin = request.headers.get("Origin")
    if request.method == "OPTIONS":
        response = web.Response(status=204)
    else:
        response = await handler(request)

    if _origin_allowed(origin):
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = request.headers.get(
            "Access-Control-Request-Headers", "Content-Type, Accept"
        )
        response.headers["Vary"] = "Origin"
    return response


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Turn anything a handler lets escape into a JSON 500."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Server error on {request.method} {request.path}")
        return json_error(500, "Internal server error", message=str(e))


async def _read_vendor_body(resp: aiohttp.ClientResponse) -> Any:
    text = await resp.text()
    try:
        return json.loads(text) if text else {}
    except json.JSONDecodeError:
        return {"raw": text}


def _vendor_error_message(data: Any, reason: Optional[str]) -> str:
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if isinstance(error, str) and error:
            return error
    return f"AI API Error: {reason}"


async def relay_request(request: web.Request) -> web.Response:
    """POST /api/ai/{provider}"""
    start_time = time.time()
    RELAY_STATS["total_requests"] += 1
    response = None
    try:
        response = await _relay(request)
        return response
    finally:
        if response is None or response.status >= 400:
            RELAY_STATS["errors"] += 1
        RELAY_STATS["total_time"] += time.time() - start_time


async def _relay(request: web.Request) -> web.Response:
    provider_name = request.match_info["provider"]

    try:
        body = await request.json()
    except web.HTTPRequestEntityTooLarge:
        logger.warning(f"Rejected {provider_name} request: body over {app_config.MAX_BODY_SIZE} bytes")
        return json_error(413, "Request body too large",
                          message=f"Maximum request body size {app_config.MAX_BODY_SIZE} exceeded")
    except (json.JSONDecodeError, UnicodeDecodeError):
        return json_error(400, "Request body must be valid JSON")
    if not isinstance(body, dict):
        return json_error(400, "Request body must be valid JSON")

    api_key = body.get("apiKey")
    model = body.get("model")
    messages = body.get("messages")
    custom_endpoint = body.get("customEndpoint") or None

    logger.info(f"AI request: {provider_name} - {model} (key {mask_key(api_key)})")

    if not api_key:
        return json_error(400, "API Key is required")
    if not isinstance(messages, list):
        return json_error(400, "Messages array is required")

    try:
        provider = get_llm_provider(provider_name, custom_endpoint)
    except UnsupportedProviderError as e:
        return json_error(400, str(e))

    payload = provider.build_payload(model, messages)
    headers = provider.build_headers(api_key)
    session = request.app[CLIENT_SESSION]

    try:
        async with session.post(
            provider.endpoint,
            json=payload,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=app_config.TIMEOUT),
        ) as resp:
            data = await _read_vendor_body(resp)
            if resp.status >= 400:
                logger.error(f"AI API error {resp.status} from {provider.endpoint}: {redact_api_key(json.dumps(data)[:500])}")
                return json_error(resp.status, _vendor_error_message(data, resp.reason), details=data)
            return web.json_response(data, status=resp.status)
    except asyncio.TimeoutError:
        logger.error(f"AI request to {provider.endpoint} timed out after {app_config.TIMEOUT}s")
        return json_error(504, "Upstream request timed out", message=f"No response within {app_config.TIMEOUT}s")
    except aiohttp.ClientError as e:
        logger.error(f"Relay client error for {provider.endpoint}: {redact_api_key(str(e))}")
        return json_error(502, "Upstream connection failed", message=redact_api_key(str(e)))
    except Exception as e:
        logger.exception("Proxy error")
        return json_error(500, "Internal proxy error", message=redact_api_key(str(e)))


async def health(request: web.Request) -> web.Response:
    """GET /health"""
    return web.json_response({
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "supportedProviders": list_providers(),
        "stats": dict(RELAY_STATS),
    })


async def providers(request: web.Request) -> web.Response:
    """GET /api/providers"""
    return web.json_response({
        "providers": list_providers(),
        "configs": {name: {"endpoint": provider_cls.default_endpoint} for name, provider_cls in PROVIDERS.items()},
    })


async def client_session_ctx(app: web.Application):
    async with aiohttp.ClientSession() as session:
        app[CLIENT_SESSION] = session
        yield


def create_app() -> web.Application:
    """Build the relay application."""
    app = web.Application(
        middlewares=[cors_middleware, error_middleware],
        client_max_size=app_config.MAX_BODY_SIZE,
    )
    app.cleanup_ctx.append(client_session_ctx)
    app.router.add_post("/api/ai/{provider}", relay_request)
    app.router.add_get("/health", health)
    app.router.add_get("/api/providers", providers)
    return app


def run_relay(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Run the relay until interrupted."""
    host = host or app_config.RELAY_HOST
    port = port or app_config.RELAY_PORT
    logger.info(f"Relay listening on http://{host}:{port}")
    logger.info(f"Health check: http://{host}:{port}/health")
    logger.info(f"Supported providers: {', '.join(list_providers())}")
    web.run_app(create_app(), host=host, port=port, print=None)
