"""
Generic webhook endpoint.

Accepts any non-empty JSON payload on POST /webhook and logs its receipt.
"""

import json
import logging

from aiohttp import web

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/webhook"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
    "X-Permitted-Cross-Domain-Policies": "none",
}


async def add_security_headers(request: web.Request, response: web.StreamResponse) -> None:
    """Set hardening headers on every response, including raised HTTP errors."""
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)


@web.middleware
async def request_logging_middleware(request: web.Request, handler):
    """Log every incoming request."""
    logger.info(f"Incoming request: {request.method} {request.path}")
    return await handler(request)


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Turn unhandled exceptions into a JSON 500 response."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error in request {request.method} {request.path}: {e}")
        return web.json_response({"error": "Erreur interne du serveur"}, status=500)


async def handle_webhook(request: web.Request) -> web.Response:
    """Validate and record a webhook payload."""
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error(f"Webhook error: invalid JSON body ({e})")
        return web.json_response({"error": "Erreur interne"}, status=500)

    if not isinstance(payload, (dict, list)) or not payload:
        logger.error("Webhook error: empty webhook payload")
        return web.json_response({"error": "Erreur interne"}, status=500)

    logger.info(f"Webhook received: {json.dumps(payload, ensure_ascii=False)}")
    return web.json_response({"status": "OK"})


def install_webhook(app: web.Application) -> web.Application:
    """Add the webhook route and middlewares to an existing aiohttp app."""
    app.on_response_prepare.append(add_security_headers)
    app.middlewares.append(request_logging_middleware)
    app.middlewares.append(error_middleware)
    app.router.add_post(WEBHOOK_PATH, handle_webhook)
    return app


def create_webhook_app() -> web.Application:
    """Build a standalone aiohttp app serving only the webhook."""
    return install_webhook(web.Application())
