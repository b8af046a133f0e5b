"""
Slack Bolt wiring.

Binds every dispatcher route to an AsyncApp listener and builds the web
server used in HTTP mode.
"""

import logging

from aiohttp import web
from slack_bolt.async_app import AsyncApp

from .config import Settings
from .dispatcher import Dispatcher
from .models import InboundRequest, RequestKind
from .webhook import install_webhook

logger = logging.getLogger(__name__)

SLACK_EVENTS_PATH = "/slack/events"


def create_listener(dispatcher: Dispatcher, kind: RequestKind, name: str):
    """Factory to create a Bolt listener that hands requests to the dispatcher."""

    async def listener(ack, body, say):
        try:
            request = InboundRequest.from_slack(kind, name, body)
        except Exception:
            logger.exception(f"Malformed {kind.value} '{name}' body, dropping it")
            if kind is not RequestKind.EVENT:
                try:
                    await ack()
                except Exception:
                    logger.exception(f"Failed to acknowledge {kind.value} '{name}'")
            return

        state = await dispatcher.dispatch(request, ack, say)
        logger.debug(f"{kind.value} '{name}' finished as {state.value if state else 'ignored'}")

    return listener


def register_listeners(app: AsyncApp, dispatcher: Dispatcher) -> None:
    """Register a Bolt listener for every dispatcher route."""
    for route in dispatcher.routes():
        listener = create_listener(dispatcher, route.kind, route.name)

        if route.kind is RequestKind.COMMAND:
            app.command(route.name)(listener)
        elif route.kind is RequestKind.EVENT:
            app.event(route.name)(listener)
        else:
            app.action(route.name)(listener)

        logger.info(f"Registered Slack {route.kind.value}: {route.name}")


def create_app(settings: Settings, dispatcher: Dispatcher) -> AsyncApp:
    """Create the Bolt app with all listeners attached."""
    if settings.socket_mode:
        app = AsyncApp(token=settings.slack_bot_token)
    else:
        app = AsyncApp(
            token=settings.slack_bot_token,
            signing_secret=settings.slack_signing_secret,
        )
    register_listeners(app, dispatcher)
    return app


def create_http_server(app: AsyncApp, settings: Settings) -> web.Application:
    """Serve Slack events and the webhook from one aiohttp app."""
    web_app = app.web_app(path=SLACK_EVENTS_PATH, port=settings.port)
    return install_webhook(web_app)
