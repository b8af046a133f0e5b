"""
Slack AI Bot - Main Entry Point

Central bot that:
- Answers /ask-advanced questions through the configured AI provider
- Lets users pick their provider with /ai-provider
- Greets mentions and handles interactive actions
- Accepts generic JSON payloads on POST /webhook
"""

import sys
import asyncio
import argparse
import logging

from aiohttp import web
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler

from askbot.config import Settings, ConfigurationError, load_settings
from askbot.dispatcher import Dispatcher
from askbot.handlers import AskBotHandlers
from askbot.registry import ProviderRegistry, build_registry
from askbot.slack_app import create_app, create_http_server
from askbot.storage import StateStore
from askbot.webhook import create_webhook_app

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Slack AI Bot")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to bot config JSON file (e.g., bots/ask_bot.json)"
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=None,
        help="Path to .env file, relative to the bot directory"
    )
    return parser.parse_args(argv)


def build_dispatcher(settings: Settings, registry: ProviderRegistry) -> Dispatcher:
    """Create the dispatcher with every handler registered."""
    store = StateStore(settings.state_file)
    handlers = AskBotHandlers(registry, store, settings.default_provider)

    dispatcher = Dispatcher()
    handlers.register(dispatcher)
    return dispatcher


async def run_socket_mode(settings: Settings, registry: ProviderRegistry,
                          dispatcher: Dispatcher) -> None:
    """Run Slack over Socket Mode with the webhook served on its own port."""
    app = create_app(settings, dispatcher)

    runner = web.AppRunner(create_webhook_app())
    await runner.setup()
    site = web.TCPSite(runner, port=settings.port)
    await site.start()
    logger.info(f"Webhook listening on port {settings.port}")

    handler = AsyncSocketModeHandler(app, settings.slack_app_token)
    try:
        logger.info("Bot is running in Socket Mode! Press Ctrl+C to stop.")
        await handler.start_async()
    finally:
        await handler.close_async()
        await runner.cleanup()
        await registry.close()


def run_http_mode(settings: Settings, registry: ProviderRegistry,
                  dispatcher: Dispatcher) -> None:
    """Serve Slack events and the webhook over HTTP."""
    app = create_app(settings, dispatcher)
    web_app = create_http_server(app, settings)

    async def close_providers(_app):
        await registry.close()

    web_app.on_cleanup.append(close_providers)

    logger.info(f"Bot is running on port {settings.port}! Press Ctrl+C to stop.")
    web.run_app(web_app, port=settings.port)


def main(argv=None):
    """Start the bot."""
    args = parse_args(argv)

    try:
        settings = load_settings(env_file=args.env_file, config_path=args.config)
        logging.getLogger().setLevel(settings.log_level)
        registry = build_registry(settings)
        dispatcher = build_dispatcher(settings, registry)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    logger.info(
        f"Starting {settings.name} with providers {registry.names()} "
        f"(default: {settings.default_provider})"
    )

    try:
        if settings.socket_mode:
            asyncio.run(run_socket_mode(settings, registry, dispatcher))
        else:
            run_http_mode(settings, registry, dispatcher)
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except OSError as e:
        logger.error(f"Failed to start: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
