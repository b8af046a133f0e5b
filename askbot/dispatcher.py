"""
Central request dispatcher for the Slack AI bot.

Handles:
- Routing commands, events and actions to their registered handler
- Acknowledging requests before slow work starts
- Containing handler and transport errors
"""

import logging
from dataclasses import dataclass
from typing import Optional, Callable, Awaitable

from .models import (
    InboundRequest, RequestKind, RequestState, HandlerResponse, MessageResult
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = (
    "Désolé, une erreur est survenue lors du traitement de votre requête."
)

Handler = Callable[[InboundRequest], Awaitable[HandlerResponse]]
AckFn = Callable[[], Awaitable[None]]
SayFn = Callable[[str], Awaitable[object]]


@dataclass(frozen=True)
class Route:
    """A statically registered handler."""
    kind: RequestKind
    name: str
    handler: Handler
    requires_ack: bool


class Dispatcher:
    """Central dispatcher that routes requests to the appropriate handler."""

    def __init__(self):
        self._routes: dict[tuple[RequestKind, str], Route] = {}

    def route(
        self,
        kind: RequestKind,
        name: str,
        handler: Handler,
        requires_ack: Optional[bool] = None
    ) -> Route:
        """
        Register the handler for one request type.

        Args:
            kind: Command, event or action
            name: Slash command, event type or action id
            handler: Coroutine function taking the request
            requires_ack: Acknowledge before the handler runs. Defaults to
                True for commands and actions, False for events.

        Raises:
            ValueError: If a handler is already registered for this request type
        """
        key = (kind, name)
        if key in self._routes:
            raise ValueError(f"Handler already registered for {kind.value} '{name}'")

        if requires_ack is None:
            requires_ack = kind is not RequestKind.EVENT

        route = Route(kind, name, handler, requires_ack)
        self._routes[key] = route
        logger.info(f"Registered {kind.value} handler: {name}")
        return route

    def routes(self) -> list[Route]:
        """Get all registered routes."""
        return list(self._routes.values())

    def get_route(self, kind: RequestKind, name: str) -> Optional[Route]:
        return self._routes.get((kind, name))

    async def dispatch(
        self,
        request: InboundRequest,
        ack: AckFn,
        say: SayFn
    ) -> Optional[RequestState]:
        """
        Handle one inbound request.

        Args:
            request: The inbound request
            ack: Transport acknowledgment function
            say: Reply function scoped to the originating conversation

        Returns:
            Final RequestState, or None if no handler matches the request
        """
        route = self.get_route(request.kind, request.name)
        if route is None:
            logger.debug(f"No handler for {request.kind.value} '{request.name}', ignoring")
            return None

        state = RequestState.RECEIVED

        if route.requires_ack:
            try:
                await ack()
            except Exception:
                logger.exception(
                    f"Failed to acknowledge {request.kind.value} '{request.name}'"
                )
                return RequestState.FAILED
            state = RequestState.ACKNOWLEDGED

        logger.debug(
            f"{request.kind.value} '{request.name}' from {request.user_id} is {state.value}"
        )

        try:
            response = await route.handler(request)
        except Exception:
            logger.exception(f"Error in handler for {request.kind.value} '{request.name}'")
            response = HandlerResponse.error(GENERIC_ERROR_MESSAGE)

        try:
            await self._send_response(response, say)
        except Exception:
            logger.exception(
                f"Failed to reply to {request.kind.value} '{request.name}'"
            )
            return RequestState.FAILED

        if response.result is MessageResult.ERROR:
            return RequestState.FAILED
        return RequestState.COMPLETED

    async def _send_response(self, response: HandlerResponse, say: SayFn) -> None:
        """Send handler response messages to Slack."""
        for message in response.messages:
            await say(message)
