"""
Request handlers for the Slack AI bot.

Each handler takes an InboundRequest and returns a HandlerResponse; the
dispatcher sends the reply messages.
"""

import logging
from datetime import datetime, timezone

from .dispatcher import Dispatcher, GENERIC_ERROR_MESSAGE
from .models import InboundRequest, RequestKind, HandlerResponse, MessageResult
from .registry import ProviderRegistry
from .storage import StateStore

logger = logging.getLogger(__name__)

ASK_COMMAND = "/ask-advanced"
PROVIDER_COMMAND = "/ai-provider"
MENTION_EVENT = "app_mention"
EXAMPLE_ACTION = "action_id_exemple"

ANSWER_TEMPLATE = "Réponse IA: {answer}"
EMPTY_QUESTION_MESSAGE = (
    f"La question est vide. Utilisation : `{ASK_COMMAND} <votre question>`"
)


class AskBotHandlers:
    """
    Handlers for the AI question command and the bot's other listeners.

    The user's preferred provider and question count are kept in the
    state store, keyed by Slack user ID.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        store: StateStore,
        default_provider: str = "primary"
    ):
        registry.require(default_provider)
        self.registry = registry
        self.store = store
        self.default_provider = default_provider

    def register(self, dispatcher: Dispatcher) -> None:
        """Register all handlers with the dispatcher."""
        dispatcher.route(RequestKind.COMMAND, ASK_COMMAND, self.handle_ask)
        dispatcher.route(RequestKind.COMMAND, PROVIDER_COMMAND, self.handle_provider)
        dispatcher.route(RequestKind.EVENT, MENTION_EVENT, self.handle_mention)
        dispatcher.route(RequestKind.ACTION, EXAMPLE_ACTION, self.handle_action)

    def provider_name_for(self, user_id: str | None) -> str:
        """Get the user's preferred provider, falling back to the default."""
        if user_id:
            blob = self.store.get_user(user_id)
            if isinstance(blob, dict):
                preferred = blob.get("provider")
                if preferred in self.registry:
                    return preferred
        return self.default_provider

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def handle_ask(self, request: InboundRequest) -> HandlerResponse:
        """Forward a question to the AI provider and reply with the answer."""
        question = request.text.strip()
        logger.debug(f"Question received from {request.user_id}: {question!r}")

        if not question:
            return HandlerResponse.error(EMPTY_QUESTION_MESSAGE, reason="empty_question")

        provider_name = self.provider_name_for(request.user_id)
        provider = self.registry.get(provider_name)
        logger.info(f"Calling provider '{provider_name}' for user {request.user_id}")

        response = await provider.get_response(question)
        if not response.ok:
            logger.error(
                f"Provider '{provider_name}' failed for user {request.user_id}: "
                f"{response.error}"
            )
            return HandlerResponse.error(GENERIC_ERROR_MESSAGE, provider=provider_name)

        logger.debug(f"Generated answer: {response.text!r}")
        if request.user_id:
            self._record_question(request.user_id)

        return HandlerResponse.success(
            ANSWER_TEMPLATE.format(answer=response.text),
            provider=provider_name
        )

    async def handle_provider(self, request: InboundRequest) -> HandlerResponse:
        """Show or change the user's preferred provider."""
        requested = request.text.strip()
        available = ", ".join(f"`{name}`" for name in self.registry.names())

        if not requested:
            current = self.provider_name_for(request.user_id)
            return HandlerResponse(
                result=MessageResult.NO_ACTION,
                messages=[
                    f"Fournisseur IA actuel : *{current}*\n"
                    f"Fournisseurs disponibles : {available}"
                ]
            )

        if requested not in self.registry:
            return HandlerResponse.error(
                f"Fournisseur inconnu : `{requested}`.\n"
                f"Fournisseurs disponibles : {available}",
                reason="unknown_provider"
            )

        if not request.user_id:
            return HandlerResponse.error(GENERIC_ERROR_MESSAGE, reason="missing_user")

        if not self.store.update_user(request.user_id, provider=requested):
            logger.warning(f"Could not persist provider choice for {request.user_id}")

        logger.info(f"User {request.user_id} switched to provider '{requested}'")
        return HandlerResponse.success(f"Fournisseur IA sélectionné : *{requested}*")

    async def handle_mention(self, request: InboundRequest) -> HandlerResponse:
        return HandlerResponse.success(
            f"Bonjour <@{request.user_id}> ! Comment puis-je vous aider ?"
        )

    async def handle_action(self, request: InboundRequest) -> HandlerResponse:
        return HandlerResponse.success(f"Action déclenchée par <@{request.user_id}>")

    def _record_question(self, user_id: str) -> None:
        """Bump the user's question count. Persistence failures are only logged."""
        blob = self.store.get_user(user_id)
        count = blob.get("questions", 0) if isinstance(blob, dict) else 0
        if not isinstance(count, int):
            count = 0
        saved = self.store.update_user(
            user_id,
            questions=count + 1,
            last_question_at=datetime.now(timezone.utc).isoformat(),
        )
        if not saved:
            logger.warning(f"Could not persist state for user {user_id}")
