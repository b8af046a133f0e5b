"""
Data models for the Slack AI bot.
"""

from dataclasses import dataclass, field
from typing import Optional, Any
from enum import Enum


class RequestKind(Enum):
    """Kind of inbound Slack request."""
    COMMAND = "command"
    EVENT = "event"
    ACTION = "action"


class RequestState(Enum):
    """Lifecycle of a dispatched request."""
    RECEIVED = "received"
    ACKNOWLEDGED = "acknowledged"
    COMPLETED = "completed"
    FAILED = "failed"


class MessageResult(Enum):
    """Result of processing a request."""
    SUCCESS = "success"
    ERROR = "error"
    NO_ACTION = "no_action"


def _mapping(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


@dataclass
class InboundRequest:
    """A command, event or action delivered by the transport."""
    kind: RequestKind
    name: str
    user_id: Optional[str] = None
    text: str = ""
    channel_id: Optional[str] = None
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_slack(cls, kind: RequestKind, name: str, body: dict) -> "InboundRequest":
        """
        Build a request from a Slack Bolt request body.

        Slash commands carry flat fields, events nest under "event" and
        interactive actions carry "user" and "channel" objects.
        """
        body = _mapping(body)

        if kind is RequestKind.COMMAND:
            return cls(
                kind=kind,
                name=name,
                user_id=body.get("user_id"),
                text=_text(body.get("text")),
                channel_id=body.get("channel_id"),
                payload=body,
            )

        if kind is RequestKind.EVENT:
            event = _mapping(body.get("event"))
            return cls(
                kind=kind,
                name=name,
                user_id=event.get("user"),
                text=_text(event.get("text")),
                channel_id=event.get("channel"),
                payload=event,
            )

        user = _mapping(body.get("user"))
        channel = _mapping(body.get("channel"))
        actions = body.get("actions")
        action = _mapping(actions[0]) if isinstance(actions, list) and actions else {}
        return cls(
            kind=kind,
            name=name,
            user_id=user.get("id"),
            text=_text(action.get("value")),
            channel_id=channel.get("id"),
            payload=body,
        )


@dataclass
class HandlerResponse:
    """Response from a request handler."""
    result: MessageResult
    messages: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, *messages: str, **metadata: Any) -> "HandlerResponse":
        return cls(MessageResult.SUCCESS, list(messages), dict(metadata))

    @classmethod
    def error(cls, *messages: str, **metadata: Any) -> "HandlerResponse":
        return cls(MessageResult.ERROR, list(messages), dict(metadata))


@dataclass
class ProviderResponse:
    """
    Outcome of a provider call.

    Either ``text`` holds a non-empty generated answer, or ``error`` holds
    the internal failure detail. The error is for logs only.
    """
    provider: str
    text: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return bool(self.text)

    @classmethod
    def success(cls, provider: str, text: str) -> "ProviderResponse":
        return cls(provider=provider, text=text)

    @classmethod
    def failure(cls, provider: str, error: str) -> "ProviderResponse":
        return cls(provider=provider, error=error)
