"""
Offline provider that echoes the prompt back.
"""

from .base import AIProvider


class EchoProvider(AIProvider):
    """Answers without any network I/O. Stands in for a vendor without credentials."""

    vendor = "echo"

    def __init__(self, label: str = "Echo"):
        super().__init__(endpoint=None, model="echo")
        self.label = label

    async def _complete(self, prompt: str) -> str:
        return f"Réponse de {self.label} pour: {prompt}"

    async def close(self) -> None:
        pass
