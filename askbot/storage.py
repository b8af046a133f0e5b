"""
Storage layer for per-user state.

The whole user-id -> blob mapping is kept in a single JSON document and
rewritten on every save. There is no locking: concurrent writers race and
the last write wins.
"""

import os
import json
import logging
import tempfile
from pathlib import Path
from typing import Any, Optional
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent.parent / "data"
STATE_PATH = DATA_DIR / "user_state.json"
STATE_FILE_MODE = 0o644


@dataclass
class LoadResult:
    """State read from disk, plus the reason it was discarded if any."""
    state: dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.error is not None


class StateStore:
    """Manages user state persistence in a JSON file."""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path is not None else STATE_PATH

    def load(self) -> LoadResult:
        """
        Read the state file.

        A missing file yields an empty mapping. An unreadable or invalid
        file also yields an empty mapping, with the reason in ``error``.
        """
        if not self.path.exists():
            return LoadResult()

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to read state file {self.path}: {e}")
            return LoadResult(error=f"unreadable: {e}")

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"State file {self.path} is corrupt, ignoring it: {e}")
            return LoadResult(error=f"corrupt: {e}")

        if not isinstance(data, dict):
            logger.warning(
                f"State file {self.path} holds {type(data).__name__}, expected object"
            )
            return LoadResult(error="not a JSON object")

        return LoadResult(state=data)

    def read(self) -> dict[str, Any]:
        """Return the full user state mapping."""
        return self.load().state

    def write(self, state: dict[str, Any]) -> bool:
        """
        Replace the state file with ``state``.

        The document is written to a temporary file next to the target and
        moved into place, so readers see either the old or the new file.

        Returns:
            True on success, False if the state could not be saved
        """
        tmp_name = None
        try:
            payload = json.dumps(state, indent=2, ensure_ascii=False)
            self.path.parent.mkdir(parents=True, exist_ok=True)

            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.chmod(tmp_name, STATE_FILE_MODE)
            os.replace(tmp_name, self.path)
            return True

        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write state file {self.path}: {e}")
            if tmp_name and os.path.exists(tmp_name):
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.warning(f"Could not remove temporary file {tmp_name}")
            return False

    def get_user(self, user_id: str, default: Any = None) -> Any:
        """Get a single user's state blob."""
        return self.read().get(user_id, default)

    def update_user(self, user_id: str, **changes: Any) -> bool:
        """
        Merge ``changes`` into a user's blob and save the whole mapping.

        Non-dict blobs are replaced by a fresh dict.
        """
        state = self.read()
        current = state.get(user_id)
        blob = dict(current) if isinstance(current, dict) else {}
        blob.update(changes)
        state[user_id] = blob
        return self.write(state)

