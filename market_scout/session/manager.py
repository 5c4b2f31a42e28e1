"""Session manager for creating, loading, and managing sessions."""

import json
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from market_scout.core.types import GoalType, Session


class SessionPayloadError(ValueError):
    """Raised when a session payload cannot be parsed into a Session."""

    pass


def parse_session_payload(payload: str | bytes | dict[str, Any]) -> Session:
    """Validate a caller-provided session document.

    Raises:
        SessionPayloadError: If the payload is not JSON or fails the schema.
    """
    try:
        if isinstance(payload, (str, bytes)):
            payload = json.loads(payload)
        return Session.model_validate(payload)
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        raise SessionPayloadError(f"Invalid session payload: {e}") from e


def export_artifacts(session: Session) -> dict[str, Any]:
    """Self-contained documents for UI and export collaborators."""
    return {
        "session": session.model_dump(mode="json"),
        "intent": session.intent.model_dump(mode="json"),
        "constraints": session.constraints.model_dump(mode="json"),
        "candidates": {
            "finalists": [c.model_dump(mode="json") for c in session.finalists],
            "discovery": [c.model_dump(mode="json") for c in session.discovery],
        },
        "watch": session.watch.model_dump(mode="json") if session.watch else None,
    }


class SessionManager:
    """Manages session lifecycle and persistence."""

    CURRENT_SESSION_FILE = ".current_session"
    SESSION_FILE = "session.json"

    def __init__(self, data_dir: Path | str | None = None) -> None:
        """Initialize the session manager.

        Args:
            data_dir: Base directory for session data. Defaults to ./local_data
        """
        if data_dir is None:
            data_dir = Path("local_data")
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def data_dir(self) -> Path:
        """Get the data directory."""
        return self._data_dir

    def _generate_session_id(self, title: str) -> str:
        """Generate a session ID from date and title."""
        date_str = datetime.now().strftime("%Y-%m-%d")
        safe_title = "".join(c if c.isalnum() or c in "-_" else "-" for c in title.lower())
        safe_title = safe_title[:60].strip("-") or "session"
        return f"{date_str}-{safe_title}"

    def _session_dir(self, session_id: str) -> Path:
        return self._data_dir / session_id

    def _current_session_file(self) -> Path:
        return self._data_dir / self.CURRENT_SESSION_FILE

    def create_session(
        self,
        title: str,
        session_id: str | None = None,
        goal_type: GoalType = "vehicle_hunt",
    ) -> Session:
        """Create a new session and make it current.

        Args:
            title: Short description used to derive the session ID.
            session_id: Optional custom session ID.
            goal_type: Acquisition goal for the session.

        Returns:
            The created Session object.
        """
        if session_id is None:
            session_id = self._generate_session_id(title)

        session = Session(id=session_id, goal_type=goal_type)
        session.intent.goal_type = goal_type
        session.notes.append(title)
        self._session_dir(session_id).mkdir(parents=True, exist_ok=True)

        self.save_session(session)
        self._set_current_session(session_id)
        return session

    def save_session(self, session: Session) -> Path:
        """Persist a session snapshot."""
        session_dir = self._session_dir(session.id)
        session_dir.mkdir(parents=True, exist_ok=True)
        session_file = session_dir / self.SESSION_FILE
        with open(session_file, "w", encoding="utf-8") as f:
            json.dump(session.model_dump(mode="json"), f, ensure_ascii=False, indent=2)
        return session_file

    def load_session(self, session_id: str) -> Session | None:
        """Load a session by ID.

        Returns:
            The Session object, or None if not found.

        Raises:
            SessionPayloadError: If the stored document is corrupt.
        """
        session_file = self._session_dir(session_id) / self.SESSION_FILE
        if not session_file.exists():
            return None
        return parse_session_payload(session_file.read_text(encoding="utf-8"))

    def list_sessions(self) -> list[Session]:
        """List all available sessions, newest first."""
        sessions = []
        for session_dir in self._data_dir.iterdir():
            if session_dir.is_dir() and not session_dir.name.startswith("."):
                session = self.load_session(session_dir.name)
                if session:
                    sessions.append(session)
        return sorted(sessions, key=lambda s: s.created_at, reverse=True)

    def delete_session(self, session_id: str) -> bool:
        """Delete a session and all its data.

        Returns:
            True if deleted, False if not found.
        """
        session_dir = self._session_dir(session_id)
        if not session_dir.exists():
            return False

        shutil.rmtree(session_dir)

        if self._get_current_session_id() == session_id:
            self._current_session_file().unlink(missing_ok=True)

        return True

    def _set_current_session(self, session_id: str) -> None:
        with open(self._current_session_file(), "w") as f:
            f.write(session_id)

    def _get_current_session_id(self) -> str | None:
        current_file = self._current_session_file()
        if not current_file.exists():
            return None
        return current_file.read_text().strip()

    def get_current_session(self) -> Session | None:
        """Get the current session, or None if no current session."""
        session_id = self._get_current_session_id()
        if session_id is None:
            return None
        return self.load_session(session_id)

    def switch_session(self, session_id: str) -> Session | None:
        """Switch to a different session.

        Returns:
            The Session if found, None otherwise.
        """
        session = self.load_session(session_id)
        if session:
            self._set_current_session(session_id)
        return session
