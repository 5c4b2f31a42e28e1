"""Session management for Market Scout."""

from market_scout.session.manager import (
    SessionManager,
    SessionPayloadError,
    export_artifacts,
    parse_session_payload,
)

__all__ = ["SessionManager", "SessionPayloadError", "export_artifacts", "parse_session_payload"]
