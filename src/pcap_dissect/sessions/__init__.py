from .session import (
    Session,
    SessionKey,
    SessionState,
    SessionTracker,
    extract_session_key,
    next_tcp_state,
    read_tcp_flags,
)

__all__ = [
    "Session",
    "SessionKey",
    "SessionState",
    "SessionTracker",
    "extract_session_key",
    "next_tcp_state",
    "read_tcp_flags",
]
