"""Convergent conversation state machine.

Transitions are pure: they read a session and return the next state without
touching the session. Explicit user commands are evaluated first and override
the automatic transition when valid for the current state.
"""

from __future__ import annotations

from enum import Enum

from market_scout.core.types import AgentState, Candidate, Session

MAX_FINALISTS = 5
MAX_DISCOVERY = 3

# Tier-1 rules needed before CAPTURE can move on to CONFIRM.
MIN_TIER1_FOR_CONFIRM = 3


class Command(str, Enum):
    """Explicit user commands recognized as the leading token of a message."""

    CONFIRM = "confirm"
    EXPLORE = "explore"
    WATCH = "watch"
    REVISE = "revise"
    CLOSE = "close"


_NON_TERMINAL = frozenset(state for state in AgentState if state != AgentState.CLOSE)

COMMAND_TRANSITIONS: dict[Command, dict[AgentState, AgentState]] = {
    Command.CONFIRM: {
        AgentState.CAPTURE: AgentState.CONFIRM,
        AgentState.CONFIRM: AgentState.EXPLORE,
    },
    Command.EXPLORE: {
        AgentState.CONFIRM: AgentState.EXPLORE,
        AgentState.DECIDE: AgentState.EXPLORE,
        AgentState.ITERATE: AgentState.EXPLORE,
    },
    Command.WATCH: {
        AgentState.EXPLORE: AgentState.WATCH,
        AgentState.DECIDE: AgentState.WATCH,
        AgentState.WATCH: AgentState.WATCH,
    },
    Command.REVISE: {
        AgentState.CONFIRM: AgentState.ITERATE,
        AgentState.EXPLORE: AgentState.ITERATE,
        AgentState.DECIDE: AgentState.ITERATE,
        AgentState.WATCH: AgentState.ITERATE,
    },
    Command.CLOSE: {state: AgentState.CLOSE for state in _NON_TERMINAL},
}


def next_state(session: Session) -> AgentState:
    """Automatic transition for the session's current state."""
    state = session.state
    if state == AgentState.INIT:
        return AgentState.CAPTURE
    if state == AgentState.CAPTURE:
        if len(session.constraints.tier1) >= MIN_TIER1_FOR_CONFIRM:
            return AgentState.CONFIRM
        return AgentState.CAPTURE
    if state == AgentState.CONFIRM:
        return AgentState.EXPLORE
    if state == AgentState.EXPLORE:
        return AgentState.DECIDE
    if state == AgentState.DECIDE:
        if any(c.verdict == "ACCEPT" for c in session.finalists):
            return AgentState.CLOSE
        return AgentState.WATCH
    if state == AgentState.WATCH:
        return AgentState.CLOSE
    if state == AgentState.ITERATE:
        return AgentState.CONFIRM
    return AgentState.CLOSE


def parse_command(message: str | None) -> Command | None:
    """Recognize a command only when it is the leading token of *message*."""
    if not message:
        return None
    tokens = message.strip().split(maxsplit=1)
    if not tokens:
        return None
    head = tokens[0].lower().strip(".,!?;:\"'")
    try:
        return Command(head)
    except ValueError:
        return None


def command_transition(state: AgentState, command: Command | None) -> AgentState | None:
    """Overriding state for *command* in *state*, or None if not applicable."""
    if command is None:
        return None
    return COMMAND_TRANSITIONS[command].get(state)


def resolve_next_state(session: Session, message: str | None = None) -> AgentState:
    """Command override first, then the automatic transition."""
    override = command_transition(session.state, parse_command(message))
    if override is not None:
        return override
    return next_state(session)


def clamp_finalists(items: list[Candidate]) -> list[Candidate]:
    """Highest-scoring finalists, at most MAX_FINALISTS."""
    return sorted(items, key=lambda c: c.score, reverse=True)[:MAX_FINALISTS]


def clamp_discovery(items: list[Candidate]) -> list[Candidate]:
    """Highest-scoring near-misses, at most MAX_DISCOVERY."""
    return sorted(items, key=lambda c: c.score, reverse=True)[:MAX_DISCOVERY]
