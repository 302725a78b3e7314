"""Round events, their emitter and the logging subscriber."""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of game events."""

    # Session flow events
    SESSION_STARTED = auto()
    SESSION_EXPIRED = auto()
    ROUND_STARTED = auto()
    ROUND_RESET = auto()

    # Betting events
    BET_PLACED = auto()
    ROUND_SETTLED = auto()

    # Card events
    DECK_SHUFFLED = auto()
    CARD_DEALT = auto()

    # Player action events
    PLAYER_HIT = auto()
    PLAYER_STAND = auto()
    PLAYER_BUSTS = auto()

    # Dealer events
    DEALER_REVEALS = auto()
    DEALER_HITS = auto()
    DEALER_STANDS = auto()
    DEALER_BUSTS = auto()

    # State machine events
    STATE_CHANGED = auto()
    STATE_RECOVERED = auto()

    # Error events
    INVALID_ACTION = auto()


@dataclass(frozen=True)
class GameEvent:
    """
    Immutable game event.

    Events are the observability hook at every transition boundary; the
    engine never depends on who listens.
    """

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


EventHandler = Callable[[GameEvent], None]


class EventEmitter:
    """
    Fan-out of game events to handlers keyed by type (None = every event).

    Keeps the most recent ``max_history`` events for inspection.
    """

    def __init__(self, max_history: int = 1000) -> None:
        self._handlers: dict[EventType | None, list[EventHandler]] = {}
        self._history: deque[GameEvent] = deque(maxlen=max_history)

    def subscribe(self, handler: EventHandler, event_type: EventType | None = None) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, handler: EventHandler, event_type: EventType | None = None) -> None:
        """Remove a handler; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: GameEvent) -> None:
        """Record ``event``, then call typed handlers before catch-all ones."""
        self._history.append(event)
        for handler in self._handlers.get(event.event_type, []) + self._handlers.get(None, []):
            handler(event)

    def emit_new(self, event_type: EventType, **data: Any) -> GameEvent:
        """Build an event from keyword data, emit it and return it."""
        event = GameEvent(event_type=event_type, data=data)
        self.emit(event)
        return event

    @property
    def history(self) -> list[GameEvent]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()


_LEVELS = {
    EventType.INVALID_ACTION: logging.WARNING,
    EventType.STATE_RECOVERED: logging.WARNING,
    EventType.SESSION_EXPIRED: logging.INFO,
    EventType.STATE_CHANGED: logging.INFO,
    EventType.ROUND_SETTLED: logging.INFO,
}


def log_event(event: GameEvent) -> None:
    """Catch-all subscriber writing events to the module logger."""
    logger.log(_LEVELS.get(event.event_type, logging.DEBUG), "%s %s", event.event_type.name, event.data)
