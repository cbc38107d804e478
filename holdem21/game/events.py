"""Table events and the bounded text log built on them."""

from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable


class EventType(Enum):
    """Types of table events."""

    # Table settings
    BLINDS_CHANGED = auto()
    PLAYER_TOPPED_UP = auto()

    # Hand flow
    HAND_STARTED = auto()
    HAND_ENDED = auto()
    ROUND_STARTED = auto()
    ROUND_SKIPPED = auto()
    SHOWDOWN = auto()

    # Cards and blinds
    DECK_SHUFFLED = auto()
    BLIND_POSTED = auto()
    COMMUNITY_DEALT = auto()

    # Player actions
    PLAYER_FOLD = auto()
    PLAYER_CHECK = auto()
    PLAYER_CALL = auto()
    PLAYER_BET = auto()
    PLAYER_RAISE = auto()
    PLAYER_STAND = auto()
    PLAYER_DOUBLE = auto()

    # Outcomes
    PLAYER_BUSTS = auto()
    INSTANT_WIN = auto()
    PLAYER_WINS = auto()
    NO_WINNER = auto()

    # Rejected actions
    INVALID_ACTION = auto()


@dataclass(frozen=True)
class GameEvent:
    """
    Immutable table event.

    Events carry structured data for drivers; log lines also carry the
    rendered text under ``message``.
    """

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def message(self) -> str | None:
        return self.data.get("message")

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


EventHandler = Callable[[GameEvent], None]


class EventEmitter:
    """
    Publish table events to subscribers.

    Handlers subscribe to one event type or, with ``None``, to everything.
    The most recent ``max_history`` events are kept for inspection.
    """

    def __init__(self, max_history: int = 500) -> None:
        self._handlers: defaultdict[EventType | None, list[EventHandler]] = defaultdict(list)
        self._history: deque[GameEvent] = deque(maxlen=max_history)

    def subscribe(self, handler: EventHandler, event_type: EventType | None = None) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, handler: EventHandler, event_type: EventType | None = None) -> None:
        """Remove a handler; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: GameEvent) -> None:
        """Record ``event`` and call its typed handlers, then the catch-all ones."""
        self._history.append(event)
        for handler in [*self._handlers.get(event.event_type, []), *self._handlers.get(None, [])]:
            handler(event)

    def emit_new(self, event_type: EventType, **data: Any) -> GameEvent:
        """Build an event from keyword data and emit it."""
        event = GameEvent(event_type=event_type, data=data)
        self.emit(event)
        return event

    @property
    def history(self) -> list[GameEvent]:
        """Recorded events, oldest first."""
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()


class TableLog:
    """
    Newest-first text log of a hand, capped at ``limit`` lines.

    Every line is also emitted as an event so subscribers see the same
    history with structured data attached.
    """

    def __init__(self, emitter: EventEmitter, limit: int) -> None:
        self._emitter = emitter
        self._lines: deque[str] = deque(maxlen=limit)

    def record(self, message: str, event_type: EventType, **data: Any) -> GameEvent:
        self._lines.appendleft(message)
        return self._emitter.emit_new(event_type, message=message, **data)

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def clear(self) -> None:
        self._lines.clear()
