"""Append-only conversation history with change listeners."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from ascent.interview.schemas import Turn

logger = logging.getLogger(__name__)

TurnListener = Callable[[Turn], None]


class ConversationHistory:
    """Ordered log of turns for one session.

    There is no edit or delete API. Listeners registered with subscribe()
    are called synchronously with every appended turn, in order. Listener
    errors are logged and never propagate, so a broken listener cannot
    interrupt the session that owns the history.
    """

    def __init__(self) -> None:
        self._turns: list[Turn] = []
        self._listeners: list[TurnListener] = []

    def append(self, turn: Turn) -> None:
        self.extend(turn)

    def extend(self, *turns: Turn) -> None:
        """Append turns as one unit; listeners run after all are stored."""
        self._turns.extend(turns)
        for turn in turns:
            self._notify(turn)

    def _notify(self, turn: Turn) -> None:
        for listener in list(self._listeners):
            try:
                listener(turn)
            except Exception:
                logger.exception("History listener %r failed", listener)

    def subscribe(self, listener: TurnListener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.snapshot())

    def __getitem__(self, index: int) -> Turn:
        return self._turns[index]
