from __future__ import annotations

from typing import Callable, Generic, ParamSpec


P = ParamSpec("P")


class Subscription:
    """Handle returned by `Event.subscribe`; cancel it when the subscriber goes away."""

    def __init__(self, event: "Event", key: int) -> None:
        self._event: Event | None = event
        self._key = key

    @property
    def active(self) -> bool:
        return self._event is not None

    def cancel(self) -> None:
        if self._event is None:
            return
        self._event._remove(self._key)
        self._event = None

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()


class Event(Generic[P]):
    """Synchronous broadcast: `emit` calls every subscriber before returning."""

    def __init__(self) -> None:
        self._handlers: dict[int, Callable[P, None]] = {}
        self._next_key = 0

    def __len__(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: Callable[P, None]) -> Subscription:
        key = self._next_key
        self._next_key += 1
        self._handlers[key] = handler
        return Subscription(self, key)

    def emit(self, *args: P.args, **kwargs: P.kwargs) -> None:
        # Snapshot so handlers may cancel themselves while being notified.
        for handler in list(self._handlers.values()):
            handler(*args, **kwargs)

    def clear(self) -> None:
        self._handlers.clear()

    def _remove(self, key: int) -> None:
        self._handlers.pop(key, None)
