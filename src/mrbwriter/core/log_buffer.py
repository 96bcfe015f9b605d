"""Append-only device log and the auto-scrolling viewport model."""

from __future__ import annotations

from typing import Callable, Sequence

from mrbwriter.utils.logging import get_logger

logger = get_logger(__name__)

LogListener = Callable[[str, tuple[str, ...]], None]


class LogBuffer:
    """Ordered log of received lines, owned by the session consumer.

    Listeners are called after every append with the new entry and the full
    snapshot, so a view can either append one row or re-render everything.
    """

    def __init__(self) -> None:
        self._entries: list[str] = []
        self._listeners: list[LogListener] = []

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: str) -> None:
        self._entries.append(entry)
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(entry, snapshot)
            except Exception:
                logger.exception("log_listener_failed")

    def snapshot(self) -> tuple[str, ...]:
        """Return every entry received so far, in receipt order."""
        return tuple(self._entries)

    def subscribe(self, listener: LogListener) -> Callable[[], None]:
        """Register *listener*; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


class LogViewport:
    """Scroll state of the log view.

    While ``pinned`` the view follows new output. Scrolling away from the
    bottom by one unit or more unpins it; scrolling back re-pins it.
    """

    def __init__(self, viewport_height: float = 0.0, line_height: float = 1.0) -> None:
        self.pinned = True
        self.scroll_top = 0.0
        self.content_height = 0.0
        self.viewport_height = viewport_height
        self.line_height = line_height

    @property
    def max_scroll(self) -> float:
        return max(0.0, self.content_height - self.viewport_height)

    def render(self, entries: Sequence[str]) -> float:
        """Lay out *entries* and return the resulting scroll position."""
        self.content_height = len(entries) * self.line_height
        if self.pinned:
            self.scroll_top = self.max_scroll
        return self.scroll_top

    def on_scroll(
        self,
        scroll_top: float,
        content_height: float | None = None,
        viewport_height: float | None = None,
    ) -> bool:
        """Record a user scroll and return the new pinned state.

        Views that measure real geometry pass it along; otherwise the last
        rendered geometry is used.
        """
        if content_height is not None:
            self.content_height = content_height
        if viewport_height is not None:
            self.viewport_height = viewport_height
        self.scroll_top = scroll_top
        self.pinned = abs(self.max_scroll - scroll_top) < 1
        return self.pinned
