"""Unit tests for the append-only log and viewport pinning."""

from __future__ import annotations

from mrbwriter.core.log_buffer import LogBuffer, LogViewport


class TestLogBuffer:
    def test_snapshot_keeps_receipt_order(self):
        log = LogBuffer()
        for entry in ["a", "b", "c"]:
            log.append(entry)

        assert log.snapshot() == ("a", "b", "c")
        assert len(log) == 3

    def test_listener_receives_entry_and_latest_snapshot(self):
        log = LogBuffer()
        seen = []
        log.subscribe(lambda entry, snap: seen.append((entry, snap)))

        log.append("one")
        log.append("two")

        assert seen == [("one", ("one",)), ("two", ("one", "two"))]

    def test_unsubscribe(self):
        log = LogBuffer()
        seen = []
        unsubscribe = log.subscribe(lambda entry, snap: seen.append(entry))

        log.append("one")
        unsubscribe()
        log.append("two")

        assert seen == ["one"]

    def test_broken_listener_does_not_stop_others(self):
        log = LogBuffer()
        seen = []

        def broken(entry, snap):
            raise RuntimeError("view gone")

        log.subscribe(broken)
        log.subscribe(lambda entry, snap: seen.append(entry))
        log.append("x")

        assert seen == ["x"]


class TestLogViewport:
    def test_pinned_viewport_follows_each_render(self):
        viewport = LogViewport(viewport_height=3)
        entries: list[str] = []

        for i in range(10):
            entries.append(f"line {i}")
            top = viewport.render(entries)
            assert top == viewport.max_scroll == max(0, len(entries) - 3)

    def test_scrolling_up_unpins(self):
        viewport = LogViewport(viewport_height=3)
        entries = [f"line {i}" for i in range(10)]
        viewport.render(entries)

        assert viewport.on_scroll(viewport.max_scroll - 2) is False

        entries.append("new")
        top = viewport.render(entries)
        assert top == 5
        assert viewport.max_scroll == 8

    def test_returning_to_bottom_repins(self):
        viewport = LogViewport(viewport_height=3)
        entries = [f"line {i}" for i in range(10)]
        viewport.render(entries)
        viewport.on_scroll(0)

        assert viewport.on_scroll(viewport.max_scroll - 0.5) is True

        entries.append("new")
        assert viewport.render(entries) == viewport.max_scroll

    def test_exactly_one_unit_away_is_not_pinned(self):
        viewport = LogViewport(viewport_height=3)
        viewport.render([str(i) for i in range(10)])

        assert viewport.on_scroll(viewport.max_scroll - 1) is False

    def test_measured_geometry_overrides_rendered(self):
        viewport = LogViewport()

        pinned = viewport.on_scroll(480.4, content_height=800, viewport_height=320)

        assert pinned is True
        assert viewport.max_scroll == 480
