"""
Unit tests for events and the clock.
"""

import pytest
from pydantic import ValidationError

from dutch_auction.core.clock import ManualClock, SystemClock
from dutch_auction.core.events import (
    AuctionCreated,
    BidAccepted,
    EventLog,
    parse_event,
)


def created(handle="A", timestamp=1000):
    return AuctionCreated(
        handle=handle,
        timestamp=timestamp,
        sell_asset="artwork-A",
        buy_asset_kind="GOLD",
        max_price=10,
        min_price=1,
        duration=300,
    )


class TestEventRecords:
    """Tests for typed event records."""

    def test_events_are_frozen(self):
        event = created()
        with pytest.raises(ValidationError):
            event.handle = "B"

    def test_json_roundtrip_keeps_type(self):
        accepted = BidAccepted(handle="A", timestamp=1150, bidder="0x" + "ab" * 20, price=6)

        parsed = parse_event(accepted.model_dump_json())

        assert isinstance(parsed, BidAccepted)
        assert parsed == accepted

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            parse_event('{"kind": "auction_cancelled", "handle": "A", "timestamp": 1}')


class TestEventLog:
    """Tests for the append-only sink."""

    def test_emit_appends_in_order(self):
        log = EventLog()
        first = created("A")
        second = BidAccepted(handle="A", timestamp=1150, bidder="0x00", price=6)

        log.emit(first)
        log.emit(second)

        assert log.events == (first, second)
        assert log.last() == second
        assert len(log) == 2

    def test_events_view_is_immutable(self):
        log = EventLog()
        log.emit(created())
        assert isinstance(log.events, tuple)

    def test_filters(self):
        log = EventLog()
        log.emit(created("A"))
        log.emit(created("B"))
        log.emit(BidAccepted(handle="A", timestamp=1150, bidder="0x00", price=6))

        assert len(log.of_type(AuctionCreated)) == 2
        assert [e.kind for e in log.for_auction("A")] == ["auction_created", "bid_accepted"]

    def test_subscribers_notified(self):
        log = EventLog()
        seen = []
        log.subscribe(seen.append)

        log.emit(created())

        assert seen == [created()]

    def test_failing_subscriber_is_isolated(self):
        log = EventLog()
        seen = []

        def broken(event):
            raise RuntimeError("subscriber bug")

        log.subscribe(broken)
        log.subscribe(seen.append)
        log.emit(created())

        assert seen == [created()]
        assert len(log) == 1

    def test_failed_persist_publishes_nothing(self):
        class FailingStore:
            def load_events(self):
                return []

            def save_event(self, kind, handle, payload):
                raise OSError("disk full")

        log = EventLog(storage_manager=FailingStore())
        seen = []
        log.subscribe(seen.append)

        with pytest.raises(OSError):
            log.emit(created())

        assert len(log) == 0
        assert seen == []

    def test_empty_log(self):
        log = EventLog()
        assert log.last() is None
        assert len(log) == 0


class TestClock:
    """Tests for time sources."""

    def test_manual_clock_advance(self):
        clock = ManualClock(start=1000)
        assert clock.advance(150) == 1150
        assert clock.now() == 1150

    def test_manual_clock_refuses_backwards(self):
        clock = ManualClock(start=1000)
        with pytest.raises(ValueError):
            clock.set(999)
        with pytest.raises(ValueError):
            clock.advance(-1)
        assert clock.now() == 1000

    def test_system_clock_non_decreasing(self):
        readings = iter([1000.7, 1005.2, 1003.9, 1006.0])
        clock = SystemClock(source=lambda: next(readings))

        assert [clock.now() for _ in range(4)] == [1000, 1005, 1005, 1006]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
