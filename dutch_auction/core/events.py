"""
Events - typed, append-only audit records emitted by the auction core.

Events are pydantic models so they serialize to JSON for persistence and
for the CLI, and parse back through the `kind` discriminator.
"""

from typing import Annotated, Callable, List, Literal, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from dutch_auction.utils.logger import get_logger

logger = get_logger("events")


# =============================================================================
# Event Records
# =============================================================================


class AuctionEvent(BaseModel):
    """Common fields of every emitted event."""
    model_config = ConfigDict(frozen=True)

    handle: str
    timestamp: int


class AuctionCreated(AuctionEvent):
    """An auction was started and its asset moved into escrow."""
    kind: Literal["auction_created"] = "auction_created"
    sell_asset: str
    buy_asset_kind: str
    max_price: int
    min_price: int
    duration: int


class BidAccepted(AuctionEvent):
    """A bid settled: payment moved to the beneficiary, asset to the bidder."""
    kind: Literal["bid_accepted"] = "bid_accepted"
    bidder: str  # 0x-prefixed hex address
    price: int


Event = Union[AuctionCreated, BidAccepted]

_event_adapter: TypeAdapter = TypeAdapter(
    Annotated[Event, Field(discriminator="kind")]
)

E = TypeVar("E", bound=AuctionEvent)


def parse_event(data: str) -> AuctionEvent:
    """Parse an event from its JSON form."""
    return _event_adapter.validate_json(data)


# =============================================================================
# Event Log
# =============================================================================


class EventLog:
    """
    Append-only event sink.

    Attributes:
        subscribers: Callables invoked with every emitted event
    """

    def __init__(self, storage_manager=None):
        """
        Args:
            storage_manager: Optional StorageManager. None = in-memory only.
        """
        self._events: List[AuctionEvent] = []
        self.subscribers: List[Callable[[AuctionEvent], None]] = []
        self.storage_manager = storage_manager

        if storage_manager:
            self._events.extend(parse_event(raw) for raw in storage_manager.load_events())
            logger.info(f"Loaded {len(self._events)} events from storage")

    def emit(self, event: AuctionEvent) -> None:
        """Persist an event, then publish it."""
        self.persist(event)
        self.publish(event)

    def persist(self, event: AuctionEvent) -> None:
        """
        Write an event to storage, if any.

        The only step of emission that can fail. Callers that have already
        changed state run this before committing to it.
        """
        if self.storage_manager:
            self.storage_manager.save_event(event.kind, event.handle, event.model_dump_json())

    def publish(self, event: AuctionEvent) -> None:
        """Append a persisted event in memory and notify subscribers."""
        self._events.append(event)
        logger.debug(f"Event {event.kind} for auction {event.handle}")
        for subscriber in self.subscribers:
            try:
                subscriber(event)
            except Exception:
                logger.exception(f"Subscriber {subscriber!r} failed on {event.kind} for {event.handle}")

    def subscribe(self, callback: Callable[[AuctionEvent], None]) -> None:
        self.subscribers.append(callback)

    @property
    def events(self) -> Tuple[AuctionEvent, ...]:
        return tuple(self._events)

    def of_type(self, event_type: Type[E]) -> List[E]:
        """All events of a given type, in emission order."""
        return [e for e in self._events if isinstance(e, event_type)]

    def for_auction(self, handle: str) -> List[AuctionEvent]:
        return [e for e in self._events if e.handle == handle]

    def last(self) -> Optional[AuctionEvent]:
        return self._events[-1] if self._events else None

    def __len__(self) -> int:
        return len(self._events)


__all__ = [
    "AuctionEvent",
    "AuctionCreated",
    "BidAccepted",
    "Event",
    "EventLog",
    "parse_event",
]
