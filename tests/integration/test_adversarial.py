"""
Adversarial scenarios against the auction house.

Covers:
1. Racing bidders: exactly one sale per auction
2. Resubmission after failure is safe
3. Failures on one auction do not disturb another
4. Attempts to re-escrow or hijack custody
5. Conservation of funds and assets
"""

import threading

import pytest

from dutch_auction.core.auction import DutchAuctionHouse
from dutch_auction.core.clock import ManualClock
from dutch_auction.core.errors import (
    AuctionError,
    DuplicateAuction,
    NotOnSale,
    PaymentFailed,
    Unauthorized,
)
from dutch_auction.crypto import derive_address

BIDDERS = [derive_address(f"bidder-{i}") for i in range(10)]


@pytest.fixture
def owner():
    return derive_address("owner")


@pytest.fixture
def clock():
    return ManualClock(start=1000)


@pytest.fixture
def house(owner, clock):
    house = DutchAuctionHouse(owner=owner, clock=clock)
    for name in ("artwork-A", "artwork-B", "artwork-C"):
        house.assets.mint(name, owner)
    for bidder in BIDDERS:
        house.payments.mint("GOLD", bidder, 1000)
        house.approve_escrow(bidder, "GOLD", 1000)
    return house


class TestRacingBidders:
    """Custody is the only lock: exactly one bidder wins."""

    def test_sequential_race(self, house, owner, clock):
        house.start_auction("A", "artwork-A", "GOLD", 100, 10, 600, caller=owner)
        clock.set(1300)

        outcomes = []
        for bidder in BIDDERS:
            try:
                outcomes.append(house.bid("A", bidder))
            except NotOnSale:
                outcomes.append(None)

        winners = [o for o in outcomes if o is not None]
        assert len(winners) == 1
        assert winners[0].bidder == BIDDERS[0]
        assert outcomes[1:] == [None] * (len(BIDDERS) - 1)

    def test_threaded_race_serialized_by_caller(self, house, owner, clock):
        """The host serializes calls; whichever runs first wins."""
        house.start_auction("A", "artwork-A", "GOLD", 100, 10, 600, caller=owner)
        serializer = threading.Lock()
        results = {}

        def attempt(bidder):
            with serializer:
                try:
                    results[bidder] = house.bid("A", bidder).price
                except AuctionError as e:
                    results[bidder] = e.code.value

        threads = [threading.Thread(target=attempt, args=(b,)) for b in BIDDERS]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        prices = [v for v in results.values() if isinstance(v, int)]
        assert prices == [100]
        assert sorted(v for v in results.values() if isinstance(v, str)) == ["NOT_ON_SALE"] * 9


class TestResubmission:
    """A failed attempt changes nothing; resubmitting is always safe."""

    def test_poor_bidder_retries(self, house, owner, clock):
        poor = derive_address("poor")
        house.payments.mint("GOLD", poor, 40)
        house.approve_escrow(poor, "GOLD", 40)
        house.start_auction("A", "artwork-A", "GOLD", 100, 10, 600, caller=owner)

        for _ in range(3):
            with pytest.raises(PaymentFailed):
                house.bid("A", poor)
        assert house.payments.balance_of("GOLD", poor) == 40
        assert house.is_live("A")

        clock.set(1000 + 420)  # 100 - floor(90 * 420 / 600) = 37
        assert house.bid("A", poor).price == 37


class TestIsolation:
    """Failures on one auction never affect another."""

    def test_independent_auctions(self, house, owner, clock):
        house.start_auction("A", "artwork-A", "GOLD", 100, 10, 100, caller=owner)
        house.start_auction("B", "artwork-B", "GOLD", 50, 5, 1000, caller=owner)

        clock.set(1500)
        with pytest.raises(AuctionError):
            house.bid("A", BIDDERS[0])

        receipt = house.bid("B", BIDDERS[0])
        assert receipt.price == 50 - (45 * 500 // 1000)
        assert house.is_live("A")
        assert not house.is_live("B")


class TestCustodyAttacks:
    """Attempts to sell an asset twice or move it out of escrow."""

    def test_cannot_escrow_same_asset_twice(self, house, owner):
        house.start_auction("A", "artwork-A", "GOLD", 100, 10, 600, caller=owner)

        with pytest.raises(DuplicateAuction):
            house.start_auction("A2", "artwork-A", "GOLD", 1, 0, 600, caller=owner)

    def test_owner_cannot_pull_asset_from_escrow(self, house, owner):
        house.start_auction("A", "artwork-A", "GOLD", 100, 10, 600, caller=owner)

        success, _ = house.assets.transfer(owner, owner, "artwork-A")

        assert not success
        assert house.is_live("A")

    def test_bidder_cannot_start_auction_of_bought_asset(self, house, owner):
        house.start_auction("A", "artwork-A", "GOLD", 100, 10, 600, caller=owner)
        house.bid("A", BIDDERS[0])

        with pytest.raises(Unauthorized):
            house.start_auction("A3", "artwork-A", "GOLD", 1, 0, 600, caller=BIDDERS[0])


class TestConservation:
    """Funds and assets are neither created nor destroyed by settlement."""

    def test_totals_preserved(self, house, owner, clock):
        house.start_auction("A", "artwork-A", "GOLD", 100, 10, 600, caller=owner)
        house.start_auction("B", "artwork-B", "GOLD", 80, 20, 600, caller=owner)
        house.start_auction("C", "artwork-C", "GOLD", 60, 60, 600, caller=owner)

        clock.set(1200)
        house.bid("A", BIDDERS[1])
        house.bid("B", BIDDERS[2])
        with pytest.raises(NotOnSale):
            house.bid("A", BIDDERS[3])
        clock.set(1600)
        house.bid("C", BIDDERS[1])

        accounts = BIDDERS + [owner, house.escrow]
        total = sum(house.payments.balance_of("GOLD", a) for a in accounts)
        assert total == 1000 * len(BIDDERS)
        assert house.payments.balance_of("GOLD", owner) == house.stats()["volume"]["GOLD"]
        assert len(house.assets) == 3
        assert house.assets.assets_of(house.escrow) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
