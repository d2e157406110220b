import pytest

from dutch_auction.core.assets import FungibleLedger, UniqueAssetRegistry
from dutch_auction.core.auction import AuctionRegistry, DutchAuctionHouse
from dutch_auction.core.clock import ManualClock
from dutch_auction.core.config import AuctionHouseConfig
from dutch_auction.core.errors import AssetNotOwned, NotOnSale
from dutch_auction.core.events import AuctionCreated, BidAccepted, EventLog
from dutch_auction.core.storage import StorageManager
from dutch_auction.crypto import bytes_to_hex, derive_address, derive_escrow_address


@pytest.fixture
def temp_data_dir(tmp_path):
    """Create a temporary directory for auction data."""
    data_dir = tmp_path / "auction_data"
    data_dir.mkdir()
    return data_dir


def test_house_state_survives_restart(temp_data_dir):
    """Records and events written by one house are visible to the next."""
    owner = derive_address("owner")
    bob = derive_address("bob")
    config = AuctionHouseConfig(owner=bytes_to_hex(owner), data_dir=temp_data_dir)

    # Ledgers are external collaborators and outlive the house
    assets = UniqueAssetRegistry()
    payments = FungibleLedger()
    assets.mint("artwork-A", owner)
    payments.mint("GOLD", bob, 100)

    # 1. First house: start and settle one auction, leave another live
    house_a = DutchAuctionHouse.from_config(config, clock=ManualClock(1000), payments=payments, assets=assets)
    house_a.approve_escrow(bob, "GOLD", 100)
    assets.mint("artwork-B", owner)
    house_a.start_auction("A", "artwork-A", "GOLD", 10, 1, 300, caller=owner)
    house_a.start_auction("B", "artwork-B", "GOLD", 10, 1, 300, caller=owner)
    house_a.clock.set(1150)
    house_a.bid("A", bob)
    del house_a

    # 2. Second house over the same database and ledgers
    house_b = DutchAuctionHouse.from_config(config, clock=ManualClock(1200), payments=payments, assets=assets)

    assert house_b.get("A").max_price == 10
    assert not house_b.is_live("A")
    assert house_b.is_live("B")
    assert [e.kind for e in house_b.events.events] == ["auction_created", "auction_created", "bid_accepted"]
    assert house_b.events.of_type(BidAccepted)[0].price == 6

    # 3. Continue: B can still be bought
    receipt = house_b.bid("B", bob)
    assert receipt.price == 10 - (9 * 200 // 300)
    assert len(house_b.events) == 4


def test_rejected_create_writes_nothing(temp_data_dir):
    owner = derive_address("owner")
    storage = StorageManager(temp_data_dir)
    registry = AuctionRegistry(
        owner=owner,
        escrow=derive_escrow_address(owner),
        assets=UniqueAssetRegistry(),
        events=EventLog(storage_manager=storage),
        storage_manager=storage,
    )

    with pytest.raises(AssetNotOwned):
        registry.create("A", "missing-asset", "GOLD", 10, 1, 300, 1000, owner)

    assert storage.load_auctions() == []
    assert storage.event_count() == 0


def test_storage_bound_to_owner(temp_data_dir):
    """A database created for one owner cannot be opened by another."""
    alice, mallory = derive_address("alice"), derive_address("mallory")

    AuctionRegistry(
        owner=alice,
        escrow=derive_escrow_address(alice),
        assets=UniqueAssetRegistry(),
        storage_manager=StorageManager(temp_data_dir),
    )

    with pytest.raises(ValueError):
        AuctionRegistry(
            owner=mallory,
            escrow=derive_escrow_address(mallory),
            assets=UniqueAssetRegistry(),
            storage_manager=StorageManager(temp_data_dir),
        )


def test_event_payloads_are_json(temp_data_dir):
    storage = StorageManager(temp_data_dir)
    log = EventLog(storage_manager=storage)
    log.emit(AuctionCreated(
        handle="A", timestamp=1, sell_asset="x", buy_asset_kind="GOLD",
        max_price=2, min_price=1, duration=3,
    ))

    reloaded = EventLog(storage_manager=StorageManager(temp_data_dir))

    assert reloaded.events == log.events
    assert '"kind":"auction_created"' in storage.load_events()[0]


def test_resold_asset_binding_survives_restart(temp_data_dir):
    """
    An asset sold under one id and re-auctioned under another in the same
    second stays bound to the new auction after a reload, whatever the ids.
    """
    owner, bob, carol = derive_address("owner"), derive_address("bob"), derive_address("carol")
    config = AuctionHouseConfig(owner=bytes_to_hex(owner), data_dir=temp_data_dir)

    assets = UniqueAssetRegistry()
    payments = FungibleLedger()
    assets.mint("artwork-A", owner)
    for bidder in (bob, carol):
        payments.mint("GOLD", bidder, 100)

    house_a = DutchAuctionHouse.from_config(config, clock=ManualClock(1000), payments=payments, assets=assets)
    for bidder in (bob, carol):
        house_a.approve_escrow(bidder, "GOLD", 100)

    # "Z" sorts after "A" and shares its start time
    house_a.start_auction("Z", "artwork-A", "GOLD", 10, 1, 300, caller=owner)
    house_a.bid("Z", bob)
    assets.transfer(bob, owner, "artwork-A")
    house_a.start_auction("A", "artwork-A", "GOLD", 10, 1, 300, caller=owner)
    assert house_a.is_live("A") and not house_a.is_live("Z")

    house_b = DutchAuctionHouse.from_config(config, clock=ManualClock(1000), payments=payments, assets=assets)

    assert house_b.is_live("A")
    assert not house_b.is_live("Z")
    with pytest.raises(NotOnSale):
        house_b.bid("Z", carol)
    assert house_b.bid("A", carol).price == 10
    assert assets.is_owned_by("artwork-A", carol)
