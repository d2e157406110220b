"""
Dutch Auction CLI - command line interface for the auction house.

Main entry point for all CLI commands.
"""

import json
import logging

import click
from pydantic import ValidationError

from dutch_auction.utils.logger import setup_logging


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--env-file", default=None, type=click.Path(dir_okay=False), help="Read DUTCH_AUCTION_* settings from a .env file")
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx, debug, env_file):
    """Descending-price auctions of unique assets"""
    level = logging.DEBUG if debug else logging.WARNING
    setup_logging(level=level)

    ctx.ensure_object(dict)
    ctx.obj["env_file"] = env_file
    ctx.obj["debug"] = debug


# =============================================================================
# Pricing Commands
# =============================================================================


def _record(max_price, min_price, duration, start):
    from dutch_auction.core.auction import AuctionRecord

    if max_price < min_price:
        raise click.BadParameter(f"--max {max_price} is below --min {min_price}")
    if duration <= 0:
        raise click.BadParameter("--duration must be positive")

    return AuctionRecord(
        auction_id="cli",
        sell_asset="cli",
        buy_asset_kind="units",
        max_price=max_price,
        min_price=min_price,
        duration=duration,
        started_at=start,
        seller=bytes(20),
        beneficiary=bytes(20),
    )


@cli.command("price")
@click.option("--max", "max_price", type=click.IntRange(min=0), required=True, help="Starting price")
@click.option("--min", "min_price", type=click.IntRange(min=0), required=True, help="Price at the deadline")
@click.option("--duration", type=int, required=True, help="Auction length in seconds")
@click.option("--start", type=click.IntRange(min=0), default=0, help="Start timestamp")
@click.option("--at", "at", type=click.IntRange(min=0), required=True, help="Timestamp to price at")
def price(max_price, min_price, duration, start, at):
    """Compute the price of an auction at a given time"""
    from dutch_auction.core.auction import current_price
    from dutch_auction.core.errors import Expired

    record = _record(max_price, min_price, duration, start)
    try:
        click.echo(current_price(record, at))
    except Expired as e:
        click.echo(e.code.value)
        raise SystemExit(1)


@cli.command("schedule")
@click.option("--max", "max_price", type=click.IntRange(min=0), required=True, help="Starting price")
@click.option("--min", "min_price", type=click.IntRange(min=0), required=True, help="Price at the deadline")
@click.option("--duration", type=int, required=True, help="Auction length in seconds")
@click.option("--start", type=click.IntRange(min=0), default=0, help="Start timestamp")
@click.option("--step", type=click.IntRange(min=1), default=60, help="Seconds between rows")
def schedule(max_price, min_price, duration, start, step):
    """Print the price table of an auction"""
    from dutch_auction.core.auction import price_schedule

    record = _record(max_price, min_price, duration, start)
    click.echo(f"{'time':>12}  {'elapsed':>8}  {'price':>10}")
    for timestamp, value in price_schedule(record, step):
        click.echo(f"{timestamp:>12}  {timestamp - start:>8}  {value:>10}")


# =============================================================================
# Storage Commands
# =============================================================================


@cli.command("history")
@click.option("--data-dir", default=None, help="Auction database directory (overrides config)")
@click.pass_context
def history(ctx, data_dir):
    """Show stored auctions and events"""
    from dutch_auction.core.config import HouseSettings, load_config
    from dutch_auction.core.storage import StorageManager

    try:
        settings = load_config(ctx.obj["env_file"], model=HouseSettings, data_dir=data_dir)
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration:\n{e}")

    if not ctx.obj["debug"]:
        setup_logging(settings.logging_level, settings.log_dir, settings.log_to_file)

    if settings.data_dir is None:
        raise click.ClickException("No data directory configured (set DUTCH_AUCTION_DATA_DIR or --data-dir)")

    storage = StorageManager(settings.data_dir)
    records = storage.load_auctions()
    click.echo(f"Auctions: {len(records)}")
    for record in records:
        click.echo(json.dumps(record.to_dict(), sort_keys=True))

    events = storage.load_events()
    click.echo(f"Events: {len(events)}")
    for event in events:
        click.echo(event)
    storage.close()


# =============================================================================
# Demo Command
# =============================================================================


@cli.command("demo")
def demo():
    """Replay the reference auction scenarios on in-memory ledgers"""
    from dutch_auction.core.auction import DutchAuctionHouse, current_price
    from dutch_auction.core.clock import ManualClock
    from dutch_auction.core.errors import AuctionError
    from dutch_auction.crypto import derive_address, bytes_to_hex

    click.echo("=" * 60)
    click.echo("  DUTCH AUCTION HOUSE - DEMO")
    click.echo("=" * 60)
    click.echo()

    owner = derive_address("owner")
    bob = derive_address("bob")
    carol = derive_address("carol")
    mallory = derive_address("mallory")

    clock = ManualClock(start=1000)
    house = DutchAuctionHouse(owner=owner, clock=clock)
    house.assets.mint("artwork-A", owner)
    house.payments.mint("GOLD", bob, 100)
    house.payments.mint("GOLD", carol, 100)
    for bidder in (bob, carol):
        house.approve_escrow(bidder, "GOLD", 100)

    click.echo(f"📦 Owner:  {bytes_to_hex(owner)}")
    click.echo(f"   Escrow: {bytes_to_hex(house.escrow)}")
    click.echo()

    def attempt(label, fn):
        try:
            result = fn()
            click.echo(f"  ✓ {label}: {result}")
        except AuctionError as e:
            click.echo(f"  ✗ {label}: {e.code.value}")

    click.echo("🔒 Non-owner tries to start an auction...")
    attempt("mallory start", lambda: house.start_auction("A", "artwork-A", "GOLD", 10, 1, 300, caller=mallory))
    click.echo("🔒 Owner passes an inverted price band...")
    attempt("owner start max=1 min=10", lambda: house.start_auction("A", "artwork-A", "GOLD", 1, 10, 300, caller=owner))
    click.echo()

    click.echo("🏛️  Owner starts auction A (10 -> 1 GOLD over 300s)...")
    attempt("owner start", lambda: house.start_auction("A", "artwork-A", "GOLD", 10, 1, 300, caller=owner))
    for t in (1000, 1150, 1300):
        click.echo(f"  price at t={t}: {current_price(house.get('A'), t)}")
    click.echo()

    click.echo("💸 Bob bids at t=1150...")
    clock.set(1150)
    attempt("bob bid", lambda: house.bid("A", bob).price)
    click.echo(f"  Bob balance: {house.payments.balance_of('GOLD', bob)} GOLD")
    click.echo(f"  artwork-A owned by bob: {house.assets.is_owned_by('artwork-A', bob)}")
    attempt("carol bid", lambda: house.bid("A", carol).price)
    click.echo()

    click.echo("⏰ Auction B expires before anyone bids...")
    house.assets.mint("artwork-B", owner)
    attempt("owner start B", lambda: house.start_auction("B", "artwork-B", "GOLD", 10, 1, 300, caller=owner))
    clock.set(1150 + 400)
    attempt("carol bid B", lambda: house.bid("B", carol).price)
    click.echo(f"  artwork-B still in escrow: {house.is_live('B')}")
    click.echo()

    click.echo("📊 Stats")
    for key, value in house.stats().items():
        click.echo(f"  {key}: {value}")


if __name__ == "__main__":
    cli()
