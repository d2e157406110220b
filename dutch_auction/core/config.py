"""
Auction house configuration.

Values come from DUTCH_AUCTION_* environment variables, optionally read
from a .env file, and are validated by pydantic.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Type, TypeVar

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, field_validator

from dutch_auction.crypto import ADDRESS_SIZE, hex_to_bytes

ENV_PREFIX = "DUTCH_AUCTION_"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class HouseSettings(BaseModel):
    """Storage and logging settings, usable without an owner identity"""
    model_config = ConfigDict(frozen=True)

    # Persistence: None = in-memory only
    data_dir: Optional[Path] = None

    # Logging
    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: Path = Path("logs")

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        value = value.upper()
        if value not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return value

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)


class AuctionHouseConfig(HouseSettings):
    """House-wide configuration parameters"""

    # Identities (0x-prefixed hex addresses)
    owner: str
    beneficiary: Optional[str] = None

    @field_validator("owner", "beneficiary")
    @classmethod
    def _check_address(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            raw = hex_to_bytes(value)
        except ValueError:
            raise ValueError(f"not a hex address: {value!r}")
        if len(raw) != ADDRESS_SIZE:
            raise ValueError(f"address must be {ADDRESS_SIZE} bytes, got {len(raw)}")
        return value.lower()

    @property
    def owner_address(self) -> bytes:
        return hex_to_bytes(self.owner)

    @property
    def beneficiary_address(self) -> bytes:
        return hex_to_bytes(self.beneficiary or self.owner)


S = TypeVar("S", bound=HouseSettings)


def load_config(
    env_file: Optional[str] = None,
    model: Type[S] = AuctionHouseConfig,
    **overrides,
) -> S:
    """
    Load configuration from the environment and an optional .env file.

    Process environment variables win over the file; keyword overrides win
    over both.

    Args:
        env_file: Optional path to a .env file
        model: Settings model to build; HouseSettings skips the identities
        **overrides: Field values taking precedence

    Returns:
        An instance of model

    Raises:
        pydantic.ValidationError: on missing or malformed values
    """
    raw = {}
    if env_file:
        raw.update(dotenv_values(env_file))
    raw.update(os.environ)

    values = {
        key[len(ENV_PREFIX):].lower(): value
        for key, value in raw.items()
        if key.startswith(ENV_PREFIX) and value is not None
    }
    values.update({k: v for k, v in overrides.items() if v is not None})

    return model(**values)
