import json
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from src.extractor.errors import PoolDirectoryError

# a handful of well-known pools, for local runs and tests; production runs
# point POOLS_FILE_PATH at the full Blockchain.info known-pools file
SAMPLE_POOLS_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "pools.sample.json")


class PoolEntry(BaseModel):
    model_config = ConfigDict(extra='ignore')

    name: str

    @field_validator('name')
    @classmethod
    def check_name(cls, value: str) -> str:
        # one pool name per output line
        if "\n" in value or "\r" in value:
            raise ValueError("Pool name must not contain line breaks")
        return value


class PoolDirectoryFile(BaseModel):
    """Layout of Blockchain.info's known pools file (pools.json)."""
    model_config = ConfigDict(extra='ignore')

    coinbase_tags: Dict[str, PoolEntry]
    payout_addresses: Dict[str, PoolEntry]


@dataclass(frozen=True)
class PoolDirectory:
    """Known payout addresses and coinbase tags of mining pools.

    Payout addresses are matched exactly. Coinbase tags are matched as
    case-insensitive substrings in file order, so when several tags occur in
    one coinbase the one listed first in the file wins.
    """
    payout_addresses: Mapping[str, str]
    coinbase_tags: Tuple[Tuple[str, str], ...]
    lowered_tags: Tuple[Tuple[str, str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "lowered_tags", tuple((tag.lower(), name) for tag, name in self.coinbase_tags))

    def pool_by_address(self, address: str) -> Optional[str]:
        return self.payout_addresses.get(address)

    def pool_by_coinbase_message(self, message: str) -> Optional[str]:
        message = message.lower()
        for tag, name in self.lowered_tags:
            if tag in message:
                return name
        return None

    @classmethod
    def from_dict(cls, data) -> "PoolDirectory":
        try:
            parsed = PoolDirectoryFile.model_validate(data)
        except ValidationError as e:
            raise PoolDirectoryError(f"Malformed pool directory: {e}") from e

        if "" in parsed.coinbase_tags or "" in parsed.payout_addresses:
            raise PoolDirectoryError("Malformed pool directory: empty tag or address key")

        return cls(
            payout_addresses=MappingProxyType(
                {address: entry.name for address, entry in parsed.payout_addresses.items()}
            ),
            coinbase_tags=tuple((tag, entry.name) for tag, entry in parsed.coinbase_tags.items()),
        )

    @classmethod
    def from_file(cls, path: str) -> "PoolDirectory":
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise PoolDirectoryError(f"Cannot read pool directory {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise PoolDirectoryError(f"Pool directory {path} is not valid JSON: {e}") from e

        directory = cls.from_dict(data)
        logger.info("Loaded pool directory", path=path,
                    payout_addresses=len(directory.payout_addresses),
                    coinbase_tags=len(directory.coinbase_tags))
        return directory
