from abc import ABC, abstractmethod
from typing import Iterator

from src.extractor.blocks.models import Block


class BlockSource(ABC):
    @abstractmethod
    def get_blocks(self) -> Iterator[Block]:
        """Yield blocks in chain order, each with its coinbase first."""

    def close(self):
        ...
