from collections import Counter
from typing import Iterable, List, Optional

from loguru import logger

from src.extractor.blocks.models import Block, BlockTransaction
from src.extractor.blocks.script_utils import decode_coinbase_message, script_to_address
from src.extractor.errors import DataIntegrityError
from src.extractor.pools.directory import PoolDirectory

UNKNOWN_POOL = "NA"


class PoolAttributionEngine:
    """Names the mining pool of a block from its coinbase transaction.

    The payout address of the coinbase's first output is checked first; it
    is harder to fake than the coinbase message. Only when the address is
    unknown is the coinbase script searched for a known pool tag.
    """

    def __init__(self, directory: PoolDirectory):
        self.directory = directory
        self.pool_counts = Counter()

    def identify_pool_by_payout_address(self, coinbase: BlockTransaction) -> Optional[str]:
        address = script_to_address(coinbase.vouts[0].script_pubkey)
        if address is None:
            return None
        return self.directory.pool_by_address(address)

    def identify_pool_by_coinbase_tag(self, coinbase: BlockTransaction) -> Optional[str]:
        message = decode_coinbase_message(coinbase.vins[0].script_sig)
        return self.directory.pool_by_coinbase_message(message)

    def resolve(self, block: Block) -> Optional[str]:
        coinbase = block.coinbase
        if coinbase is None:
            raise DataIntegrityError("Block has no transactions", block.block_hash)
        if not coinbase.vins or not coinbase.vouts:
            raise DataIntegrityError("Coinbase has no inputs or no outputs", block.block_hash)

        pool_name = self.identify_pool_by_payout_address(coinbase)
        if pool_name is None:
            pool_name = self.identify_pool_by_coinbase_tag(coinbase)
        return pool_name

    def attribute(self, block: Block) -> str:
        try:
            pool_name = self.resolve(block)
        except DataIntegrityError as e:
            logger.warning("Malformed coinbase", block_hash=block.block_hash,
                           block_height=block.block_height, error=str(e))
            pool_name = None

        if pool_name is None:
            pool_name = UNKNOWN_POOL
        self.pool_counts[pool_name] += 1
        return pool_name

    def attribute_all(self, blocks: Iterable[Block]) -> List[str]:
        return [self.attribute(block) for block in blocks]

    def log_summary(self, top: int = 10):
        total = sum(self.pool_counts.values())
        logger.info("Pool attribution finished", blocks=total, unknown=self.pool_counts[UNKNOWN_POOL])
        for pool_name, count in self.pool_counts.most_common(top):
            logger.info("Pool share", pool=pool_name, blocks=count)
