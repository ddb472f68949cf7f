from src.extractor._config import ExtractorSettings
from src.extractor.blocks.abstract_source import BlockSource
from src.extractor.blocks.bitcoin_node import BitcoinNodeBlockSource
from src.extractor.blocks.block_files import NETWORK_MAGIC, BlockFileSource


class BlockSourceFactory:
    @classmethod
    def create_block_source(cls, settings: ExtractorSettings) -> BlockSource:
        if settings.BLOCK_SOURCE == 'files':
            return BlockFileSource(settings.BLOCKS_DIR, magic=NETWORK_MAGIC[settings.NETWORK])
        return BitcoinNodeBlockSource(settings)
