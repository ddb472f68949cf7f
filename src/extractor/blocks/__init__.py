from src.extractor.blocks.abstract_source import BlockSource
from src.extractor.blocks.bitcoin_node import BitcoinNodeBlockSource
from src.extractor.blocks.block_files import BlockFileSource
from src.extractor.blocks.models import Block, BlockTransaction, TxIn, TxOut
from src.extractor.blocks.factory import BlockSourceFactory
