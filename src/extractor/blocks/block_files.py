import glob
import os
import struct
from typing import Iterator, Optional

import bitcoin
from bitcoin.core import CBlock, b2lx
from bitcoin.core.serialize import SerializationError
from loguru import logger

from src.extractor.blocks.abstract_source import BlockSource
from src.extractor.blocks.models import Block, BlockTransaction, TxIn, TxOut
from src.extractor.errors import BlockSourceError, ConfigurationError

XOR_KEY_FILE = "xor.dat"

NETWORK_MAGIC = {
    "mainnet": bitcoin.MainParams.MESSAGE_START,
    "testnet": bitcoin.TestNetParams.MESSAGE_START,
}


def xor_bytes(data: bytes, key: bytes) -> bytes:
    if not key or not any(key):
        return data
    repeats = len(data) // len(key) + 1
    keystream = (key * repeats)[:len(data)]
    return (int.from_bytes(data, "big") ^ int.from_bytes(keystream, "big")).to_bytes(len(data), "big")


def convert_block(cblock: CBlock) -> Block:
    block = Block(block_height=None, block_hash=b2lx(cblock.GetHash()))
    for ctx in cblock.vtx:
        block.transactions.append(BlockTransaction(
            tx_id=b2lx(ctx.GetTxid()),
            vins=[TxIn(script_sig=bytes(txin.scriptSig)) for txin in ctx.vin],
            vouts=[TxOut(value_satoshi=txout.nValue, script_pubkey=bytes(txout.scriptPubKey)) for txout in ctx.vout],
        ))
    return block


def iterate_block_records(data: bytes, magic: bytes) -> Iterator[bytes]:
    """Split the contents of one blk*.dat file into raw serialized blocks.

    Each record is <4 byte network magic><4 byte little-endian size><block>.
    Preallocated files end in zero padding, which terminates the scan.
    """
    offset = 0
    while offset + 8 <= len(data):
        record_magic = data[offset:offset + 4]
        if record_magic != magic:
            if any(data[offset:offset + 4]):
                raise BlockSourceError(f"Unexpected record magic at offset {offset}")
            return
        (size,) = struct.unpack("<I", data[offset + 4:offset + 8])
        start = offset + 8
        if start + size > len(data):
            raise BlockSourceError(f"Truncated block record at offset {offset}")
        yield data[start:start + size]
        offset = start + size


class BlockFileSource(BlockSource):
    """Reads blocks straight from Bitcoin Core's blk*.dat files.

    Blocks are yielded in file order, which is the order the node stored them
    in and not necessarily height order.
    """

    def __init__(self, blocks_dir: Optional[str], magic: bytes = bitcoin.MainParams.MESSAGE_START):
        if not blocks_dir or not os.path.isdir(blocks_dir):
            raise ConfigurationError(f"Blocks directory does not exist: {blocks_dir}")
        self.blocks_dir = blocks_dir
        self.magic = magic

    def list_block_files(self):
        return sorted(glob.glob(os.path.join(self.blocks_dir, "blk*.dat")))

    def read_xor_key(self) -> bytes:
        key_path = os.path.join(self.blocks_dir, XOR_KEY_FILE)
        if not os.path.exists(key_path):
            return b""
        with open(key_path, "rb") as f:
            return f.read()

    def get_blocks(self) -> Iterator[Block]:
        xor_key = self.read_xor_key()
        for path in self.list_block_files():
            logger.info("Reading block file", path=path)
            try:
                with open(path, "rb") as f:
                    data = xor_bytes(f.read(), xor_key)
            except OSError as e:
                raise BlockSourceError(f"Cannot read block file {path}: {e}") from e

            for raw_block in iterate_block_records(data, self.magic):
                try:
                    cblock = CBlock.deserialize(raw_block)
                except SerializationError as e:
                    raise BlockSourceError(f"Cannot deserialize block in {path}: {e}") from e
                yield convert_block(cblock)
