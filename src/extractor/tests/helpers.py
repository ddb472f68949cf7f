from src.extractor.blocks.abstract_source import BlockSource
from src.extractor.blocks.models import Block, BlockTransaction, TxIn, TxOut
from src.extractor.graph.base_search import BaseGraphSearch

POOL_X_HASH160 = bytes.fromhex("62e907b15cbf27d5425399ebf6f0fb50ebb88f18")
OTHER_HASH160 = bytes(range(20))


def p2pkh_script(hash160: bytes) -> bytes:
    return b"\x76\xa9\x14" + hash160 + b"\x88\xac"


def p2sh_script(hash160: bytes) -> bytes:
    return b"\xa9\x14" + hash160 + b"\x87"


def make_block(script_sig: bytes, script_pubkey: bytes, block_height=None, extra_txs=0) -> Block:
    coinbase = BlockTransaction(
        tx_id="00" * 32,
        vins=[TxIn(script_sig=script_sig)],
        vouts=[TxOut(value_satoshi=5000000000, script_pubkey=script_pubkey)],
    )
    others = [BlockTransaction(tx_id=f"{i:064x}") for i in range(1, extra_txs + 1)]
    return Block(block_height=block_height, block_hash=f"hash-{block_height}", transactions=[coinbase] + others)


class FakeGraphSearch(BaseGraphSearch):
    def __init__(self, records):
        self.records = records
        self.labels = []
        self.closed = False

    def find_outputs(self, label):
        self.labels.append(label)
        for record in self.records:
            yield dict(record)

    def close(self):
        self.closed = True


class FakeBlockSource(BlockSource):
    def __init__(self, blocks):
        self.blocks = blocks
        self.closed = False

    def get_blocks(self):
        yield from self.blocks

    def close(self):
        self.closed = True


def multisig_record(node_id, tx_id="ab" * 32, vout_id=0, required=2, total=3, script_type="multisig",
                    value=100000, block_height=300000):
    return {
        "id": node_id,
        "output": {
            "vout_id": vout_id,
            "value_satoshi": value,
            "required_signatures": required,
            "total_signatures": total,
            "script_type": script_type,
        },
        "transaction": {
            "tx_id": tx_id,
            "block_height": block_height,
            "input_count": 1,
            "output_count": 2,
        },
    }


