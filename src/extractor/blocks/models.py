from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class TxIn:
    script_sig: bytes


@dataclass
class TxOut:
    value_satoshi: int
    script_pubkey: bytes


@dataclass
class BlockTransaction:
    tx_id: str
    vins: List[TxIn] = field(default_factory=list)
    vouts: List[TxOut] = field(default_factory=list)


@dataclass
class Block:
    block_height: Optional[int]
    block_hash: Optional[str]
    transactions: List[BlockTransaction] = field(default_factory=list)

    @property
    def coinbase(self) -> Optional[BlockTransaction]:
        # the coinbase transaction is always the first one in a block
        if not self.transactions:
            return None
        return self.transactions[0]
