import base64
import http.client
import json
from decimal import Decimal
from typing import Iterator, List, Optional

from bitcoin.rpc import JSONRPCError, Proxy
from loguru import logger

from src.extractor._config import ExtractorSettings
from src.extractor.blocks.abstract_source import BlockSource
from src.extractor.blocks.models import Block, BlockTransaction, TxIn, TxOut
from src.extractor.errors import BlockSourceError, ConfigurationError

SATOSHI = Decimal("100000000")


class ExtendedProxy(Proxy):

    def batch_request(self, commands):
        """Send several RPC calls in one JSON-RPC batch and return their results in order."""
        try:
            auth = base64.b64encode(
                f"{self._BaseProxy__url.username}:{self._BaseProxy__url.password}".encode()
            ).decode()

            batch = []
            for i, cmd in enumerate(commands):
                method, *params = cmd
                batch.append({
                    "method": method,
                    "params": params,
                    "jsonrpc": "2.0",
                    "id": i,
                })

            conn = http.client.HTTPConnection(
                self._BaseProxy__url.hostname,
                self._BaseProxy__url.port
            )

            headers = {
                "Authorization": f"Basic {auth}",
                "Content-Type": "application/json",
            }

            conn.request("POST", "/", json.dumps(batch), headers)

            response = conn.getresponse()
            result = json.loads(response.read().decode(), parse_float=Decimal)
            conn.close()
        except (OSError, http.client.HTTPException, ValueError) as e:
            logger.error("Batch request failed", error=str(e))
            raise BlockSourceError(f"Batch request failed: {e}") from e

        if isinstance(result, dict):
            if result.get("error"):
                raise BlockSourceError(f"Error in batch request: {result['error']}")
            return [result.get("result")]

        if not isinstance(result, list):
            raise BlockSourceError(f"Unexpected batch response: {result!r}")

        for r in result:
            if not isinstance(r, dict):
                raise BlockSourceError(f"Unexpected batch response entry: {r!r}")
            if r.get("error") is not None:
                raise BlockSourceError(f"Error in command {r.get('id')}: {r['error']}")

        # servers may answer a batch out of order
        by_id = {r.get("id"): r for r in result}
        try:
            return [by_id[i]["result"] for i in range(len(commands))]
        except KeyError as e:
            raise BlockSourceError(f"Batch response has no result for command {e}") from e


def to_satoshi(value) -> int:
    return int(Decimal(str(value)) * SATOSHI)


def parse_transaction(tx_data: dict) -> BlockTransaction:
    tx = BlockTransaction(tx_id=tx_data["txid"])

    for vin_data in tx_data.get("vin", []):
        if "coinbase" in vin_data:
            script_hex = vin_data["coinbase"]
        else:
            script_hex = vin_data.get("scriptSig", {}).get("hex", "")
        tx.vins.append(TxIn(script_sig=bytes.fromhex(script_hex)))

    for vout_data in tx_data.get("vout", []):
        tx.vouts.append(TxOut(
            value_satoshi=to_satoshi(vout_data["value"]),
            script_pubkey=bytes.fromhex(vout_data["scriptPubKey"].get("hex", "")),
        ))

    return tx


def parse_block_data(block_data: dict) -> Block:
    block = Block(
        block_height=block_data.get("height"),
        block_hash=block_data.get("hash"),
    )
    for tx_data in block_data.get("tx", []):
        block.transactions.append(parse_transaction(tx_data))
    return block


class BitcoinNodeBlockSource(BlockSource):
    """Reads blocks from a Bitcoin Core node over JSON-RPC, in height order."""

    def __init__(self, settings: ExtractorSettings, proxy_factory=None):
        if not settings.BITCOIN_NODE_RPC_URL and proxy_factory is None:
            raise ConfigurationError("BITCOIN_NODE_RPC_URL is required for the node block source")
        self.node_rpc_url = settings.BITCOIN_NODE_RPC_URL
        self.start_height = settings.START_HEIGHT
        self.end_height: Optional[int] = settings.END_HEIGHT
        self.batch_size = settings.BLOCK_BATCH_SIZE
        self.proxy_factory = proxy_factory or (lambda: ExtendedProxy(service_url=self.node_rpc_url))

    def get_current_block_height(self, proxy) -> int:
        try:
            return proxy.getblockcount()
        except (JSONRPCError, OSError) as e:
            logger.error("RPC Provider with Error", error=str(e))
            raise BlockSourceError(f"Cannot read block count: {e}") from e

    def get_blocks_by_height_range(self, proxy, start_height: int, end_height: int) -> List[dict]:
        commands = [["getblockhash", height] for height in range(start_height, end_height + 1)]
        block_hashes = proxy.batch_request(commands)

        commands = [["getblock", block_hash, 2] for block_hash in block_hashes]
        return proxy.batch_request(commands)

    def get_blocks(self) -> Iterator[Block]:
        proxy = self.proxy_factory()
        try:
            end_height = self.end_height
            if end_height is None:
                end_height = self.get_current_block_height(proxy)

            logger.info("Reading blocks from node", start_height=self.start_height, end_height=end_height)
            for batch_start in range(self.start_height, end_height + 1, self.batch_size):
                batch_end = min(batch_start + self.batch_size - 1, end_height)
                for block_data in self.get_blocks_by_height_range(proxy, batch_start, batch_end):
                    try:
                        block = parse_block_data(block_data)
                    except (KeyError, TypeError, ValueError) as e:
                        raise BlockSourceError(f"Unexpected getblock response near height {batch_start}: {e}") from e
                    yield block
                logger.debug("Processed block batch", start_height=batch_start, end_height=batch_end)
        finally:
            proxy.close()
