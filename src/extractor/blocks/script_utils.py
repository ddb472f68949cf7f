from typing import Optional

import base58
from bitcoin.core.script import CScript
from Crypto.Hash import SHA256

P2PKH_VERSION_MAINNET = b"\x00"
P2SH_VERSION_MAINNET = b"\x05"


def hash160_to_address(hash160: bytes, version_byte: bytes) -> str:
    payload = version_byte + hash160
    checksum = SHA256.new(SHA256.new(payload).digest()).digest()[:4]
    return base58.b58encode(payload + checksum).decode()


def is_p2pkh(script: bytes) -> bool:
    # OP_DUP OP_HASH160 <20 bytes> OP_EQUALVERIFY OP_CHECKSIG
    return (
        len(script) == 25
        and script[:3] == b"\x76\xa9\x14"
        and script[23:] == b"\x88\xac"
    )


def is_p2sh(script: bytes) -> bool:
    return CScript(script).is_p2sh()


def script_to_address(script: bytes) -> Optional[str]:
    """Mainnet address paid by a P2PKH or P2SH scriptPubKey, None for anything else."""
    if is_p2pkh(script):
        return hash160_to_address(script[3:23], P2PKH_VERSION_MAINNET)
    if is_p2sh(script):
        return hash160_to_address(script[2:22], P2SH_VERSION_MAINNET)
    return None


def decode_coinbase_message(script_sig: bytes) -> str:
    return script_sig.decode("utf-8", errors="replace")
