from dataclasses import dataclass
from typing import Any, Dict, Optional

from src.extractor.errors import DataIntegrityError

P2SH_SCRIPT_TYPE = "scripthash"


def require_int(properties: Dict[str, Any], key: str, record_id=None) -> int:
    value = properties.get(key)
    # bool is an int subclass but never a valid count or amount
    if isinstance(value, bool) or not isinstance(value, int):
        raise DataIntegrityError(f"Missing or non-integer property '{key}'", record_id)
    return value


@dataclass(frozen=True)
class Transaction:
    tx_id: str
    block_height: int
    input_count: int
    output_count: int

    @classmethod
    def from_properties(cls, properties: Optional[Dict[str, Any]], record_id=None) -> "Transaction":
        if properties is None:
            raise DataIntegrityError("Output has no owning transaction", record_id)

        tx_id = properties.get("tx_id")
        if not isinstance(tx_id, str) or not tx_id:
            raise DataIntegrityError("Missing property 'tx_id'", record_id)

        return cls(
            tx_id=tx_id,
            block_height=require_int(properties, "block_height", record_id),
            input_count=require_int(properties, "input_count", record_id),
            output_count=require_int(properties, "output_count", record_id),
        )


@dataclass(frozen=True)
class Output:
    transaction: Transaction
    vout_id: int
    value_satoshi: int
    required_signatures: int
    total_signatures: int
    script_type: str

    @property
    def is_pay_to_script_hash(self) -> bool:
        return self.script_type == P2SH_SCRIPT_TYPE

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Output":
        record_id = record.get("id")
        properties = record.get("output")
        if properties is None:
            raise DataIntegrityError("Output node has no properties", record_id)

        transaction = Transaction.from_properties(record.get("transaction"), record_id)
        required = require_int(properties, "required_signatures", record_id)
        total = require_int(properties, "total_signatures", record_id)
        if required < 1 or required > total:
            raise DataIntegrityError(f"Invalid signature counts {required}-of-{total}", record_id)

        return cls(
            transaction=transaction,
            vout_id=require_int(properties, "vout_id", record_id),
            value_satoshi=require_int(properties, "value_satoshi", record_id),
            required_signatures=required,
            total_signatures=total,
            script_type=properties.get("script_type") or "",
        )
