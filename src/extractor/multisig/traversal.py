from typing import Iterator, Tuple

from loguru import logger

from src.extractor.errors import DataIntegrityError
from src.extractor.graph.base_search import BaseGraphSearch
from src.extractor.graph.models import Output

MULTISIG_LABEL = "MultiSig"

MULTISIG_HEADER = (
    "tx_hash",
    "block_height",
    "input_count",
    "output_count",
    "output_index",
    "value",
    "required_signatures",
    "total_signatures",
    "p2sh",
)


def output_to_row(output: Output) -> Tuple[str, ...]:
    transaction = output.transaction
    return (
        transaction.tx_id,
        str(transaction.block_height),
        str(transaction.input_count),
        str(transaction.output_count),
        str(output.vout_id),
        str(output.value_satoshi),
        str(output.required_signatures),
        str(output.total_signatures),
        "1" if output.is_pay_to_script_hash else "0",
    )


class MultisigTraversal:
    """Walks every multisig output in the transaction graph.

    Raw multisig and P2SH multisig outputs share one label, so a single
    label lookup covers both; the P2SH flag is read per output.
    """

    def __init__(self, graph_search: BaseGraphSearch, label: str = MULTISIG_LABEL):
        self.graph_search = graph_search
        self.label = label
        self.emitted = 0
        self.skipped = 0

    def iterate_outputs(self) -> Iterator[Output]:
        for record in self.graph_search.find_outputs(self.label):
            try:
                output = Output.from_record(record)
            except DataIntegrityError as e:
                self.skipped += 1
                logger.warning("Skipping malformed multisig output", node_id=e.record_id, error=str(e))
                continue
            self.emitted += 1
            yield output

    def extract_rows(self) -> Iterator[Tuple[str, ...]]:
        for output in self.iterate_outputs():
            yield output_to_row(output)
