from dataclasses import dataclass

from loguru import logger

from src.extractor._config import ExtractorSettings
from src.extractor.blocks.abstract_source import BlockSource
from src.extractor.graph.base_search import BaseGraphSearch
from src.extractor.multisig.traversal import MULTISIG_HEADER, MultisigTraversal
from src.extractor.pools.attribution import UNKNOWN_POOL, PoolAttributionEngine
from src.extractor.pools.directory import PoolDirectory
from src.extractor.sink.writers import DelimitedFileWriter, LineFileWriter


@dataclass
class ExtractionReport:
    pipeline: str
    output_path: str
    records_written: int = 0
    records_skipped: int = 0
    records_unknown: int = 0


class ExtractionDriver:
    """Runs one extraction pipeline and forwards its rows to an output file.

    Per-record faults are absorbed by the extractors. Configuration, source
    and sink errors propagate to the caller and end the run.
    """

    def __init__(self, settings: ExtractorSettings):
        self.settings = settings

    def run_multisig(self, graph_search: BaseGraphSearch) -> ExtractionReport:
        output_path = self.settings.multisig_output_path
        logger.info("Extracting multisig outputs", label=self.settings.MULTISIG_LABEL, output_path=output_path)

        traversal = MultisigTraversal(graph_search, self.settings.MULTISIG_LABEL)
        rows = traversal.extract_rows()
        try:
            with DelimitedFileWriter(output_path, self.settings.CSV_SEPARATOR) as writer:
                if self.settings.CSV_HEADER:
                    writer.write_row(MULTISIG_HEADER)
                writer.write_rows(rows)
        finally:
            # releases the graph session when writing stops early
            rows.close()

        logger.info("Multisig extraction finished", outputs=traversal.emitted, skipped=traversal.skipped)
        return ExtractionReport(
            pipeline="multisig",
            output_path=output_path,
            records_written=traversal.emitted,
            records_skipped=traversal.skipped,
        )

    def run_pools(self, block_source: BlockSource, directory: PoolDirectory) -> ExtractionReport:
        output_path = self.settings.pools_output_path
        logger.info("Attributing blocks to pools", output_path=output_path)

        engine = PoolAttributionEngine(directory)
        blocks = block_source.get_blocks()
        try:
            with LineFileWriter(output_path) as writer:
                for block in blocks:
                    writer.write_line(engine.attribute(block))
        finally:
            blocks.close()
            block_source.close()

        engine.log_summary()
        return ExtractionReport(
            pipeline="pools",
            output_path=output_path,
            records_written=sum(engine.pool_counts.values()),
            records_unknown=engine.pool_counts[UNKNOWN_POOL],
        )
