import sys

from loguru import logger
from pydantic import ValidationError

from src.extractor._config import ExtractorSettings, load_environment
from src.extractor.blocks.factory import BlockSourceFactory
from src.extractor.driver import ExtractionDriver
from src.extractor.errors import ConfigurationError, ExtractorError
from src.extractor.graph.graph_search import GraphSearch
from src.extractor.logger import setup_extractor_logger
from src.extractor.pools.directory import SAMPLE_POOLS_FILE, PoolDirectory

PIPELINES = ("multisig", "pools")


def run(settings: ExtractorSettings, pipeline: str):
    driver = ExtractionDriver(settings)

    if pipeline == "multisig":
        with GraphSearch(settings) as graph_search:
            return driver.run_multisig(graph_search)

    if not settings.POOLS_FILE_PATH:
        raise ConfigurationError(
            f"POOLS_FILE_PATH is required for the pools pipeline (a small sample ships at {SAMPLE_POOLS_FILE})"
        )
    # the directory is loaded before any block is read
    directory = PoolDirectory.from_file(settings.POOLS_FILE_PATH)
    block_source = BlockSourceFactory.create_block_source(settings)
    return driver.run_pools(block_source, directory)


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 2 or argv[1] not in PIPELINES:
        print("Usage: python -m src.extractor.cli <environment> <multisig|pools>")
        return 1

    environment, pipeline = argv
    try:
        load_environment(environment)
        settings = ExtractorSettings(NETWORK=environment)
    except (ValueError, ValidationError) as e:
        logger.error("Invalid configuration", error=str(e))
        return 1

    setup_extractor_logger(settings, pipeline)

    try:
        report = run(settings, pipeline)
    except ExtractorError as e:
        logger.error("Extraction aborted", pipeline=pipeline, error=str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Extraction interrupted")
        return 1

    logger.info("Extraction completed", pipeline=report.pipeline, output_path=report.output_path,
                written=report.records_written, skipped=report.records_skipped,
                unknown=report.records_unknown)
    return 0


if __name__ == "__main__":
    sys.exit(main())
