class ExtractorError(Exception):
    """Base class for every error raised by the extractor."""


class ConfigurationError(ExtractorError):
    """Raised before any extraction starts when the run cannot be configured."""


class PoolDirectoryError(ConfigurationError):
    pass


class DataIntegrityError(ExtractorError):
    """A single record (graph node, coinbase) is malformed.

    Extractors catch this, log it and move on to the next record.
    """

    def __init__(self, message: str, record_id=None):
        super().__init__(message)
        self.record_id = record_id


class SinkError(ExtractorError):
    """An output file could not be opened, written or closed."""


class BlockSourceError(ExtractorError):
    pass


class GraphSourceError(ExtractorError):
    """The graph database could not be queried."""
