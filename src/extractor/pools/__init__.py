from src.extractor.pools.attribution import PoolAttributionEngine, UNKNOWN_POOL
from src.extractor.pools.directory import PoolDirectory
