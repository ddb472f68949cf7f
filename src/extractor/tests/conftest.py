import pytest

from src.extractor._config import ExtractorSettings
from src.extractor.blocks.script_utils import P2PKH_VERSION_MAINNET, hash160_to_address
from src.extractor.pools.directory import PoolDirectory
from src.extractor.tests.helpers import POOL_X_HASH160


@pytest.fixture
def pool_x_address():
    return hash160_to_address(POOL_X_HASH160, P2PKH_VERSION_MAINNET)


@pytest.fixture
def directory(pool_x_address):
    return PoolDirectory.from_dict({
        "coinbase_tags": {
            "/PoolY/": {"name": "PoolY"},
            "/Foo/": {"name": "Foo Pool"},
            "Foo": {"name": "Loose Foo"},
        },
        "payout_addresses": {
            pool_x_address: {"name": "PoolX"},
        },
    })


@pytest.fixture
def settings(tmp_path):
    return ExtractorSettings(
        OUTPUT_DIR=str(tmp_path / "output"),
        LOG_FILE=str(tmp_path / "logs" / "extractor.log"),
    )
