import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings


def load_environment(env: str):
    if env == 'mainnet':
        dotenv_path = os.path.abspath('../env/.env.extractor.mainnet')
    elif env == 'testnet':
        dotenv_path = os.path.abspath('../env/.env.extractor.testnet')
    else:
        raise ValueError(f"Unknown environment: {env}")

    if os.path.exists(dotenv_path):
        load_dotenv(dotenv_path=dotenv_path)
    else:
        load_dotenv()


class ExtractorSettings(BaseSettings):
    GRAPH_DATABASE_URL: str = 'bolt://localhost:7687'
    GRAPH_DATABASE_USER: str = ''
    GRAPH_DATABASE_PASSWORD: str = ''
    GRAPH_FETCH_SIZE: int = 1000

    MULTISIG_LABEL: str = 'MultiSig'
    TRANSACTION_LABEL: str = 'Transaction'
    OUTPUT_RELATIONSHIP: str = 'OUTPUT'

    NETWORK: str = 'mainnet'  # mainnet | testnet

    BITCOIN_NODE_RPC_URL: Optional[str] = None
    BLOCK_SOURCE: str = 'node'  # node | files
    BLOCKS_DIR: Optional[str] = None
    START_HEIGHT: int = 0
    END_HEIGHT: Optional[int] = None  # None means the current tip
    BLOCK_BATCH_SIZE: int = 100

    POOLS_FILE_PATH: Optional[str] = None  # required by the pools pipeline

    OUTPUT_DIR: str = 'output'
    MULTISIG_OUTPUT_FILE_NAME: str = 'multisig.csv'
    POOLS_OUTPUT_FILE_NAME: str = 'known-pools.txt'
    CSV_SEPARATOR: str = ';'
    CSV_HEADER: bool = False

    LOG_LEVEL: str = 'DEBUG'
    LOG_FILE: str = '../logs/extractor.log'

    model_config = ConfigDict(
        extra='ignore',
        frozen=True
    )

    @field_validator('CSV_SEPARATOR')
    @classmethod
    def check_separator(cls, value: str) -> str:
        if len(value) != 1 or value in (',', '\n', '\r'):
            raise ValueError(f"CSV_SEPARATOR must be a single non-comma character, got {value!r}")
        return value

    @field_validator('NETWORK')
    @classmethod
    def check_network(cls, value: str) -> str:
        if value not in ('mainnet', 'testnet'):
            raise ValueError(f"Unsupported network: {value}")
        return value

    @field_validator('BLOCK_SOURCE')
    @classmethod
    def check_block_source(cls, value: str) -> str:
        if value not in ('node', 'files'):
            raise ValueError(f"Unsupported block source: {value}")
        return value

    @field_validator('BLOCK_BATCH_SIZE', 'GRAPH_FETCH_SIZE')
    @classmethod
    def check_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be a positive integer")
        return value

    @property
    def multisig_output_path(self) -> str:
        return os.path.join(self.OUTPUT_DIR, self.MULTISIG_OUTPUT_FILE_NAME)

    @property
    def pools_output_path(self) -> str:
        return os.path.join(self.OUTPUT_DIR, self.POOLS_OUTPUT_FILE_NAME)
