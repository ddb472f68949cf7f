import re
from typing import Any, Dict, Iterator

from loguru import logger
from neo4j import READ_ACCESS, GraphDatabase
from neo4j.exceptions import DriverError, Neo4jError

from src.extractor._config import ExtractorSettings
from src.extractor.errors import ConfigurationError, GraphSourceError
from src.extractor.graph.base_search import BaseGraphSearch, node_properties

IDENTIFIER_REGEX = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def check_identifier(name: str) -> str:
    # labels and relationship types cannot be query parameters in Cypher
    if not IDENTIFIER_REGEX.match(name or ""):
        raise ConfigurationError(f"Invalid graph identifier: {name!r}")
    return name


class GraphSearch(BaseGraphSearch):

    def __init__(self, settings: ExtractorSettings, driver=None):
        self.transaction_label = check_identifier(settings.TRANSACTION_LABEL)
        self.output_relationship = check_identifier(settings.OUTPUT_RELATIONSHIP)
        if driver is not None:
            self.driver = driver
            return

        logger.info("Connecting to graph database", url=settings.GRAPH_DATABASE_URL)
        try:
            self.driver = GraphDatabase.driver(
                settings.GRAPH_DATABASE_URL,
                auth=(settings.GRAPH_DATABASE_USER, settings.GRAPH_DATABASE_PASSWORD),
                connection_timeout=60,
                max_connection_lifetime=60,
                max_connection_pool_size=128,
                fetch_size=settings.GRAPH_FETCH_SIZE,
                encrypted=False,
            )
        except (ValueError, DriverError) as e:
            raise ConfigurationError(f"Invalid graph database settings: {e}") from e

    def build_outputs_query(self, label: str) -> str:
        label = check_identifier(label)
        return (
            f"MATCH (o:`{label}`) "
            f"OPTIONAL MATCH (t:`{self.transaction_label}`)-[:`{self.output_relationship}`]->(o) "
            "RETURN id(o) AS id, o AS output, t AS transaction "
            "ORDER BY id(o)"
        )

    def find_outputs(self, label: str) -> Iterator[Dict[str, Any]]:
        query = self.build_outputs_query(label)
        # the session stays open while the caller iterates and is released
        # when the generator is exhausted or closed
        with self.driver.session(default_access_mode=READ_ACCESS) as session:
            try:
                result = session.run(query)
                for record in result:
                    yield {
                        "id": record["id"],
                        "output": node_properties(record["output"]),
                        "transaction": node_properties(record["transaction"]),
                    }
            except (Neo4jError, DriverError) as e:
                logger.error("Failed to execute query", error=str(e), query=query)
                raise GraphSourceError("Failed to query the transaction graph") from e

    def close(self):
        self.driver.close()
