from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, Optional


class BaseGraphSearch(ABC):
    @abstractmethod
    def find_outputs(self, label: str) -> Iterator[Dict[str, Any]]:
        """Lazily yield every output node carrying `label`.

        Each record is a dict with the keys ``id`` (internal node id),
        ``output`` (the node's properties) and ``transaction`` (the owning
        transaction's properties, or None when it cannot be resolved).
        Records come back in a stable order for an unchanged graph.
        """

    def close(self):
        """Close the connection to the graph database."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def node_properties(value: Optional[Any]) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    return dict(value)
