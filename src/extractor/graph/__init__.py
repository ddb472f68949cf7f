from src.extractor.graph.base_search import BaseGraphSearch
from src.extractor.graph.graph_search import GraphSearch
