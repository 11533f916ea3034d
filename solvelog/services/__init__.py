"""Services layer - parsing, import, cached aggregates."""
from .logparser import LogParser
from .ingestion import BulkImporter
from .aggregation import AggregateQueryService
from .cache import ResultCache
from .workbench import Workbench

__all__ = ["LogParser", "BulkImporter", "AggregateQueryService", "ResultCache", "Workbench"]
