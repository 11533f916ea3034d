"""Log parser module - parsing only, no database operations."""
from .logparser import LogParser
from .schemas import ByteRangeTemplate, JobMetadata

__all__ = ["LogParser", "ByteRangeTemplate", "JobMetadata"]
