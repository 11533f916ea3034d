"""Log import service."""
from .service import BulkImporter

__all__ = ["BulkImporter"]
