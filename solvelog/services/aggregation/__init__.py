"""Aggregate query service."""
from .service import AggregateQueryService, encode_payload

__all__ = ["AggregateQueryService", "encode_payload"]
