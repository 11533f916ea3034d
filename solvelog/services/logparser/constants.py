"""Patterns recognising the solver log layout.

Each pattern is compiled on first use and then shared, read-only, by every
parser instance and worker thread.
"""
from __future__ import annotations

import re
from functools import lru_cache

# Column order of the bulk-load rows (job_id is appended last).
METRIC_FIELDS: tuple[str, ...] = ("timestamp", "load", "iter", "error_u", "error_phi")

# Characters that may continue a numeric field.
NUMBER_CHARS: frozenset[str] = frozenset("0123456789.e+-")

_TIMESTAMP = r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3}"
_NUMBER = r"[\d.e+-]+"


@lru_cache(maxsize=None)
def job_info_pattern() -> re.Pattern[str]:
    """Header line: ``JobInfo(id='..', name='..', queue='..', n=.., nodes=[..])``."""
    return re.compile(
        r"JobInfo\(.*?\bid='(?P<id>[^']*)'"
        r".*?\bname='(?P<name>[^']*)'"
        r".*?\bqueue='(?P<queue>[^']*)'"
        r".*?\bn=(?P<n>\d+)"
        r".*?\bnodes=\[(?P<nodes>.*)\].*\)"
    )


@lru_cache(maxsize=None)
def params_pattern() -> re.Pattern[str]:
    """Outermost brace-delimited span of the parameter line."""
    return re.compile(r"\{.*\}")


@lru_cache(maxsize=None)
def metric_pattern() -> re.Pattern[str]:
    """Metric line: timestamp, load, iteration and the two error norms."""
    return re.compile(
        rf"(?P<timestamp>{_TIMESTAMP})"
        rf".*?l=(?P<load>{_NUMBER})"
        r".*?iter=(?P<iter>\d+)"
        rf".*?err=\{{ u=(?P<error_u>{_NUMBER}) phi=(?P<error_phi>{_NUMBER})"
    )


@lru_cache(maxsize=None)
def field_patterns() -> tuple[re.Pattern[str], ...]:
    """Per-field shapes, in ``METRIC_FIELDS`` order, used to vet template slices."""
    return (
        re.compile(_TIMESTAMP),
        re.compile(_NUMBER),
        re.compile(r"\d+"),
        re.compile(_NUMBER),
        re.compile(_NUMBER),
    )
