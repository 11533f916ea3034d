"""Schemas for parsed log data - pure data, no ORM dependencies."""
from __future__ import annotations

import re
from dataclasses import dataclass, field

from solvelog.errors import LogFormatError
from .constants import METRIC_FIELDS, NUMBER_CHARS, field_patterns


@dataclass
class JobMetadata:
    """Job header extracted from the first line of a solver log.

    ``id`` keeps the text exactly as written in the header; use
    :meth:`numeric_id` to obtain the storage key.
    """

    id: str
    name: str
    queue: str
    n: int
    nodes: list[str] = field(default_factory=list)
    parameters: str | None = None

    def numeric_id(self) -> int:
        """Return the job id as an integer.

        Only plain ASCII digits are accepted, so the id written into every
        row is read back by PostgreSQL as the same number.

        Raises:
            LogFormatError: If the id is not a number.
        """
        if not (self.id.isascii() and self.id.isdigit()):
            raise LogFormatError(f"job id {self.id!r} is not a number", stage="header")
        return int(self.id)


@dataclass(frozen=True)
class ByteRangeTemplate:
    """Field offsets taken from the first metric line of a log.

    Every metric line is assumed to share the template line's column layout,
    so fields can be cut out by offset instead of re-matching.
    """

    spans: tuple[tuple[int, int], ...]

    @classmethod
    def from_match(cls, matched: re.Match[str]) -> "ByteRangeTemplate":
        return cls(spans=tuple(matched.span(name) for name in METRIC_FIELDS))

    def slice(self, line: str) -> tuple[str, ...] | None:
        """Cut the metric fields out of ``line``.

        Returns ``None`` when a slice does not look like its field: it does
        not fully match the field shape, or a neighbouring character would
        extend the number (the line is laid out differently from the template).
        """
        values: list[str] = []
        for (start, end), shape in zip(self.spans, field_patterns()):
            if end > len(line):
                return None
            value = line[start:end]
            if not shape.fullmatch(value):
                return None
            if line[end:end + 1] in NUMBER_CHARS or (start and line[start - 1] in NUMBER_CHARS):
                return None
            values.append(value)
        return tuple(values)
