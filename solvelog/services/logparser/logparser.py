import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from functools import partial

from solvelog.errors import LogFormatError
from .constants import METRIC_FIELDS, job_info_pattern, metric_pattern, params_pattern
from .schemas import ByteRangeTemplate, JobMetadata


logger = logging.getLogger(__name__)


class LogParser:
    """Transcodes solver logs into job metadata plus CSV rows for bulk loading.

    A solver log looks like::

        JobInfo(id='666666', name='test_job', queue='default', n=4, nodes=['node1', 'node2'])
        {param1: value1, param2: value2}
        2023-01-01 10:00:00.000 ... l=1.5 ... iter=1 ... err={ u=0.1 phi=0.2 }
        2023-01-01 10:01:00.000 ... l=1.2 ... iter=2 ... err={ u=0.05 phi=0.15 }

    and becomes the rows::

        2023-01-01 10:00:00.000,1.5,1,0.1,0.2,666666
        2023-01-01 10:01:00.000,1.2,2,0.05,0.15,666666

    Parsing holds no per-call state on the instance apart from statistics, so
    one parser can be shared by concurrent imports.
    """

    def __init__(self, workers: int = 4, chunk_size: int = 2048) -> None:
        """
        Args:
            workers (int, optional): Threads used to transcode metric lines. Defaults to 4.
            chunk_size (int, optional): Body lines per worker task. Defaults to 2048.
        """
        self.workers = max(1, workers)
        self.chunk_size = max(1, chunk_size)

        # Statistics
        self.parsed_lines: int = 0
        self.skipped_lines: int = 0
        # Concurrent imports parse on separate threads
        self._stats_lock = threading.Lock()

        logger.debug("Log parser workers: %s, chunk size: %s", self.workers, self.chunk_size)

    def parsed_lines_count(self) -> int:
        """Return the number of metric lines turned into rows."""
        return self.parsed_lines

    def skipped_lines_count(self) -> int:
        """Return the number of body lines dropped as non-metric."""
        return self.skipped_lines

    def parse(self, raw_text: str) -> tuple[JobMetadata, bytes]:
        """Parse a whole solver log.

        Args:
            raw_text: Complete file contents.

        Returns:
            The job metadata and the newline-terminated
            ``timestamp,load,iter,error_u,error_phi,job_id`` rows as UTF-8 bytes.

        Raises:
            LogFormatError: With ``stage`` "header", "params" or "template".
        """
        header, sep, remaining = raw_text.partition("\n")
        if not sep:
            raise LogFormatError("missing line break after the job header", stage="header")
        params_line, sep, body = remaining.partition("\n")
        if not sep:
            raise LogFormatError("missing line break after the parameter line", stage="params")

        metadata = self.parse_header(header, self.parse_params(params_line))

        # Records are separated by "\n" only; other Unicode line breaks stay inside a line
        lines = [line.removesuffix("\r") for line in body.removesuffix("\n").split("\n")]
        template = self.build_template(lines)
        rows = self._transcode(lines, template, metadata.id)
        return metadata, rows.encode("utf-8")

    @staticmethod
    def parse_params(line: str) -> str | None:
        """Return the outermost ``{...}`` span of the parameter line, if any."""
        matched = params_pattern().search(line)
        return matched.group(0) if matched else None

    @staticmethod
    def parse_header(line: str, parameters: str | None = None) -> JobMetadata:
        """Extract the job fields from the header line.

        Raises:
            LogFormatError: If the line is not a ``JobInfo(...)`` statement.
        """
        matched = job_info_pattern().search(line)
        if matched is None:
            raise LogFormatError("cannot parse job info", stage="header")
        nodes = [
            node
            for node in (raw.strip(" '\"") for raw in matched.group("nodes").split(","))
            if node
        ]
        return JobMetadata(
            id=matched.group("id"),
            name=matched.group("name"),
            queue=matched.group("queue"),
            n=int(matched.group("n")),
            nodes=nodes,
            parameters=parameters,
        )

    @staticmethod
    def build_template(lines: list[str]) -> ByteRangeTemplate:
        """Take field offsets from the first line that looks like a metric line.

        Raises:
            LogFormatError: If no line matches.
        """
        pattern = metric_pattern()
        for number, line in enumerate(lines, start=3):
            if matched := pattern.search(line):
                logger.debug("Metric template taken from line %d: %s", number, matched.span())
                return ByteRangeTemplate.from_match(matched)
        raise LogFormatError("no metric line found to build the column template", stage="template")

    @staticmethod
    def transcode_line(line: str, template: ByteRangeTemplate, job_id: str) -> str | None:
        """Turn one body line into a CSV row, or ``None`` if it is not a metric line."""
        matched = metric_pattern().search(line)
        if matched is None:
            return None
        fields = template.slice(line)
        if fields is None:
            # Layout differs from the template line
            fields = matched.group(*METRIC_FIELDS)
        return f"{','.join(fields)},{job_id}\n"

    def _transcode_chunk(
        self, lines: list[str], template: ByteRangeTemplate, job_id: str
    ) -> tuple[str, int]:
        rows = [row for line in lines if (row := self.transcode_line(line, template, job_id))]
        return "".join(rows), len(rows)

    def _transcode(self, lines: list[str], template: ByteRangeTemplate, job_id: str) -> str:
        """Transcode all body lines, preserving source order."""
        transcode = partial(self._transcode_chunk, template=template, job_id=job_id)
        if self.workers == 1 or len(lines) <= self.chunk_size:
            results = [transcode(lines)]
        else:
            chunks = [lines[i:i + self.chunk_size] for i in range(0, len(lines), self.chunk_size)]
            with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="logparser") as executor:
                # map() yields results in submission order
                results = list(executor.map(transcode, chunks))

        kept = sum(count for _, count in results)
        with self._stats_lock:
            self.parsed_lines += kept
            self.skipped_lines += len(lines) - kept
        logger.debug("Transcoded %d metric lines, skipped %d", kept, len(lines) - kept)
        return "".join(text for text, _ in results)
