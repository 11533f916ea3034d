from pathlib import Path

import pytest
from advanced_alchemy.exceptions import DuplicateKeyError
from sqlalchemy.exc import SQLAlchemyError

from solvelog.errors import JobConflictError, LogFormatError, LogReadError, StorageError
from solvelog.services.ingestion import service as ingestion_service
from solvelog.services.ingestion.service import BulkImporter
from solvelog.services.logparser.logparser import LogParser

from conftest import SAMPLE_ROWS
from fakes import FakeStorage


class RecordingJobRepository:
    added: list = []
    error: Exception | None = None

    def __init__(self, session) -> None:
        self.session = session

    async def add(self, data, auto_commit: bool = False):
        if self.error is not None:
            raise self.error
        self.added.append((data, auto_commit))
        return data


class RecordingErrorLogRepository:
    copied: list[bytes] = []
    error: Exception | None = None

    def __init__(self, session) -> None:
        self.session = session

    async def copy_rows(self, rows: bytes) -> None:
        if self.error is not None:
            raise self.error
        self.copied.append(rows)


@pytest.fixture
def repositories(monkeypatch):
    """Swap the repositories used by the importer for recording fakes."""
    RecordingJobRepository.added = []
    RecordingJobRepository.error = None
    RecordingErrorLogRepository.copied = []
    RecordingErrorLogRepository.error = None
    monkeypatch.setattr(ingestion_service, "JobInfoRepository", RecordingJobRepository)
    monkeypatch.setattr(ingestion_service, "ErrorLogRepository", RecordingErrorLogRepository)
    return RecordingJobRepository, RecordingErrorLogRepository


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def importer(storage: FakeStorage) -> BulkImporter:
    return BulkImporter(parser=LogParser(workers=1), storage=storage)


@pytest.mark.asyncio
async def test_import_log_stores_job_and_rows(importer: BulkImporter, storage: FakeStorage, repositories, sample_log_file: Path) -> None:
    """Test a successful import inserts the job and copies its rows in one transaction."""
    job_repo, log_repo = repositories

    job_id = await importer.import_log(sample_log_file)

    assert job_id == 666666
    (model, auto_commit), = job_repo.added
    assert auto_commit is False
    assert model.id == 666666
    assert model.name == "test_job"
    assert model.queue == "default"
    assert model.num_cpu == 4
    assert model.nodes == ["node1", "node2"]
    assert model.parameters == "{param1: value1, param2: value2}"
    assert log_repo.copied == [SAMPLE_ROWS]

    (session,) = storage.sessions
    assert (session.began, session.committed, session.rolled_back) == (1, 1, 0)
    assert importer.total_imported == 1
    assert importer.total_rows == 2


@pytest.mark.asyncio
async def test_import_log_missing_file(importer: BulkImporter, storage: FakeStorage, repositories, tmp_path: Path) -> None:
    """Test an unreadable file is reported before touching storage."""
    with pytest.raises(LogReadError):
        await importer.import_log(tmp_path / "missing.log")
    assert storage.reads == 0


@pytest.mark.asyncio
async def test_import_log_not_utf8(importer: BulkImporter, repositories, tmp_path: Path) -> None:
    """Test undecodable content is a read error."""
    path = tmp_path / "binary.log"
    path.write_bytes(b"\xff\xfe\xfa\x00")
    with pytest.raises(LogReadError):
        await importer.import_log(path)


@pytest.mark.asyncio
async def test_import_log_non_numeric_id(importer: BulkImporter, storage: FakeStorage, repositories, sample_log: str, tmp_path: Path) -> None:
    """Test a non-numeric job id stores nothing."""
    path = tmp_path / "bad-id.log"
    path.write_text(sample_log.replace("id='666666'", "id='run-a'"), encoding="utf-8")

    with pytest.raises(LogFormatError) as exc_info:
        await importer.import_log(path)

    assert exc_info.value.stage == "header"
    assert storage.reads == 0
    assert repositories[0].added == []


@pytest.mark.asyncio
async def test_import_log_duplicate_job(importer: BulkImporter, storage: FakeStorage, repositories, sample_log_file: Path) -> None:
    """Test re-importing a job id is a conflict and nothing is committed."""
    job_repo, log_repo = repositories
    job_repo.error = DuplicateKeyError("duplicate key value violates unique constraint")

    with pytest.raises(JobConflictError):
        await importer.import_log(sample_log_file)

    assert log_repo.copied == []
    (session,) = storage.sessions
    assert (session.committed, session.rolled_back) == (0, 1)
    assert importer.total_imported == 0


@pytest.mark.asyncio
async def test_import_log_copy_failure(importer: BulkImporter, storage: FakeStorage, repositories, sample_log_file: Path) -> None:
    """Test a failing bulk load rolls the job back and surfaces a storage error."""
    _, log_repo = repositories
    log_repo.error = SQLAlchemyError("connection reset")

    with pytest.raises(StorageError) as exc_info:
        await importer.import_log(sample_log_file)

    assert not isinstance(exc_info.value, JobConflictError)
    (session,) = storage.sessions
    assert (session.committed, session.rolled_back) == (0, 1)
