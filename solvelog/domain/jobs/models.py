from typing import Optional

from sqlalchemy import BigInteger, Integer, String, Text
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Mapped, mapped_column
from advanced_alchemy.extensions.litestar import base


class JobInfo(base.DefaultBase):
    """One imported solver job.

    The primary key is the id written in the log header, not a generated one.
    Deleting a job cascades to its error log records at the database level.
    """

    __tablename__ = "job_info"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    queue: Mapped[str] = mapped_column(String(255), nullable=False)
    num_cpu: Mapped[int] = mapped_column(Integer, nullable=False)
    nodes: Mapped[list[str]] = mapped_column(postgresql.ARRAY(String(255)), nullable=False, default=list)

    # Verbatim `{...}` span from the log; not necessarily valid JSON
    parameters: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<JobInfo(id={self.id}, name={self.name}, queue={self.queue}, num_cpu={self.num_cpu})>"
