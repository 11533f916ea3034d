from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Float, ForeignKey, Identity, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column
from advanced_alchemy.extensions.litestar import base


class ErrorLog(base.DefaultBase):
    """Per-iteration convergence record of a job.

    High-volume time-series data loaded with COPY, so the id is an identity
    column the database fills in.
    """

    __tablename__ = "error_log"

    id: Mapped[int] = mapped_column(BigInteger, Identity(), primary_key=True)

    # Solver wall clock, as written in the log (no time zone)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)

    load: Mapped[float] = mapped_column(Float, nullable=False)
    iter: Mapped[int] = mapped_column(Integer, nullable=False)
    error_u: Mapped[float] = mapped_column(Float, nullable=False)
    error_phi: Mapped[float] = mapped_column(Float, nullable=False)

    job_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("job_info.id", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_error_log_job_timestamp", "job_id", "timestamp"),
        Index("ix_error_log_job_load", "job_id", "load"),
    )

    def __repr__(self) -> str:
        return f"<ErrorLog(id={self.id}, job_id={self.job_id}, load={self.load}, iter={self.iter})>"
