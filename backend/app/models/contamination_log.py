"""ContaminationLog — one contamination report against a production batch.

Reports are append-only.  Each one records how many bags were affected and
how bad it was; the batch itself is not moved or changed.  Per-batch and
farm-wide contamination figures are aggregated in
``app.services.analytics``.
"""

import uuid
from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class ContaminationLog(Base):
    __tablename__ = "contamination_logs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    batch_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("production_batches.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )

    reported_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    # e.g. "Green Mold (Trichoderma)", "Bacteria Contamination"
    contamination_type: Mapped[str] = mapped_column(String(100), nullable=False)
    contaminated_bags: Mapped[int] = mapped_column(Integer, nullable=False)
    # Low | Medium | High
    severity: Mapped[str] = mapped_column(String(20), nullable=False)
    corrective_action: Mapped[str] = mapped_column(Text, nullable=False)
    worker_notes: Mapped[str | None] = mapped_column(Text)
    reported_by: Mapped[str | None] = mapped_column(String(100))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<ContaminationLog(batch_id={self.batch_id}, bags={self.contaminated_bags}, severity={self.severity})>"
