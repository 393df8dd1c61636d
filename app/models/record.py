"""
Record row model backing the key-value record store.
Every logical table shares one SQL table; documents are stored as JSON.
"""

from sqlalchemy import String, Integer, JSON, DateTime, UniqueConstraint, Index, func
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base
from datetime import datetime
from typing import Any, Dict


class RecordRow(Base):
    """
    One stored document.

    `seq` is monotonically increasing and gives scans their insertion order
    and their continuation keys.
    """

    __tablename__ = "records"

    seq: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True
    )

    table_name: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        comment="Logical table the document belongs to"
    )

    key: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Primary key of the document within its table"
    )

    data: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        comment="Document body"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    __table_args__ = (
        UniqueConstraint("table_name", "key", name="uq_records_table_key"),
        Index("idx_records_table_seq", "table_name", "seq"),
    )

    def __repr__(self) -> str:
        return f"<RecordRow(table={self.table_name}, key={self.key})>"
