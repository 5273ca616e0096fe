"""
SharedExam model - One publicly shareable exam record with an expiry.

Rows are written once and never updated. A row whose expires_at is at or
before the current epoch second is expired and must not be served, whether
or not a sweep has removed it yet.
"""

from sqlalchemy import Column, Integer, Text, Index

from .base import Base


class SharedExam(Base):
    """
    Shared exam - serialized ExamRecord keyed by an unguessable id.

    Timestamps are integer seconds since the Unix epoch.
    """
    __tablename__ = "shared_exams"

    id = Column(Text, primary_key=True)  # UUID v4 string
    data = Column(Text, nullable=False)  # ExamRecord JSON, stored verbatim
    expires_at = Column(Integer, nullable=False)
    created_at = Column(Integer, nullable=False)

    __table_args__ = (
        # Sweep query: DELETE WHERE expires_at <= now
        Index("ix_shared_exams_expires_at", "expires_at"),
    )

    def __repr__(self):
        return (
            f"<SharedExam(id={self.id}, created_at={self.created_at}, "
            f"expires_at={self.expires_at})>"
        )
