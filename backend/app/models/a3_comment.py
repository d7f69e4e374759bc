"""A3 comment model."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from app.database import Base


class A3Comment(Base):
    __tablename__ = "a3_comments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    a3_id = Column(String(36), ForeignKey("a3_documents.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    # Set once when the content is overwritten by the deleted sentinel
    deleted_at = Column(DateTime, nullable=True)

    # Relationships
    a3 = relationship("A3Document", back_populates="comments")
    author = relationship("User")
