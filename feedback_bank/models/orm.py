import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from feedback_bank.core.database import Base

def utcnow() -> datetime:
    """Naive UTC, so values read back from SQLite compare with fresh ones."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def new_id() -> str:
    return str(uuid.uuid4())

class TimestampMixin:
    """Mixin for automatic timestamp management."""

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def touch(self) -> None:
        # onupdate only fires when a column changed; writes must always refresh updated_at
        self.updated_at = utcnow()

class FeedbackModule(TimestampMixin, Base):
    __tablename__ = "feedback_modules"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=1, index=True)

    questions: Mapped[List["FeedbackQuestion"]] = relationship(
        back_populates="module",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=lambda: [FeedbackQuestion.position, FeedbackQuestion.created_at],
    )
    elements: Mapped[List["FeedbackElement"]] = relationship(
        back_populates="module",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=lambda: [FeedbackElement.position, FeedbackElement.created_at],
    )

    def __repr__(self) -> str:
        return f"<FeedbackModule(id={self.id}, position={self.position})>"

class FeedbackQuestion(TimestampMixin, Base):
    __tablename__ = "feedback_questions"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    module_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("feedback_modules.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    module: Mapped[FeedbackModule] = relationship(back_populates="questions")
    elements: Mapped[List["FeedbackElement"]] = relationship(
        back_populates="question",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=lambda: [FeedbackElement.position, FeedbackElement.created_at],
    )

    def __repr__(self) -> str:
        return f"<FeedbackQuestion(id={self.id}, module_id={self.module_id}, position={self.position})>"

class FeedbackElement(TimestampMixin, Base):
    __tablename__ = "feedback_elements"
    __table_args__ = (
        # an element hangs off a module or a question, never both
        CheckConstraint(
            "(module_id IS NULL) <> (question_id IS NULL)", name="ck_feedback_elements_single_parent"
        ),
    )
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    module_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("feedback_modules.id", ondelete="CASCADE"), nullable=True, index=True
    )
    question_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("feedback_questions.id", ondelete="CASCADE"), nullable=True, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    module: Mapped[Optional[FeedbackModule]] = relationship(back_populates="elements")
    question: Mapped[Optional[FeedbackQuestion]] = relationship(back_populates="elements")

    def __repr__(self) -> str:
        return f"<FeedbackElement(id={self.id}, position={self.position})>"

class SiteSetting(Base):
    __tablename__ = "site_settings"
    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
